"""
Settings Schemas
Response and request models for settings endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class IntegrationStatus(BaseModel):
    """Integration connection status."""

    is_connected: bool = Field(..., description="Whether integration is connected")
    status: str = Field(..., description="Connection status")
    connected_at: Optional[datetime] = Field(None, description="When connection was established")
    last_synced_at: Optional[datetime] = Field(None, description="Last successful data sync")
    needs_reconnect: bool = Field(False, description="Whether reconnection is needed")
    xero_org_name: Optional[str] = Field(None, description="Connected Xero organization name")


class SettingsData(BaseModel):
    """Complete settings response."""

    email: EmailStr = Field(..., description="User email address")
    organization_name: Optional[str] = Field(None, description="Organization name")
    xero_integration: IntegrationStatus = Field(..., description="Xero integration status")
    last_sync_time: Optional[datetime] = Field(None, description="Last time insights were calculated")
    support_link: Optional[str] = Field(None, description="Support contact link")


class AIProviderConfig(BaseModel):
    """AI provider configuration as reported by the backend."""

    active_provider: str
    validation_status: str = "untested"
    last_tested_at: Optional[datetime] = None
    available_providers: list[str] = Field(default_factory=lambda: ["openai", "anthropic", "gemini"])
    has_key_configured: bool = False
    temperature: float = 0.1
    top_p: float = 1.0
    model: Optional[str] = None


class AIProviderUpdateRequest(BaseModel):
    """Request to change the AI provider."""

    provider: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1, description="Provider API key (write-only)")
    model: Optional[str] = None
    temperature: float = Field(0.1, ge=0.0, le=2.0)
    top_p: float = Field(1.0, ge=0.0, le=1.0)


class TestConnectionResponse(BaseModel):
    """Result of testing the configured provider key."""

    __test__ = False  # not a pytest test class

    valid: bool
    message: str
    tested_at: Optional[datetime] = None
