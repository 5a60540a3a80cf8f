"""
Xero Integration Schemas
Response models for the Xero connect endpoint.
"""

from pydantic import BaseModel, Field


class XeroAuthURLResponse(BaseModel):
    """Response containing Xero authorization URL."""

    authorization_url: str = Field(
        ...,
        description="URL to send the user to for Xero authorization"
    )
    state: str = Field(
        ...,
        description="State token for CSRF protection"
    )
