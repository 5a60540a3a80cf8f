"""
Insights Schemas
Pydantic models for the insights API responses and requests.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Insight severity levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConfidenceLevel(str, Enum):
    """Insight confidence levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SupportingNumber(BaseModel):
    """A labelled figure backing an insight."""

    label: str = Field(..., description="Display label")
    value: Union[float, str] = Field(..., description="Numeric value or preformatted text")


class Insight(BaseModel):
    """A single generated insight."""

    model_config = ConfigDict(extra="allow", frozen=True)

    insight_id: str = Field(..., description="Unique insight identifier")
    insight_type: str = Field(..., description="Type of insight (cash_runway, upcoming_commitment, etc.)")
    title: str = Field(..., description="Plain-English headline")
    severity: Severity = Field(..., description="Severity level: high, medium, or low")
    confidence_level: ConfidenceLevel = Field(..., description="Confidence level: high, medium, or low")
    summary: str = Field(..., description="1-2 sentence summary")
    why_it_matters: str = Field(..., description="Why this matters now")
    recommended_actions: list[str] = Field(default_factory=list, description="Ordered actionable steps")
    supporting_numbers: list[SupportingNumber] = Field(default_factory=list, description="Key numbers")
    data_notes: Optional[str] = Field(None, description="Notes about data quality or limitations")
    generated_at: datetime = Field(..., description="When the insight was generated")
    is_acknowledged: bool = Field(False, description="Whether the user has acknowledged this insight")
    is_marked_done: bool = Field(False, description="Whether the user has marked this as done")


class CashRunwayMetrics(BaseModel):
    """Cash runway metrics."""

    model_config = ConfigDict(extra="allow")

    current_cash: float = Field(0.0, description="Current cash balance")
    monthly_burn_rate: float = Field(0.0, description="Monthly net burn rate")
    runway_months: Optional[float] = Field(None, description="Cash runway in months (None if infinite)")
    status: str = Field(..., description="Runway status: healthy, warning, critical, negative, or infinite")
    confidence_level: Optional[str] = Field(None, description="High, Medium or Low")


class CashPressureMetrics(BaseModel):
    """Cash pressure traffic light."""

    model_config = ConfigDict(extra="allow")

    status: str = Field(..., description="GREEN, AMBER or RED")
    confidence: Optional[str] = Field(None, description="high, medium or low")


class ProfitabilityMetrics(BaseModel):
    """Profitability metrics."""

    model_config = ConfigDict(extra="allow")

    revenue: Optional[float] = None
    gross_margin_pct: Optional[float] = None
    net_profit: Optional[float] = None
    risk_level: str = Field(..., description="Risk level: low, medium, or high")


class UpcomingBill(BaseModel):
    """A large bill falling due soon."""

    label: str
    amount: float
    due_date: str


class UpcomingCommitmentsMetrics(BaseModel):
    """Upcoming commitments metrics."""

    model_config = ConfigDict(extra="allow")

    upcoming_amount: float = 0.0
    upcoming_count: int = 0
    days_ahead: int = 0
    large_upcoming_bills: list[UpcomingBill] = Field(default_factory=list)
    squeeze_risk: str = Field("low", description="Squeeze risk level")


class Pagination(BaseModel):
    """Paging block returned with paged insight lists."""

    total: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 1


class InsightsResponse(BaseModel):
    """Complete insights snapshot."""

    model_config = ConfigDict(extra="allow")

    cash_runway: Optional[CashRunwayMetrics] = None
    cash_pressure: Optional[CashPressureMetrics] = None
    profitability: Optional[ProfitabilityMetrics] = None
    upcoming_commitments: Optional[UpcomingCommitmentsMetrics] = None
    insights: list[Insight] = Field(default_factory=list)
    calculated_at: Optional[str] = Field(None, description="ISO timestamp when insights were calculated")
    pagination: Optional[Pagination] = None


class InsightUpdateRequest(BaseModel):
    """PATCH body for an insight's engagement flags."""

    is_marked_done: Optional[bool] = None
    is_acknowledged: Optional[bool] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
