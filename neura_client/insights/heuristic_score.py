"""
Heuristic Health Score

Lightweight 0-100 score for the dashboard when no full scorecard exists.
Derived from three independent status signals:
- Cash runway status (healthy, warning, critical, negative, infinite)
- Cash pressure status (GREEN, AMBER, RED)
- Profitability risk level (low, medium, high)

This is a separate algorithm from ScoreAggregator and must stay that way.
"""

from dataclasses import dataclass
from typing import Optional

from neura_client.insights.schemas import InsightsResponse

BASE_SCORE = 50

CASH_RUNWAY_POINTS = {
    "healthy": 30,
    "warning": 15,
    "critical": 5,
    "negative": -20,
    "infinite": 30,  # Profitable, gets full points
}

CASH_PRESSURE_POINTS = {
    "GREEN": 25,
    "AMBER": 12,
    "RED": -10,
}

PROFITABILITY_RISK_POINTS = {
    "low": 25,
    "medium": 10,
    "high": -10,
}

# Status colours are part of the UI contract
HEALTHY_COLOR = "#079455"
AT_RISK_COLOR = "#f59e0b"
TAKE_ACTION_COLOR = "#d92d20"
NEUTRAL_TONE = "neutral"


@dataclass(frozen=True)
class HealthStatus:
    label: str
    color: str
    description: str


@dataclass(frozen=True)
class BreakdownItem:
    """One box in the dashboard score breakdown."""
    label: str
    score: int
    arrow: str  # ↑, → or ↓
    tone: str   # a status colour or NEUTRAL_TONE


@dataclass(frozen=True)
class ScoreBreakdown:
    cash_position: BreakdownItem
    revenue: BreakdownItem
    expenses: BreakdownItem

    def as_list(self) -> list[BreakdownItem]:
        return [self.cash_position, self.revenue, self.expenses]


def heuristic_score(
    cash_runway_status: Optional[str],
    cash_pressure_status: Optional[str],
    profitability_risk: Optional[str],
) -> int:
    """
    Calculate the heuristic business health score.

    Any unrecognized or missing status contributes 0.

    Returns:
        Score clamped to [0, 100]
    """
    score = BASE_SCORE
    score += CASH_RUNWAY_POINTS.get(cash_runway_status, 0) if cash_runway_status else 0
    score += CASH_PRESSURE_POINTS.get(cash_pressure_status, 0) if cash_pressure_status else 0
    score += PROFITABILITY_RISK_POINTS.get(profitability_risk, 0) if profitability_risk else 0
    return max(0, min(100, score))


def heuristic_score_from_response(response: Optional[InsightsResponse]) -> int:
    """Heuristic score for an insights snapshot. No snapshot scores 0."""
    if response is None:
        return 0
    return heuristic_score(
        response.cash_runway.status if response.cash_runway else None,
        response.cash_pressure.status if response.cash_pressure else None,
        response.profitability.risk_level if response.profitability else None,
    )


def health_status(score: int) -> HealthStatus:
    """Map a heuristic score to its status label, colour and description."""
    if score >= 60:
        return HealthStatus(
            label="Healthy",
            color=HEALTHY_COLOR,
            description=(
                "Your business is performing well with stable cash flow and manageable risks. "
                "A few items need attention but nothing urgent."
            ),
        )
    elif score >= 40:
        return HealthStatus(
            label="At Risk",
            color=AT_RISK_COLOR,
            description=(
                "Your business shows some areas of concern. "
                "Monitor cash flow closely and address key issues promptly."
            ),
        )
    else:
        return HealthStatus(
            label="Take Action",
            color=TAKE_ACTION_COLOR,
            description=(
                "Your business requires immediate attention. "
                "Take action on critical issues to improve financial health."
            ),
        )


def _cash_position(response: InsightsResponse) -> BreakdownItem:
    if not response.cash_runway:
        return BreakdownItem("Cash position", 0, "→", NEUTRAL_TONE)
    status = response.cash_runway.status
    if status in ("infinite", "healthy"):
        return BreakdownItem("Cash position", 85, "↑", HEALTHY_COLOR)
    if status == "warning":
        return BreakdownItem("Cash position", 65, "→", AT_RISK_COLOR)
    if status == "critical":
        return BreakdownItem("Cash position", 45, "↓", TAKE_ACTION_COLOR)
    return BreakdownItem("Cash position", 25, "↓", TAKE_ACTION_COLOR)


def _revenue(response: InsightsResponse) -> BreakdownItem:
    if not response.profitability:
        return BreakdownItem("Revenue", 0, "→", NEUTRAL_TONE)
    risk = response.profitability.risk_level
    if risk == "low":
        return BreakdownItem("Revenue", 85, "↑", HEALTHY_COLOR)
    if risk == "medium":
        return BreakdownItem("Revenue", 65, "→", AT_RISK_COLOR)
    return BreakdownItem("Revenue", 45, "↓", TAKE_ACTION_COLOR)


def _expenses(response: InsightsResponse) -> BreakdownItem:
    # Lower profitability risk reads as better expense management.
    # High risk shows an up arrow: expenses are rising.
    if not response.profitability:
        return BreakdownItem("Expenses", 0, "→", NEUTRAL_TONE)
    risk = response.profitability.risk_level
    if risk == "low":
        return BreakdownItem("Expenses", 80, "→", HEALTHY_COLOR)
    if risk == "medium":
        return BreakdownItem("Expenses", 60, "→", AT_RISK_COLOR)
    return BreakdownItem("Expenses", 40, "↑", TAKE_ACTION_COLOR)


def score_breakdown(response: InsightsResponse) -> ScoreBreakdown:
    """Cash position, revenue and expenses boxes for the dashboard card."""
    return ScoreBreakdown(
        cash_position=_cash_position(response),
        revenue=_revenue(response),
        expenses=_expenses(response),
    )
