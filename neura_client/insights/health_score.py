"""
Business Health Score Aggregator

Turns a backend health score payload (schema bhs.v1) into what the
dashboard displays:
- Final score (confidence-capped, clamped to 0-100)
- Grade with label and description
- Per-category percentage and trend arrow for categories A-E
- Ranked key drivers and "what to fix first"

The backend owns the scoring rules. Nothing here recomputes category
points; it only derives presentation values from them.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class Grade(str, Enum):
    """Health Score grades."""
    A = "A"  # Strong: 85-100
    B = "B"  # Stable: 60-84
    C = "C"  # Risk: 40-59
    D = "D"  # Critical: <40


class Confidence(str, Enum):
    """Data confidence levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MetricStatus(str, Enum):
    """Status of a metric calculation."""
    OK = "ok"              # Calculated successfully
    MISSING = "missing"    # Data not available
    ESTIMATED = "estimated"  # Estimated from partial data


class Trend(str, Enum):
    """Trend arrow for a category."""
    UP = "up"
    FLAT = "flat"
    DOWN = "down"


class SignalSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


# ============================================
# Payload models (bhs.v1)
# ============================================

class _PointsModel(BaseModel):
    max_points: float = Field(..., ge=0)
    points_awarded: float

    @model_validator(mode="after")
    def _clamp_points(self):
        # Weight redistribution for short histories can award more than max_points
        clamped = min(max(self.points_awarded, 0.0), self.max_points)
        if clamped != self.points_awarded:
            logger.warning(
                "points_awarded %.1f outside [0, %.1f], clamping",
                self.points_awarded,
                self.max_points,
            )
            self.points_awarded = clamped
        return self


class CategoryScore(_PointsModel):
    """Category score (A, B, C, D, or E)."""

    model_config = ConfigDict(extra="allow")

    category_id: str
    name: str
    metrics: list[str] = Field(default_factory=list)


class SubScore(_PointsModel):
    """Individual metric sub-score."""

    model_config = ConfigDict(extra="allow")

    metric_id: str
    name: str
    status: MetricStatus
    value: Optional[float] = None
    formula: str = ""
    inputs_used: list[str] = Field(default_factory=list)


class Driver(BaseModel):
    """Score driver (positive or negative)."""

    metric_id: str
    label: str
    impact_points: float  # Positive for lift, negative for drag
    why_it_matters: str = ""
    recommended_action: str = ""


class Drivers(BaseModel):
    top_positive: list[Driver] = Field(default_factory=list)
    top_negative: list[Driver] = Field(default_factory=list)


class DataQualitySignal(BaseModel):
    signal_id: str
    severity: SignalSeverity
    message: str


class DataQuality(BaseModel):
    signals: list[DataQualitySignal] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ScorecardSummary(BaseModel):
    raw_score: float
    confidence: Confidence
    confidence_cap: float
    final_score: Optional[float] = None
    grade: Optional[Grade] = None


class HealthScorePayload(BaseModel):
    """Complete health score snapshot as produced by the backend."""

    model_config = ConfigDict(extra="allow")

    schema_version: str = "bhs.v1"
    generated_at: Optional[str] = None
    scorecard: ScorecardSummary
    category_scores: dict[str, CategoryScore] = Field(default_factory=dict)
    subscores: dict[str, SubScore] = Field(default_factory=dict)
    drivers: Drivers = Field(default_factory=Drivers)
    data_quality: DataQuality = Field(default_factory=DataQuality)


# ============================================
# Presentation output
# ============================================

@dataclass(frozen=True)
class CategoryView:
    """One row of the category breakdown."""
    category_id: str
    name: str
    points_awarded: float
    max_points: float
    percentage: float
    trend: Optional[Trend]  # None when max_points is 0 ("n/a")


@dataclass(frozen=True)
class HeadlineMetric:
    """One of the three boxes under the score."""
    label: str
    value: int
    trend: Optional[Trend]


@dataclass
class AggregatedScore:
    """Everything the health score card renders."""
    final_score: float
    grade: Grade
    grade_label: str
    grade_description: str
    confidence: Confidence
    confidence_label: str
    categories: list[CategoryView] = field(default_factory=list)
    headline_metrics: list[HeadlineMetric] = field(default_factory=list)
    key_drivers_negative: list[Driver] = field(default_factory=list)
    key_drivers_positive: list[Driver] = field(default_factory=list)
    fix_first: list[Driver] = field(default_factory=list)
    primary_warning: Optional[str] = None

    @property
    def display_score(self) -> int:
        return int(round(self.final_score))

    @property
    def driver_list(self) -> list[Driver]:
        """Key drivers in display order: negatives first, then positives."""
        return self.key_drivers_negative + self.key_drivers_positive


class ScoreAggregator:
    """
    Derives display values from a HealthScorePayload.

    All methods are pure; the payload is never mutated.
    """

    CATEGORY_ORDER = ("A", "B", "C", "D", "E")

    GRADE_THRESHOLDS = {
        Grade.A: 85,
        Grade.B: 60,
        Grade.C: 40,
        Grade.D: 0,
    }

    GRADE_PRESENTATION = {
        Grade.A: (
            "Healthy",
            "Your business is performing excellently with strong cash flow and low risks.",
        ),
        Grade.B: (
            "Healthy",
            "Your business is performing well with stable cash flow and manageable risks. "
            "A few items need attention but nothing urgent.",
        ),
        Grade.C: (
            "At Risk",
            "Your business needs attention. Cash flow challenges and some risks require monitoring.",
        ),
        Grade.D: (
            "Critical",
            "Your business requires immediate attention. Significant cash flow and risk concerns.",
        ),
    }

    CONFIDENCE_LABELS = {
        Confidence.HIGH: "High confidence",
        Confidence.MEDIUM: "Medium confidence",
        Confidence.LOW: "Low confidence",
    }

    # Headline boxes: (label, category)
    HEADLINE_CATEGORIES = (
        ("Cash position", "A"),
        ("Revenue", "B"),
        ("Expenses", "D"),
    )

    KEY_DRIVER_LIMIT = 3
    FIX_FIRST_LIMIT = 3

    @staticmethod
    def final_score(raw_score: float, confidence_cap: float) -> float:
        """Confidence-capped score, clamped to [0, 100]."""
        return max(0.0, min(100.0, min(raw_score, confidence_cap)))

    @staticmethod
    def grade_for_score(score: float) -> Grade:
        """Get grade from score. Only used when the payload carries no grade."""
        for grade, threshold in ScoreAggregator.GRADE_THRESHOLDS.items():
            if score >= threshold:
                return grade
        return Grade.D

    @staticmethod
    def category_percentage(category: CategoryScore) -> float:
        if category.max_points == 0:
            return 0.0
        return category.points_awarded / category.max_points * 100

    @staticmethod
    def trend_for_percentage(percentage: float) -> Trend:
        if percentage >= 70:
            return Trend.UP
        elif percentage >= 50:
            return Trend.FLAT
        else:
            return Trend.DOWN

    @staticmethod
    def category_view(category: CategoryScore) -> CategoryView:
        percentage = ScoreAggregator.category_percentage(category)
        trend = None if category.max_points == 0 else ScoreAggregator.trend_for_percentage(percentage)
        return CategoryView(
            category_id=category.category_id,
            name=category.name,
            points_awarded=category.points_awarded,
            max_points=category.max_points,
            percentage=percentage,
            trend=trend,
        )

    @staticmethod
    def rank_drivers(drivers: list[Driver]) -> list[Driver]:
        """Sort by descending absolute impact. Stable for equal impacts."""
        return sorted(drivers, key=lambda d: abs(d.impact_points), reverse=True)

    @classmethod
    def aggregate(cls, payload: HealthScorePayload) -> AggregatedScore:
        """
        Build the health score card view.

        Args:
            payload: Parsed health score snapshot

        Returns:
            AggregatedScore with final score, grade, confidence and ranked drivers
        """
        scorecard = payload.scorecard
        final = cls.final_score(scorecard.raw_score, scorecard.confidence_cap)

        grade = scorecard.grade
        if grade is None:
            grade = cls.grade_for_score(final)
            logger.debug("Payload has no grade, derived %s from score %.1f", grade.value, final)
        grade_label, grade_description = cls.GRADE_PRESENTATION[grade]

        ordered_keys = [k for k in cls.CATEGORY_ORDER if k in payload.category_scores]
        ordered_keys += sorted(k for k in payload.category_scores if k not in cls.CATEGORY_ORDER)
        categories = [cls.category_view(payload.category_scores[k]) for k in ordered_keys]

        headline_metrics = []
        for label, key in cls.HEADLINE_CATEGORIES:
            category = payload.category_scores.get(key)
            if category is None:
                continue
            view = cls.category_view(category)
            headline_metrics.append(
                HeadlineMetric(label=label, value=int(round(view.percentage)), trend=view.trend)
            )

        negative = cls.rank_drivers(payload.drivers.top_negative)
        positive = cls.rank_drivers(payload.drivers.top_positive)

        warnings = payload.data_quality.warnings

        return AggregatedScore(
            final_score=final,
            grade=grade,
            grade_label=grade_label,
            grade_description=grade_description,
            confidence=scorecard.confidence,
            confidence_label=cls.CONFIDENCE_LABELS[scorecard.confidence],
            categories=categories,
            headline_metrics=headline_metrics,
            key_drivers_negative=negative[:cls.KEY_DRIVER_LIMIT],
            key_drivers_positive=positive[:cls.KEY_DRIVER_LIMIT],
            fix_first=negative[:cls.FIX_FIRST_LIMIT],
            primary_warning=warnings[0] if warnings else None,
        )


def aggregate(payload: HealthScorePayload) -> AggregatedScore:
    """Module-level shortcut for ScoreAggregator.aggregate."""
    return ScoreAggregator.aggregate(payload)
