"""
Data Quality Classification
Rates an insights snapshot as Good, Mixed or Low from its metric confidence fields.
"""

from enum import Enum
from typing import Optional

from neura_client.insights.schemas import InsightsResponse


class DataQualityLevel(str, Enum):
    GOOD = "Good"
    MIXED = "Mixed"
    LOW = "Low"


def _confidence_values(response: InsightsResponse) -> list[str]:
    values: list[Optional[str]] = [
        response.cash_runway.confidence_level if response.cash_runway else None,
        response.cash_pressure.confidence if response.cash_pressure else None,
    ]
    return [v.lower() for v in values if v]


def classify_data_quality(response: InsightsResponse) -> DataQualityLevel:
    """
    Any low confidence → Low; otherwise any medium → Mixed; otherwise Good.

    The backend sends "Low"/"Medium" on cash runway and "low"/"medium" on
    cash pressure, so the comparison is case-insensitive.
    """
    values = _confidence_values(response)
    if "low" in values:
        return DataQualityLevel.LOW
    if "medium" in values:
        return DataQualityLevel.MIXED
    return DataQualityLevel.GOOD
