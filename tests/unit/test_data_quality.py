"""Unit tests for data quality classification."""

import pytest

from neura_client.insights.data_quality import DataQualityLevel, classify_data_quality
from neura_client.insights.schemas import InsightsResponse


def _response(make_response, runway_confidence, pressure_confidence) -> InsightsResponse:
    return InsightsResponse.model_validate(
        make_response(
            cash_runway={"status": "healthy", "confidence_level": runway_confidence},
            cash_pressure={"status": "GREEN", "confidence": pressure_confidence},
        )
    )


@pytest.mark.parametrize(
    "runway,pressure,expected",
    [
        ("High", "high", DataQualityLevel.GOOD),
        ("Medium", "high", DataQualityLevel.MIXED),
        ("High", "medium", DataQualityLevel.MIXED),
        ("Low", "medium", DataQualityLevel.LOW),
        ("Medium", "low", DataQualityLevel.LOW),
        ("LOW", None, DataQualityLevel.LOW),
        (None, None, DataQualityLevel.GOOD),
    ],
)
def test_classification(make_response, runway, pressure, expected):
    assert classify_data_quality(_response(make_response, runway, pressure)) == expected


def test_missing_metric_blocks_are_good(make_response):
    response = InsightsResponse.model_validate(make_response(cash_runway=None, cash_pressure=None))
    assert classify_data_quality(response) == DataQualityLevel.GOOD
