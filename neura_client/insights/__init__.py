"""
Insights Module
Health score aggregation, insight lifecycle, and generation polling.
"""

from neura_client.insights.health_score import ScoreAggregator, aggregate
from neura_client.insights.heuristic_score import health_status, heuristic_score
from neura_client.insights.lifecycle import InsightLifecycleManager
from neura_client.insights.polling import PollingOrchestrator

__all__ = [
    "ScoreAggregator",
    "aggregate",
    "heuristic_score",
    "health_status",
    "InsightLifecycleManager",
    "PollingOrchestrator",
]
