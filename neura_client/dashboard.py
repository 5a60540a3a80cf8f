"""
Dashboard
Wires the insight manager, settings store and generation orchestrator
together and derives the "Your business today" view.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from neura_client.core.errors import (
    ErrorCode,
    FeedbackValidationError,
    InsightFetchError,
    InsightMutationError,
    NeuraApiError,
    user_message_for,
)
from neura_client.feedback.service import FeedbackService
from neura_client.insights.data_quality import DataQualityLevel
from neura_client.insights.heuristic_score import (
    HealthStatus,
    ScoreBreakdown,
    health_status,
    heuristic_score_from_response,
    score_breakdown,
)
from neura_client.insights.lifecycle import InsightLifecycleManager, MutationOutcome
from neura_client.insights.polling import GenerationOutcome, GenerationResult, PollingOrchestrator
from neura_client.insights.schemas import Insight, InsightsResponse
from neura_client.integrations.xero.connect import XeroConnectService
from neura_client.settings.store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class DashboardView:
    """Snapshot of everything the dashboard page renders."""
    has_insights: bool
    health_score: int
    health_status: HealthStatus
    breakdown: Optional[ScoreBreakdown]
    data_quality: DataQualityLevel
    watch_insights: list[Insight] = field(default_factory=list)
    ok_insights: list[Insight] = field(default_factory=list)
    resolved_insights: list[Insight] = field(default_factory=list)
    calculated_at: Optional[str] = None
    is_generating: bool = False
    show_connect_prompt: bool = False
    error: Optional[str] = None


class Dashboard:
    """
    Page-level coordinator.

    Errors from loads and mutations are recorded on `error` rather than
    raised, so one failed action never takes down the page.
    """

    def __init__(
        self,
        insights: InsightLifecycleManager,
        settings_store: SettingsStore,
        orchestrator: PollingOrchestrator,
        feedback: Optional[FeedbackService] = None,
        xero: Optional[XeroConnectService] = None,
    ):
        self.insights = insights
        self.settings_store = settings_store
        self.orchestrator = orchestrator
        self.feedback = feedback
        self.xero = xero
        self.error: Optional[str] = None
        self.show_connect_prompt = False

    async def load(self) -> None:
        """Initial load: insights and settings in parallel."""
        results = await asyncio.gather(
            self.insights.fetch(),
            self.settings_store.fetch_settings(),
            return_exceptions=True,
        )
        insights_result = results[0]
        if isinstance(insights_result, InsightFetchError):
            self.error = insights_result.message
        elif isinstance(insights_result, BaseException):
            raise insights_result
        else:
            self.error = None

    async def generate_insights(self) -> GenerationResult:
        self.error = None
        result = await self.orchestrator.start()
        if result.outcome == GenerationOutcome.CONNECTION_REQUIRED:
            self.show_connect_prompt = True
        elif result.outcome == GenerationOutcome.FAILED:
            self.error = result.error_message
        return result

    def dismiss_connect_prompt(self) -> None:
        self.show_connect_prompt = False

    async def connect_xero(self) -> Optional[str]:
        """
        Start the Xero connection from the connect prompt.

        Returns:
            Authorization URL for the UI to redirect to, or None on failure
        """
        try:
            response = await self.xero.get_authorization_url()
        except NeuraApiError as e:
            self.error = user_message_for(e, ErrorCode.XERO_CONNECT_FAILED)
            return None

        self.show_connect_prompt = False
        return response.authorization_url

    async def submit_feedback(
        self,
        insight_id: str,
        is_helpful: bool,
        comment: Optional[str] = None,
    ) -> bool:
        insight = self.insights.find(insight_id)
        if insight is None:
            logger.warning("Feedback for unknown insight %s ignored", insight_id)
            return False

        try:
            await self.feedback.submit_feedback(insight, is_helpful, comment)
        except (FeedbackValidationError, NeuraApiError) as e:
            self.error = user_message_for(e, ErrorCode.FEEDBACK_FAILED)
            return False
        return True

    async def resolve(self, insight_id: str) -> Optional[MutationOutcome]:
        try:
            return await self.insights.resolve(insight_id)
        except InsightMutationError as e:
            self.error = e.message
            return None

    async def acknowledge(self, insight_id: str) -> Optional[MutationOutcome]:
        try:
            return await self.insights.acknowledge(insight_id)
        except InsightMutationError as e:
            self.error = e.message
            return None

    def view(self) -> DashboardView:
        response: Optional[InsightsResponse] = self.insights.response
        score = heuristic_score_from_response(response)
        return DashboardView(
            has_insights=self.insights.has_insights,
            health_score=score,
            health_status=health_status(score),
            breakdown=score_breakdown(response) if response else None,
            data_quality=self.insights.data_quality,
            watch_insights=self.insights.watch_insights,
            ok_insights=self.insights.ok_insights,
            resolved_insights=self.insights.resolved_insights,
            calculated_at=response.calculated_at if response else None,
            is_generating=self.orchestrator.is_generating,
            show_connect_prompt=self.show_connect_prompt,
            error=self.error,
        )
