"""
Feedback Service
Sends helpful / not helpful feedback on an insight.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from neura_client.core.errors import FeedbackValidationError
from neura_client.core.http import ApiClient
from neura_client.feedback.schemas import FeedbackResponse, FeedbackSubmitRequest
from neura_client.insights.schemas import Insight

logger = logging.getLogger(__name__)


class FeedbackService:
    FEEDBACK_PATH = "/api/feedback/"

    def __init__(self, api: ApiClient):
        self.api = api

    async def submit_feedback(
        self,
        insight: Insight,
        is_helpful: bool,
        comment: Optional[str] = None,
    ) -> FeedbackResponse:
        """
        Submit feedback for an insight.

        Raises:
            FeedbackValidationError: Comment too long (nothing is sent)
            NeuraApiError: Request failed
        """
        try:
            request = FeedbackSubmitRequest(
                insight_id=insight.insight_id,
                insight_type=insight.insight_type,
                insight_title=insight.title,
                is_helpful=is_helpful,
                comment=comment,
            )
        except ValidationError as e:
            raise FeedbackValidationError(str(e.errors()[0]["msg"])) from e

        data = await self.api.post(self.FEEDBACK_PATH, json=request.model_dump(exclude_none=True))
        logger.info("Feedback submitted for insight %s (helpful=%s)", insight.insight_id, is_helpful)
        return FeedbackResponse.model_validate(data)
