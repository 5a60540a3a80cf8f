"""Insight feedback."""

from neura_client.feedback.service import FeedbackService

__all__ = ["FeedbackService"]
