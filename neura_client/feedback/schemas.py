"""
Feedback Schemas
Pydantic models for feedback API requests and responses.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class FeedbackSubmitRequest(BaseModel):
    """Request to submit feedback on an insight."""

    insight_id: str = Field(..., description="Unique identifier of the insight")
    insight_type: str = Field(..., description="Type of insight")
    insight_title: str = Field(..., description="Title of the insight")
    is_helpful: bool = Field(..., description="Whether the insight was helpful (true) or not helpful (false)")
    comment: Optional[str] = Field(None, description="Optional comment (max 500 characters)")

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: Optional[str]) -> Optional[str]:
        """Validate comment length; blank comments are dropped."""
        if v is not None and len(v) > 500:
            raise ValueError("Comment must be 500 characters or less")
        return v or None


class FeedbackResponse(BaseModel):
    """Response after submitting feedback."""

    id: str = Field(..., description="Feedback ID")
    message: str = Field(..., description="Success message")
    created_at: str = Field(..., description="ISO timestamp when feedback was created")
    updated_at: Optional[str] = Field(None, description="ISO timestamp when feedback was updated (if updated)")
