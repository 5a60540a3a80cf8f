"""
Error Handling Utilities
Provides the client exception taxonomy and sanitized user-facing messages.
"""

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes for UI handling."""

    # Connection errors
    XERO_CONNECTION_REQUIRED = "xero_connection_required"
    XERO_CONNECT_FAILED = "xero_connect_failed"
    AUTH_EXPIRED = "auth_expired"
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Insight errors
    INSIGHTS_LOAD_FAILED = "insights_load_failed"
    INSIGHT_RESOLVE_FAILED = "insight_resolve_failed"
    INSIGHT_ACKNOWLEDGE_FAILED = "insight_acknowledge_failed"
    INSIGHT_GENERATION_FAILED = "insight_generation_failed"

    # Sibling features
    SETTINGS_LOAD_FAILED = "settings_load_failed"
    FEEDBACK_FAILED = "feedback_failed"
    AI_CONFIG_FAILED = "ai_config_failed"

    # General errors
    VALIDATION_ERROR = "validation_error"
    INTERNAL_ERROR = "internal_error"


# User-friendly error messages
ERROR_MESSAGES = {
    ErrorCode.XERO_CONNECTION_REQUIRED: "Connect your Xero account to generate insights.",
    ErrorCode.XERO_CONNECT_FAILED: "Failed to start the Xero connection. Please try again.",
    ErrorCode.AUTH_EXPIRED: "Your session has expired. Please sign in again.",
    ErrorCode.SERVICE_UNAVAILABLE: "Service temporarily unavailable. Please try again in a moment.",
    ErrorCode.INSIGHTS_LOAD_FAILED: "Failed to load dashboard data",
    ErrorCode.INSIGHT_RESOLVE_FAILED: "Failed to resolve insight",
    ErrorCode.INSIGHT_ACKNOWLEDGE_FAILED: "Failed to acknowledge insight",
    ErrorCode.INSIGHT_GENERATION_FAILED: "Failed to generate insights",
    ErrorCode.SETTINGS_LOAD_FAILED: "Failed to load settings",
    ErrorCode.FEEDBACK_FAILED: "Failed to submit feedback. Please try again.",
    ErrorCode.AI_CONFIG_FAILED: "Failed to save AI config",
    ErrorCode.VALIDATION_ERROR: "Invalid request. Please check your input and try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again later.",
}


class NeuraApiError(Exception):
    """Exception for failed calls against the Neura backend."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        self.error_code = error_code
        super().__init__(self.message)


class InsightFetchError(NeuraApiError):
    """Loading the insight collection failed."""


class InsightMutationError(NeuraApiError):
    """Acknowledge or resolve failed; local state was left unchanged."""

    def __init__(self, message: str, insight_id: str, **kwargs):
        self.insight_id = insight_id
        super().__init__(message, **kwargs)


class FeedbackValidationError(ValueError):
    """Feedback payload rejected before it was sent."""


def sanitize_error_message(
    exception: Exception,
    error_code: ErrorCode,
    log_details: bool = True,
) -> str:
    """
    Sanitize error message for user-facing display.

    Logs full exception details internally but returns user-friendly message.

    Args:
        exception: The exception that occurred
        error_code: Error code for categorization
        log_details: Whether to log full exception details

    Returns:
        User-friendly error message
    """
    if log_details:
        logger.error(
            "Error [%s]: %s",
            error_code.value,
            str(exception),
            exc_info=exception,
        )

    return ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])


def get_error_code_for_exception(exception: Exception, default: ErrorCode = ErrorCode.INTERNAL_ERROR) -> ErrorCode:
    """
    Map an exception to the error code the UI should show.

    Transport-level codes (expired session, backend down) win over the
    operation-specific default.
    """
    if isinstance(exception, NeuraApiError):
        if exception.error_code in (ErrorCode.AUTH_EXPIRED, ErrorCode.SERVICE_UNAVAILABLE):
            return exception.error_code
        return default

    if isinstance(exception, ValueError):
        return ErrorCode.VALIDATION_ERROR

    return default


def user_message_for(exception: Exception, default: ErrorCode) -> str:
    """Error code lookup plus sanitized message in one step."""
    return sanitize_error_message(exception, get_error_code_for_exception(exception, default))
