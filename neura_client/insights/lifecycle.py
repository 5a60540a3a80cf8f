"""
Insight Lifecycle Manager
Owns the current user's insight collection: loading, filtering, paging,
and the acknowledge / resolve transitions.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from neura_client.core.errors import (
    ErrorCode,
    InsightFetchError,
    InsightMutationError,
    NeuraApiError,
    user_message_for,
)
from neura_client.core.http import ApiClient
from neura_client.insights.data_quality import DataQualityLevel, classify_data_quality
from neura_client.insights.schemas import (
    Insight,
    InsightsResponse,
    InsightUpdateRequest,
    Pagination,
    Severity,
)

logger = logging.getLogger(__name__)


class InsightState(str, Enum):
    """Lifecycle state derived from an insight's flags."""
    ACTIVE_UNACKNOWLEDGED = "active_unacknowledged"
    ACTIVE_ACKNOWLEDGED = "active_acknowledged"
    RESOLVED = "resolved"


class SeverityFilter(str, Enum):
    ALL = "all"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    RESOLVED = "resolved"


class CardType(str, Enum):
    WATCH = "WATCH"
    OK = "OK"


class CardAction(str, Enum):
    RESOLVE = "resolve"
    ACKNOWLEDGE = "acknowledge"


class MutationOutcome(str, Enum):
    APPLIED = "applied"
    IGNORED = "ignored"  # another mutation for the same id was in flight


@dataclass(frozen=True)
class InsightCard:
    """Presentation bucket for one insight."""
    insight: Insight
    card_type: CardType
    action: CardAction
    is_loading: bool


def insight_state(insight: Insight) -> InsightState:
    if insight.is_marked_done:
        return InsightState.RESOLVED
    if insight.is_acknowledged:
        return InsightState.ACTIVE_ACKNOWLEDGED
    return InsightState.ACTIVE_UNACKNOWLEDGED


class InsightLifecycleManager:
    """
    Insight collection for the signed-in user.

    Severity filtering is sent to the backend with the page request.
    Status filtering is applied locally to the current page only, so the
    reported total and page count do not change with it.

    Mutations are guarded by a set of pending insight ids: a second
    acknowledge/resolve for an id that is already in flight is ignored
    without touching the network.
    """

    INSIGHTS_PATH = "/api/insights/"

    WATCH_LIMIT = 3
    RESOLVED_LIMIT = 5
    PAGE_WINDOW = 5

    def __init__(self, api: ApiClient, page_size: Optional[int] = None):
        """
        Initialize the manager.

        Args:
            api: Backend client
            page_size: Page size for list requests. None fetches the
                unpaged collection (dashboard view).
        """
        self.api = api
        self.page_size = page_size

        self.response: Optional[InsightsResponse] = None
        self.pagination = Pagination(page_size=page_size or 0)
        self.current_page = 1
        self.severity_filter = SeverityFilter.ALL
        self.status_filter = StatusFilter.ALL
        self.data_quality = DataQualityLevel.GOOD
        self.is_loading = False
        self.error: Optional[str] = None

        self._pending: set[str] = set()

    # ============================================
    # Loading
    # ============================================

    def _query_params(self) -> Optional[dict[str, Any]]:
        if self.page_size is None:
            return None
        params: dict[str, Any] = {"page": self.current_page, "page_size": self.page_size}
        if self.severity_filter != SeverityFilter.ALL:
            params["severity"] = self.severity_filter.value
        return params

    async def load(self) -> InsightsResponse:
        """
        Fetch the collection without publishing it.

        Raises:
            NeuraApiError: On any request failure
        """
        data = await self.api.get(self.INSIGHTS_PATH, params=self._query_params())
        try:
            return InsightsResponse.model_validate(data or {})
        except ValidationError as e:
            logger.error("Malformed insights response: %s", e)
            raise NeuraApiError(
                message="Malformed insights response",
                endpoint=self.INSIGHTS_PATH,
            ) from e

    def publish(self, response: InsightsResponse) -> None:
        """Replace the current snapshot and recompute derived state."""
        self.response = response
        self.data_quality = classify_data_quality(response)
        if response.pagination is not None:
            self.pagination = response.pagination
        else:
            total = len(response.insights)
            self.pagination = Pagination(
                total=total,
                page=self.current_page,
                page_size=self.page_size or total,
                total_pages=1,
            )

    async def fetch(self) -> InsightsResponse:
        """
        Load and publish the collection.

        On failure the previous snapshot is kept and the error is recorded.

        Raises:
            InsightFetchError: If the request fails
        """
        self.is_loading = True
        try:
            response = await self.load()
        except NeuraApiError as e:
            self.error = user_message_for(e, ErrorCode.INSIGHTS_LOAD_FAILED)
            raise InsightFetchError(
                message=self.error,
                status_code=e.status_code,
                endpoint=e.endpoint,
                error_code=e.error_code,
            ) from e
        finally:
            self.is_loading = False

        self.error = None
        self.publish(response)
        logger.debug(
            "Loaded %d insights (page %d of %d)",
            len(response.insights),
            self.pagination.page,
            self.pagination.total_pages,
        )
        return response

    # ============================================
    # Filters and paging
    # ============================================

    async def set_page(self, page: int) -> None:
        """Move to a page (clamped to the known range) and refetch."""
        last_page = max(1, self.pagination.total_pages)
        self.current_page = max(1, min(page, last_page))
        await self.fetch()

    async def set_severity_filter(self, severity: SeverityFilter) -> None:
        """Change the server-side severity filter; resets to page 1."""
        self.severity_filter = SeverityFilter(severity)
        self.current_page = 1
        await self.fetch()

    def set_status_filter(self, status: StatusFilter) -> None:
        """Change the local status filter. No request is made."""
        self.status_filter = StatusFilter(status)

    def page_numbers(self) -> list[int]:
        """Page buttons to show: a window of up to 5 around the current page."""
        total_pages = self.pagination.total_pages
        window = min(self.PAGE_WINDOW, total_pages)
        if total_pages <= self.PAGE_WINDOW or self.current_page <= 3:
            start = 1
        elif self.current_page >= total_pages - 2:
            start = total_pages - (self.PAGE_WINDOW - 1)
        else:
            start = self.current_page - 2
        return list(range(start, start + window))

    # ============================================
    # Views
    # ============================================

    @property
    def insights(self) -> list[Insight]:
        return self.response.insights if self.response else []

    @property
    def has_insights(self) -> bool:
        return bool(self.insights)

    def find(self, insight_id: str) -> Optional[Insight]:
        return next((i for i in self.insights if i.insight_id == insight_id), None)

    @property
    def filtered_insights(self) -> list[Insight]:
        """Current page after the local status filter."""
        if self.status_filter == StatusFilter.ACTIVE:
            return [i for i in self.insights if not i.is_marked_done]
        elif self.status_filter == StatusFilter.RESOLVED:
            return [i for i in self.insights if i.is_marked_done]
        return list(self.insights)

    @property
    def active_insights(self) -> list[Insight]:
        return [i for i in self.insights if not i.is_marked_done]

    @property
    def watch_insights(self) -> list[Insight]:
        """'What needs your attention': unresolved high severity, top 3."""
        return [
            i for i in self.insights
            if i.severity == Severity.HIGH and not i.is_marked_done
        ][:self.WATCH_LIMIT]

    @property
    def ok_insights(self) -> list[Insight]:
        """'Also worth knowing': unresolved medium severity."""
        return [
            i for i in self.insights
            if i.severity == Severity.MEDIUM and not i.is_marked_done
        ]

    @property
    def resolved_insights(self) -> list[Insight]:
        return [i for i in self.insights if i.is_marked_done][:self.RESOLVED_LIMIT]

    def card_for(self, insight: Insight) -> InsightCard:
        if insight.severity == Severity.HIGH:
            card_type, action = CardType.WATCH, CardAction.RESOLVE
        else:
            card_type, action = CardType.OK, CardAction.ACKNOWLEDGE
        return InsightCard(
            insight=insight,
            card_type=card_type,
            action=action,
            is_loading=self.is_pending(insight.insight_id),
        )

    def cards(self) -> list[InsightCard]:
        return [self.card_for(i) for i in self.filtered_insights]

    # ============================================
    # Transitions
    # ============================================

    def is_pending(self, insight_id: str) -> bool:
        return insight_id in self._pending

    @property
    def pending_ids(self) -> frozenset[str]:
        return frozenset(self._pending)

    async def acknowledge(self, insight_id: str) -> MutationOutcome:
        """Active-Unacknowledged → Active-Acknowledged ("got it")."""
        return await self._mutate(
            insight_id,
            InsightUpdateRequest(is_acknowledged=True),
            ErrorCode.INSIGHT_ACKNOWLEDGE_FAILED,
        )

    async def resolve(self, insight_id: str) -> MutationOutcome:
        """Any active state → Resolved. There is no way back."""
        return await self._mutate(
            insight_id,
            InsightUpdateRequest(is_marked_done=True),
            ErrorCode.INSIGHT_RESOLVE_FAILED,
        )

    async def _mutate(
        self,
        insight_id: str,
        update: InsightUpdateRequest,
        error_code: ErrorCode,
    ) -> MutationOutcome:
        """
        Lock the id, PATCH, then refetch the collection.

        Raises:
            InsightMutationError: If the PATCH fails. The lock is released
                and the local snapshot is left untouched.
        """
        if insight_id in self._pending:
            logger.debug("Ignoring %s for insight %s: action in progress", error_code.value, insight_id)
            return MutationOutcome.IGNORED

        self._pending.add(insight_id)
        try:
            try:
                await self.api.patch(f"{self.INSIGHTS_PATH}{insight_id}", json=update.to_payload())
            except NeuraApiError as e:
                self.error = user_message_for(e, error_code)
                raise InsightMutationError(
                    message=self.error,
                    insight_id=insight_id,
                    status_code=e.status_code,
                    endpoint=e.endpoint,
                    error_code=error_code,
                ) from e

            logger.info("Insight %s updated: %s", insight_id, update.to_payload())

            try:
                await self.fetch()
            except InsightFetchError:
                # The update itself went through; the next fetch will catch up.
                logger.warning("Refetch after updating insight %s failed", insight_id)
        finally:
            self._pending.discard(insight_id)

        return MutationOutcome.APPLIED
