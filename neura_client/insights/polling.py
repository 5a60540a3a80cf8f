"""
Insight Generation Orchestrator
Triggers a background insight generation job and polls until results appear.

Cycle:
    IDLE → TRIGGERING → POLLING → (completed | timed out | failed) → IDLE

- Generation is only triggered when Xero is connected.
- Polling runs every poll_interval seconds until a non-empty insight list
  comes back or poll_timeout seconds have passed.
- The timeout is a hard bound: an in-flight poll is cancelled, then one
  best-effort final fetch is made.
- Only one cycle runs at a time. Starting a new cycle cancels the running one.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from neura_client.config import settings
from neura_client.core.errors import (
    ERROR_MESSAGES,
    ErrorCode,
    NeuraApiError,
    user_message_for,
)
from neura_client.core.http import ApiClient
from neura_client.insights.data_quality import DataQualityLevel, classify_data_quality
from neura_client.insights.lifecycle import InsightLifecycleManager
from neura_client.insights.schemas import InsightsResponse
from neura_client.settings.store import SettingsStore

logger = logging.getLogger(__name__)


class GenerationState(str, Enum):
    IDLE = "idle"
    TRIGGERING = "triggering"
    POLLING = "polling"


class GenerationOutcome(str, Enum):
    CONNECTION_REQUIRED = "connection_required"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class GenerationResult:
    """How a generation cycle ended."""
    outcome: GenerationOutcome
    snapshot: Optional[InsightsResponse] = None
    data_quality: Optional[DataQualityLevel] = None
    error_message: Optional[str] = None
    polls: int = 0


class PollingOrchestrator:
    """
    Runs insight generation cycles for one dashboard.

    Collaborators are injected: the insight manager receives the fresh
    snapshot, and the settings store answers the Xero connection gate.
    """

    TRIGGER_PATH = "/api/insights/trigger"

    def __init__(
        self,
        api: ApiClient,
        insights: InsightLifecycleManager,
        settings_store: SettingsStore,
        poll_interval: Optional[float] = None,
        poll_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize orchestrator.

        Args:
            api: Backend client used for the trigger call
            insights: Insight manager that owns the collection
            settings_store: Source of the Xero connection status
            poll_interval: Seconds between polls (default: 2)
            poll_timeout: Seconds before polling gives up (default: 60)
            clock: Monotonic time source
            sleep: Async sleep (injectable for tests)
        """
        self.api = api
        self.insights = insights
        self.settings_store = settings_store
        self.poll_interval = poll_interval if poll_interval is not None else settings.poll_interval_seconds
        self.poll_timeout = poll_timeout if poll_timeout is not None else settings.poll_timeout_seconds
        self._clock = clock
        self._sleep = sleep

        self.state = GenerationState.IDLE
        self.data_quality: Optional[DataQualityLevel] = None
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self._polls = 0

    @property
    def is_generating(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> GenerationResult:
        """
        Run one generation cycle to completion.

        If a cycle is already running it is cancelled first; its caller
        receives a CANCELLED result.
        """
        if self.is_generating:
            logger.info("Generation already running, cancelling previous cycle")
            await self._cancel_running()

        task = asyncio.ensure_future(self._run())
        self._task = task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                return GenerationResult(outcome=GenerationOutcome.CANCELLED)
            # Our caller was cancelled, not the cycle: stop the cycle too.
            task.cancel()
            raise

    def cancel(self) -> None:
        """Stop a running cycle. Safe to call when idle."""
        if self.is_generating:
            self._task.cancel()

    async def _cancel_running(self) -> None:
        task = self._task
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> GenerationResult:
        try:
            await self.settings_store.fetch_settings()
            if not self.settings_store.is_xero_connected():
                logger.info("Xero not connected, skipping insight generation")
                return GenerationResult(
                    outcome=GenerationOutcome.CONNECTION_REQUIRED,
                    error_message=ERROR_MESSAGES[ErrorCode.XERO_CONNECTION_REQUIRED],
                )

            self.state = GenerationState.TRIGGERING
            self.error = None
            try:
                await self.api.post(self.TRIGGER_PATH)
            except NeuraApiError as e:
                self.error = user_message_for(e, ErrorCode.INSIGHT_GENERATION_FAILED)
                return GenerationResult(outcome=GenerationOutcome.FAILED, error_message=self.error)

            self.state = GenerationState.POLLING
            return await self._poll()
        finally:
            self.state = GenerationState.IDLE

    async def _poll(self) -> GenerationResult:
        deadline = self._clock() + self.poll_timeout
        self._polls = 0

        try:
            snapshot = await asyncio.wait_for(
                self._poll_until_ready(deadline),
                timeout=self.poll_timeout,
            )
        except asyncio.TimeoutError:
            snapshot = None

        if snapshot is not None:
            self.insights.publish(snapshot)
            logger.info("Insight generation completed after %d polls", self._polls)
            return GenerationResult(
                outcome=GenerationOutcome.COMPLETED,
                snapshot=snapshot,
                data_quality=self.data_quality,
                polls=self._polls,
            )

        logger.warning("Insight generation timed out after %.0f seconds", self.poll_timeout)
        final = await self._final_fetch()
        return GenerationResult(
            outcome=GenerationOutcome.TIMED_OUT,
            snapshot=final,
            data_quality=self.data_quality,
            polls=self._polls,
        )

    async def _poll_until_ready(self, deadline: float) -> Optional[InsightsResponse]:
        while True:
            await self._sleep(self.poll_interval)
            if self._clock() >= deadline:
                return None

            self._polls += 1
            try:
                response = await self.insights.load()
            except NeuraApiError as e:
                logger.debug("Poll %d failed, continuing: %s", self._polls, e)
                continue

            self.data_quality = classify_data_quality(response)
            self.insights.data_quality = self.data_quality
            if response.insights:
                return response

    async def _final_fetch(self) -> Optional[InsightsResponse]:
        """One last look after timing out. Errors are ignored."""
        try:
            response = await self.insights.load()
        except NeuraApiError as e:
            logger.debug("Final fetch after timeout failed: %s", e)
            return None

        self.data_quality = classify_data_quality(response)
        self.insights.publish(response)
        return response
