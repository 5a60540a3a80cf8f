"""Unit tests for the insight generation orchestrator."""

import asyncio

import httpx
import pytest

from neura_client.core.errors import ErrorCode, NeuraApiError
from neura_client.core.http import ApiClient
from neura_client.insights.data_quality import DataQualityLevel
from neura_client.insights.lifecycle import InsightLifecycleManager
from neura_client.insights.polling import GenerationOutcome, GenerationState, PollingOrchestrator
from neura_client.settings.store import SettingsStore

INSIGHTS = "/api/insights/"
TRIGGER = "/api/insights/trigger"
SETTINGS = "/settings/"


def _fake_sleep(clock):
    async def _sleep(seconds: float) -> None:
        clock.advance(seconds)
        await asyncio.sleep(0)

    return _sleep


@pytest.fixture
def orchestrator(fake_api, clock):
    insights = InsightLifecycleManager(fake_api)
    store = SettingsStore(fake_api, clock=clock)
    return PollingOrchestrator(
        fake_api,
        insights,
        store,
        poll_interval=2,
        poll_timeout=60,
        clock=clock,
        sleep=_fake_sleep(clock),
    )


async def _until(predicate, rounds: int = 50) -> None:
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.mark.asyncio
async def test_not_connected_never_triggers(fake_api, orchestrator, settings_payload):
    fake_api.on("GET", SETTINGS, settings_payload(is_connected=False))

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.CONNECTION_REQUIRED
    assert result.error_message == "Connect your Xero account to generate insights."
    assert fake_api.count("POST", TRIGGER) == 0
    assert fake_api.count("GET", INSIGHTS) == 0
    assert orchestrator.state == GenerationState.IDLE


@pytest.mark.asyncio
async def test_settings_failure_reads_as_not_connected(fake_api, orchestrator):
    fake_api.on("GET", SETTINGS, NeuraApiError("down", status_code=503, error_code=ErrorCode.SERVICE_UNAVAILABLE))

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.CONNECTION_REQUIRED
    assert fake_api.count("POST", TRIGGER) == 0
    assert orchestrator.settings_store.error == "Failed to load settings"


@pytest.mark.asyncio
async def test_trigger_failure_ends_cycle(fake_api, orchestrator, settings_payload):
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, NeuraApiError("generator crashed", status_code=500))

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.FAILED
    assert result.error_message == "Failed to generate insights"
    assert orchestrator.error == "Failed to generate insights"
    assert fake_api.count("GET", INSIGHTS) == 0
    assert orchestrator.state == GenerationState.IDLE
    assert not orchestrator.is_generating


@pytest.mark.asyncio
async def test_trigger_failure_when_backend_unavailable(fake_api, orchestrator, settings_payload):
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, NeuraApiError("bad gateway", status_code=502, error_code=ErrorCode.SERVICE_UNAVAILABLE))

    result = await orchestrator.start()

    assert result.error_message == "Service temporarily unavailable. Please try again in a moment."


@pytest.mark.asyncio
async def test_completes_on_first_non_empty_poll(fake_api, orchestrator, settings_payload, make_response, make_insight):
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, {"status": "started"})
    fake_api.on("GET", INSIGHTS, [make_response(), make_response(), make_response([make_insight("fresh")])])

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.COMPLETED
    assert result.polls == 3
    assert result.data_quality == DataQualityLevel.GOOD
    assert [i.insight_id for i in orchestrator.insights.insights] == ["fresh"]
    assert fake_api.count("GET", INSIGHTS) == 3
    assert orchestrator.state == GenerationState.IDLE


@pytest.mark.asyncio
async def test_poll_errors_are_swallowed(fake_api, orchestrator, settings_payload, make_response, make_insight):
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, {})
    fake_api.on(
        "GET",
        INSIGHTS,
        [
            NeuraApiError("blip", status_code=500),
            make_response(cash_pressure={"status": "AMBER", "confidence": "low"}),
            make_response([make_insight("a")]),
        ],
    )

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.COMPLETED
    assert result.polls == 3


@pytest.mark.asyncio
async def test_times_out_after_poll_timeout_then_fetches_once_more(fake_api, orchestrator, clock, settings_payload, make_response):
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, {})
    fake_api.on("GET", INSIGHTS, make_response(cash_runway={"status": "warning", "confidence_level": "Medium"}))
    started_at = clock.now

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.TIMED_OUT
    # Polls at t=2..58; the sleep that reaches t=60 ends the cycle
    assert result.polls == 29
    assert clock.now - started_at == 60
    assert fake_api.count("GET", INSIGHTS) == 30
    assert result.snapshot is not None
    assert result.data_quality == DataQualityLevel.MIXED
    assert orchestrator.insights.response is result.snapshot


@pytest.mark.asyncio
async def test_timeout_with_failing_final_fetch(fake_api, orchestrator, settings_payload, make_response):
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, {})
    fake_api.on("GET", INSIGHTS, [make_response()] * 29 + [NeuraApiError("down", status_code=503)])

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.TIMED_OUT
    assert result.snapshot is None
    assert orchestrator.insights.response is None


@pytest.mark.asyncio
async def test_hung_poll_is_cut_off_by_hard_timeout(fake_api, settings_payload, make_response):
    never = asyncio.Event()

    async def hang(json, params):
        await never.wait()

    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, {})
    fake_api.on("GET", INSIGHTS, [hang, make_response()])
    insights = InsightLifecycleManager(fake_api)
    orchestrator = PollingOrchestrator(
        fake_api,
        insights,
        SettingsStore(fake_api),
        poll_interval=0.01,
        poll_timeout=0.05,
    )

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.TIMED_OUT
    assert result.polls == 1
    assert fake_api.count("GET", INSIGHTS) == 2


@pytest.mark.asyncio
async def test_new_start_cancels_running_cycle(fake_api, orchestrator, settings_payload, make_response, make_insight):
    gate = asyncio.Event()

    async def slow_trigger(json, params):
        await gate.wait()
        return {}

    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, [slow_trigger, {}])
    fake_api.on("GET", INSIGHTS, make_response([make_insight("a")]))

    first = asyncio.ensure_future(orchestrator.start())
    await _until(lambda: fake_api.count("POST", TRIGGER) == 1)
    assert orchestrator.is_generating
    assert orchestrator.state == GenerationState.TRIGGERING

    second = await orchestrator.start()

    assert (await first).outcome == GenerationOutcome.CANCELLED
    assert second.outcome == GenerationOutcome.COMPLETED
    assert fake_api.count("POST", TRIGGER) == 2
    # Settings were cached by the first cycle
    assert fake_api.count("GET", SETTINGS) == 1


@pytest.mark.asyncio
async def test_cancelling_caller_stops_cycle(fake_api, orchestrator, settings_payload):
    gate = asyncio.Event()

    async def slow_trigger(json, params):
        await gate.wait()
        return {}

    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, slow_trigger)

    caller = asyncio.ensure_future(orchestrator.start())
    await _until(lambda: fake_api.count("POST", TRIGGER) == 1)
    caller.cancel()

    with pytest.raises(asyncio.CancelledError):
        await caller
    await _until(lambda: not orchestrator.is_generating)
    assert orchestrator.state == GenerationState.IDLE
    assert fake_api.count("GET", INSIGHTS) == 0


@pytest.mark.asyncio
async def test_cancel_when_idle_is_a_no_op(orchestrator):
    orchestrator.cancel()
    assert not orchestrator.is_generating


@pytest.mark.asyncio
async def test_failed_settings_refresh_blocks_trigger_despite_cached_connection(fake_api, orchestrator, clock, settings_payload):
    fake_api.on(
        "GET",
        SETTINGS,
        [settings_payload(), NeuraApiError("down", status_code=503, error_code=ErrorCode.SERVICE_UNAVAILABLE)],
    )
    await orchestrator.settings_store.fetch_settings()
    clock.advance(301)

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.CONNECTION_REQUIRED
    assert fake_api.count("POST", TRIGGER) == 0


@pytest.mark.asyncio
async def test_non_json_poll_is_swallowed(clock, settings_payload, make_response, make_insight):
    insight_bodies = [
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json=make_response([make_insight("a")])),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == SETTINGS:
            return httpx.Response(200, json=settings_payload())
        if request.url.path == TRIGGER:
            return httpx.Response(202)
        return insight_bodies.pop(0)

    api = ApiClient(base_url="http://neura.test", token="t", transport=httpx.MockTransport(handler))
    insights = InsightLifecycleManager(api)
    orchestrator = PollingOrchestrator(
        api,
        insights,
        SettingsStore(api, clock=clock),
        poll_interval=2,
        poll_timeout=60,
        clock=clock,
        sleep=_fake_sleep(clock),
    )

    async with api:
        result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.COMPLETED
    assert result.polls == 2
    assert [i.insight_id for i in insights.insights] == ["a"]


@pytest.mark.asyncio
async def test_empty_polls_update_manager_data_quality(fake_api, orchestrator, settings_payload, make_response):
    low_confidence = make_response(cash_pressure={"status": "RED", "confidence": "low"})
    fake_api.on("GET", SETTINGS, settings_payload())
    fake_api.on("POST", TRIGGER, {})
    fake_api.on("GET", INSIGHTS, [low_confidence] * 29 + [NeuraApiError("down", status_code=503)])

    result = await orchestrator.start()

    assert result.outcome == GenerationOutcome.TIMED_OUT
    assert orchestrator.insights.response is None
    assert orchestrator.insights.data_quality == DataQualityLevel.LOW
