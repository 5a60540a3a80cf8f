"""Root conftest for tests."""

import inspect
import os
from typing import Any, Callable, Optional

import pytest

os.environ.setdefault("NEURA_API_BASE_URL", "http://neura.test")
os.environ.setdefault("NEURA_API_TOKEN", "test-token")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    dir_marker_map = {
        "unit": pytest.mark.unit,
        "integration": pytest.mark.integration,
    }
    for item in items:
        test_path = str(item.fspath)
        for dir_name, marker in dir_marker_map.items():
            if f"/{dir_name}/" in test_path or f"\\{dir_name}\\" in test_path:
                item.add_marker(marker)
                break


class FakeApi:
    """
    Stand-in for ApiClient.

    Handlers are registered per (method, path). A handler may be a value,
    an exception instance (raised), a list (consumed in order, last one
    repeats) or a callable taking (json, params) that may be async.
    """

    def __init__(self):
        self.calls: list[tuple[str, str, Optional[dict], Optional[dict]]] = []
        self._handlers: dict[tuple[str, str], Any] = {}

    def on(self, method: str, path: str, handler: Any) -> None:
        self._handlers[(method, path)] = handler

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _, _ in self.calls if m == method and p == path)

    async def request(self, method: str, path: str, json=None, params=None) -> Any:
        self.calls.append((method, path, json, params))
        if (method, path) not in self._handlers:
            raise AssertionError(f"Unexpected request {method} {path}")

        handler = self._handlers[(method, path)]
        if isinstance(handler, list):
            handler = handler.pop(0) if len(handler) > 1 else handler[0]
        if callable(handler) and not isinstance(handler, Exception):
            handler = handler(json=json, params=params)
        if inspect.isawaitable(handler):
            handler = await handler
        if isinstance(handler, Exception):
            raise handler
        return handler

    async def get(self, path, params=None):
        return await self.request("GET", path, params=params)

    async def post(self, path, json=None):
        return await self.request("POST", path, json=json)

    async def put(self, path, json=None):
        return await self.request("PUT", path, json=json)

    async def patch(self, path, json=None):
        return await self.request("PATCH", path, json=json)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_insight() -> Callable[..., dict]:
    def _make(
        insight_id: str,
        severity: str = "high",
        is_acknowledged: bool = False,
        is_marked_done: bool = False,
        **overrides: Any,
    ) -> dict:
        data = {
            "insight_id": insight_id,
            "insight_type": "cash_runway",
            "title": f"Insight {insight_id}",
            "severity": severity,
            "confidence_level": "medium",
            "summary": "Cash runway is shrinking.",
            "why_it_matters": "You may not cover payroll in three months.",
            "recommended_actions": ["Chase overdue invoices", "Delay discretionary spend"],
            "supporting_numbers": [
                {"label": "Runway", "value": 2.5},
                {"label": "Cash", "value": "$12,400"},
            ],
            "generated_at": "2026-01-20T09:00:00Z",
            "is_acknowledged": is_acknowledged,
            "is_marked_done": is_marked_done,
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def make_response() -> Callable[..., dict]:
    def _make(insights: Optional[list[dict]] = None, **overrides: Any) -> dict:
        data = {
            "cash_runway": {
                "current_cash": 120000.0,
                "monthly_burn_rate": 20000.0,
                "runway_months": 6.0,
                "status": "healthy",
                "confidence_level": "High",
            },
            "cash_pressure": {"status": "GREEN", "confidence": "high"},
            "profitability": {"revenue": 50000.0, "gross_margin_pct": 42.0, "risk_level": "low"},
            "upcoming_commitments": None,
            "insights": insights or [],
            "calculated_at": "2026-01-20T09:00:00Z",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def settings_payload() -> Callable[..., dict]:
    def _make(is_connected: bool = True) -> dict:
        return {
            "email": "owner@example.com",
            "organization_name": "Acme Ltd",
            "xero_integration": {
                "is_connected": is_connected,
                "status": "active" if is_connected else "disconnected",
                "connected_at": "2026-01-02T10:00:00Z" if is_connected else None,
                "last_synced_at": None,
                "needs_reconnect": False,
            },
            "last_sync_time": None,
            "support_link": None,
        }

    return _make
