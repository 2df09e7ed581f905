# ============================================================================
# PageVital - Test Configuration and Fixtures
#
# Purpose: Shared pytest fixtures for testing
# Inputs: None
# Outputs: Fixtures for use in tests
# Dependencies: pytest, types, PageVital
# Usage: pytest tests/ (fixtures are automatically available)
#
# Changelog:
#   2026-09-02: Initial fake host and snapshot factory fixtures
#   2026-09-14: Memory store and alert system fixtures
# ============================================================================

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from PageVital.alerts import AlertSystem
from PageVital.config import AlertConfig
from PageVital.reporting.schema import (
    BaselineMetrics,
    Baseline,
    DeviceInfo,
    MetricsSnapshot,
    PageInfo,
)
from PageVital.storage.memory import MemoryStore

GOOD_METRICS = {"cls": 0.05, "lcp": 1500.0, "fid": 50.0, "fcp": 1200.0, "ttfb": 400.0}
POOR_METRICS = {"cls": 0.8, "lcp": 9000.0, "fid": 900.0, "fcp": 7000.0, "ttfb": 4000.0}


def make_snapshot(url: str = "https://test.com/en/page1", timestamp: int = 1_700_000_000_000, **metrics: Any):
    """MetricsSnapshot with the given metric values and page info."""
    return MetricsSnapshot(
        device=DeviceInfo(user_agent="pytest-agent"),
        page=PageInfo(url=url, title="Test", timestamp=timestamp),
        **metrics,
    )


def make_baseline(url: str = "https://test.com/en/page1", timestamp: int = 1_700_000_000_000, **metrics: Any):
    """Baseline carrying exactly the given metric values."""
    return Baseline(
        id=f"baseline-{timestamp}-test",
        timestamp=timestamp,
        url=url,
        metrics=BaselineMetrics(**metrics),
    )


class FakeObserver:
    """Records observe()/disconnect() calls; callback is invoked by tests."""

    def __init__(self, callback):
        self.callback = callback
        self.observed: List[Dict[str, Any]] = []
        self.disconnected = False

    def observe(self, **options):
        self.observed.append(options)

    def disconnect(self):
        self.disconnected = True

    def emit(self, entries):
        self.callback(SimpleNamespace(get_entries=lambda: list(entries)), self)


class FakePerformance:
    def __init__(self, entries: Dict[str, List[Any]]):
        self.entries = entries

    def get_entries_by_type(self, entry_type):
        return list(self.entries.get(entry_type, []))

    def now(self):
        return 1234.0


class FakeHost:
    """Duck-typed browser host: window, performance, navigator, performance_observer."""

    def __init__(self, entries=None, navigator=None, window=None):
        self.performance = FakePerformance(entries or {})
        self.navigator = navigator
        self.window = window
        self.observers: List[FakeObserver] = []

    def performance_observer(self, callback):
        observer = FakeObserver(callback)
        self.observers.append(observer)
        return observer

    def observer_for(self, entry_type):
        for observer in self.observers:
            if any(o.get("type") == entry_type for o in observer.observed):
                return observer
        raise KeyError(entry_type)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def fake_host():
    """Host with navigation, paint and resource entries plus device info."""
    entries = {
        "navigation": [
            {"responseStart": 350.0, "domContentLoadedEventEnd": 1400.0, "loadEventEnd": 2600.0},
        ],
        "paint": [
            {"name": "first-paint", "startTime": 900.0},
            {"name": "first-contentful-paint", "startTime": 1100.0},
        ],
        "resource": [
            {"name": "https://cdn.test.com/app.js", "duration": 200.0, "transferSize": 5000, "initiatorType": "script"},
            {"name": "https://cdn.test.com/hero.png", "duration": 1500.0, "transferSize": 90000, "initiatorType": "img"},
        ],
    }
    navigator = SimpleNamespace(
        user_agent="Mozilla/5.0 (pytest)",
        device_memory=8,
        hardware_concurrency=4,
        connection=SimpleNamespace(effective_type="4g", downlink=10.0, rtt=50, save_data=False),
    )
    window = SimpleNamespace(
        inner_width=1280,
        inner_height=720,
        location=SimpleNamespace(href="https://test.com/en/products"),
        document=SimpleNamespace(referrer="https://google.com", title="Products"),
    )
    return FakeHost(entries=entries, navigator=navigator, window=window)


@pytest.fixture
def alert_system(memory_store):
    """Alert system writing history to a memory store, console channel on."""
    return AlertSystem(AlertConfig(), memory_store)


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def baseline_factory():
    return make_baseline
