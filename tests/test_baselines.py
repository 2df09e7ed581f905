# ============================================================================
# PageVital - Baseline Manager Tests
#
# Purpose: Test baseline creation, retention, lookup and degraded storage
# Inputs: Snapshots, MemoryStore, mocked failing stores
# Outputs: Test pass/fail
# Dependencies: pytest, unittest.mock, PageVital.baselines
# Usage: pytest tests/test_baselines.py -v
# ============================================================================

import json
from unittest.mock import MagicMock

import pytest

from conftest import GOOD_METRICS, make_baseline, make_snapshot
from PageVital.baselines import BaselineManager
from PageVital.config import BaselineConfig
from PageVital.errors import PersistenceError
from PageVital.reporting.schema import BuildInfo
from PageVital.utils.serialization import dump_models

KEY = "performance-baselines"


@pytest.fixture
def manager(memory_store):
    return BaselineManager(memory_store)


class TestSaveBaseline:
    def test_save_stores_json_array(self, manager, memory_store):
        baseline = manager.save_baseline(make_snapshot(**GOOD_METRICS), BuildInfo(version="1.2.0", commit="abc123"))
        assert baseline is not None
        assert baseline.id.startswith("baseline-1700000000000-")
        assert baseline.metrics.lcp == 1500.0
        assert baseline.build_info.version == "1.2.0"
        assert baseline.score > 90

        stored = json.loads(memory_store.get(KEY))
        assert len(stored) == 1
        assert stored[0]["id"] == baseline.id
        assert stored[0]["userAgent"] == "pytest-agent"

    def test_ids_are_unique(self, manager):
        snapshot = make_snapshot()
        first = manager.save_baseline(snapshot)
        second = manager.save_baseline(snapshot)
        assert first.id != second.id
        assert len(manager.get_baselines()) == 2

    def test_retention_keeps_most_recent(self, manager, memory_store):
        base = 1_700_000_000_000
        for i in range(150):
            manager.save_baseline(make_snapshot(timestamp=base + i, lcp=1000.0 + i))
            assert len(json.loads(memory_store.get(KEY))) <= 100

        kept = manager.get_baselines()
        assert len(kept) == 100
        assert sorted(b.timestamp for b in kept) == [base + i for i in range(50, 150)]

    def test_custom_cap(self, memory_store):
        manager = BaselineManager(memory_store, BaselineConfig(max_baselines=3))
        for i in range(5):
            manager.save_baseline(make_snapshot(timestamp=1000 + i))
        assert [b.timestamp for b in manager.get_baselines()] == [1004, 1003, 1002]

    def test_save_returns_none_when_store_fails(self):
        store = MagicMock()
        store.get.return_value = None
        store.set.side_effect = PersistenceError("disk full")
        manager = BaselineManager(store)
        assert manager.save_baseline(make_snapshot()) is None


class TestGetBaselines:
    def test_missing_key(self, manager):
        assert manager.get_baselines() == []

    @pytest.mark.parametrize("raw", ["not json", "{}", '"text"', "null"])
    def test_non_array_is_empty(self, manager, memory_store, raw):
        memory_store.set(KEY, raw)
        assert manager.get_baselines() == []

    def test_malformed_entries_skipped(self, manager, memory_store):
        valid = json.loads(dump_models([make_baseline(lcp=2000.0)]))[0]
        memory_store.set(KEY, json.dumps([{"id": "broken"}, valid]))
        baselines = manager.get_baselines()
        assert len(baselines) == 1
        assert baselines[0].metrics.lcp == 2000.0

    def test_read_failure_is_empty(self):
        store = MagicMock()
        store.get.side_effect = PersistenceError("unreadable")
        assert BaselineManager(store).get_baselines() == []


class TestGetRecentBaseline:
    def test_none_without_match(self, manager):
        assert manager.get_recent_baseline("/page1", "en") is None
        manager.save_baseline(make_snapshot(url="https://test.com/zh/page1"))
        assert manager.get_recent_baseline("/page1", "en") is None

    def test_most_recent_match_wins(self, manager):
        manager.save_baseline(make_snapshot(url="https://test.com/en/page1", timestamp=1000))
        manager.save_baseline(make_snapshot(url="https://test.com/en/page1", timestamp=3000))
        manager.save_baseline(make_snapshot(url="https://test.com/zh/page1", timestamp=5000))
        manager.save_baseline(make_snapshot(url="https://test.com/en/other", timestamp=7000))

        recent = manager.get_recent_baseline("/page1", "en")
        assert recent is not None
        assert recent.timestamp == 3000
        assert recent.url == "https://test.com/en/page1"

    def test_locale_at_end_of_url(self, manager):
        manager.save_baseline(make_snapshot(url="https://test.com/page1/en", timestamp=2000))
        assert manager.get_recent_baseline("/page1", "en").timestamp == 2000


class TestClearBaselines:
    def test_clear(self, manager):
        manager.save_baseline(make_snapshot())
        manager.clear_baselines()
        assert manager.get_baselines() == []
