# ============================================================================
# PageVital - Serialization Tests
#
# Purpose: Test snapshot JSON format and stored-array parsing
# Inputs: Snapshots, raw JSON strings
# Outputs: Test pass/fail
# Dependencies: pytest, PageVital.utils.serialization
# Usage: pytest tests/test_serialization.py -v
# ============================================================================

import json

import pytest

from conftest import make_baseline, make_snapshot
from PageVital.reporting.schema import Baseline, MetricsSnapshot
from PageVital.utils.serialization import dump_models, load_models, snapshot_from_json, snapshot_to_json


class TestSnapshotJson:
    def test_camel_case_keys(self):
        data = json.loads(snapshot_to_json(make_snapshot(dom_content_loaded=1200.0)))
        assert data["domContentLoaded"] == 1200.0
        assert "resourceTiming" in data
        assert data["device"]["userAgent"] == "pytest-agent"

    def test_pretty_print(self):
        assert "\n" in snapshot_to_json(make_snapshot(), indent=2)

    def test_accepts_snake_and_camel_case(self):
        camel = snapshot_from_json('{"cls": 0.2, "firstPaint": 300, "page": {"url": "https://test.com/en/a"}}')
        snake = snapshot_from_json('{"cls": 0.2, "first_paint": 300, "page": {"url": "https://test.com/en/a"}}')
        assert camel == snake
        assert camel.first_paint == 300.0

    def test_negative_metric_rejected(self):
        with pytest.raises(ValueError):
            snapshot_from_json('{"lcp": -1}')

    def test_snapshot_is_immutable(self):
        snapshot = MetricsSnapshot()
        with pytest.raises(ValueError):
            snapshot.lcp = 5.0


class TestStoredArrays:
    def test_dump_then_load(self):
        raw = dump_models([make_baseline(lcp=2000.0), make_baseline(timestamp=5, cls=0.1)])
        baselines, skipped = load_models(raw, Baseline)
        assert skipped == 0
        assert [b.timestamp for b in baselines] == [1_700_000_000_000, 5]

    @pytest.mark.parametrize("raw", [None, "", "{bad", '{"a": 1}', "42"])
    def test_non_arrays_load_empty(self, raw):
        assert load_models(raw, Baseline) == ([], 0)

    def test_invalid_items_counted(self):
        assert load_models('[{"nope": true}, 3]', Baseline) == ([], 2)
