# ============================================================================
# PageVital - Monitor Tests
#
# Purpose: Test the end-to-end pipeline wiring in PageVitalMonitor
# Inputs: FakeHost, MemoryStore, snapshots
# Outputs: Test pass/fail
# Dependencies: pytest, unittest.mock, PageVital.monitor
# Usage: pytest tests/test_monitor.py -v
# ============================================================================

from unittest.mock import patch

import pytest

from conftest import POOR_METRICS, make_snapshot
from PageVital.config import Config
from PageVital.metrics import OverallSeverity
from PageVital.monitor import PageVitalMonitor, split_page_url
from PageVital.reporting.schema import BuildInfo


@pytest.fixture
def monitor(fake_host, memory_store):
    monitor = PageVitalMonitor.from_config(Config(), host=fake_host, store=memory_store)
    yield monitor
    monitor.close()


class TestSplitPageUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://test.com/en/products", ("/products", "en")),
            ("https://test.com/zh/blog/post-1?x=1", ("/blog/post-1", "zh")),
            ("https://test.com/en", ("/", "en")),
            ("https://test.com/", ("/", None)),
            ("https://test.com/products", ("/products", None)),
            ("https://test.com/shop/cart", ("/shop/cart", None)),
            ("https://test.com/pt-BR/checkout", ("/checkout", "pt-BR")),
            ("", ("/", None)),
        ],
    )
    def test_split(self, url, expected):
        assert split_page_url(url) == expected


class TestFromConfig:
    def test_services_share_store(self, monitor, memory_store):
        assert monitor.baseline_manager.store is memory_store
        assert monitor.alert_system.history.store is memory_store

    def test_builds_store_from_config(self):
        monitor = PageVitalMonitor.from_config(Config())
        assert monitor.baseline_manager.store is monitor.alert_system.history.store


class TestFullMonitoring:
    def test_first_run_without_baseline(self, monitor):
        result = monitor.perform_full_monitoring()
        assert result.snapshot.page.url == "https://test.com/en/products"
        assert result.diagnostics.analysis.score == pytest.approx(95.0)
        assert result.baseline is None
        assert result.regression is None
        assert result.alerts == []
        assert result.saved_baseline is None

    def test_save_then_detect_regression(self, monitor):
        first = monitor.perform_full_monitoring(save_baseline=True, build_info=BuildInfo(version="1.0.0"))
        assert first.saved_baseline is not None
        assert first.saved_baseline.build_info.version == "1.0.0"

        worse = make_snapshot(url="https://test.com/en/products", timestamp=first.snapshot.page.timestamp + 1, **POOR_METRICS)
        second = monitor.perform_full_monitoring(snapshot=worse)
        assert second.baseline.id == first.saved_baseline.id
        assert second.regression.has_regression is True
        assert second.regression.summary.overall_severity is OverallSeverity.CRITICAL
        regression_alerts = [a for a in second.alerts if a.data.get("type") == "regression"]
        assert len(regression_alerts) == 5
        assert any(a.metric == "score" for a in second.alerts)

    def test_explicit_path_and_locale(self, monitor):
        monitor.perform_full_monitoring(save_baseline=True)
        result = monitor.perform_full_monitoring(page_path="/products", locale="zh")
        assert result.baseline is None

    def test_stage_failure_does_not_raise(self, monitor):
        monitor.perform_full_monitoring(save_baseline=True)
        with patch.object(monitor.detector, "detect_regression", side_effect=RuntimeError("boom")):
            result = monitor.perform_full_monitoring()
        assert result.baseline is not None
        assert result.regression is None

    def test_disabled_alerts(self, fake_host, memory_store):
        config = Config()
        config.alerts.enabled = False
        monitor = PageVitalMonitor.from_config(config, host=fake_host, store=memory_store)
        result = monitor.perform_full_monitoring(snapshot=make_snapshot(**POOR_METRICS))
        assert result.alerts == []
        assert monitor.alert_system.get_alert_history() == []
