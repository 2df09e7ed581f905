# ============================================================================
# PageVital - Regression Report Tests
#
# Purpose: Test plain-text regression report formatting
# Inputs: RegressionResult objects
# Outputs: Test pass/fail
# Dependencies: pytest, PageVital.reporting
# Usage: pytest tests/test_regression_report.py -v
# ============================================================================

from conftest import make_baseline, make_snapshot
from PageVital.regression import RegressionDetector
from PageVital.reporting import generate_regression_report


class TestRegressionReport:
    def test_no_regression(self):
        result = RegressionDetector().detect_regression(make_snapshot(lcp=1000.0), make_baseline(lcp=1500.0))
        report = generate_regression_report(result)
        assert "No regressions detected." in report
        assert "https://test.com/en/page1" in report

    def test_warning_report_lists_metric(self):
        result = RegressionDetector().detect_regression(make_snapshot(cls=0.15), make_baseline(cls=0.1))
        report = generate_regression_report(result)
        lines = report.splitlines()
        assert "Overall severity: WARNING" in report
        assert any(line.strip().startswith("[WARNING] CLS: 0.100 -> 0.150") for line in lines)
        assert "Action required" not in report

    def test_critical_report_calls_for_action(self):
        result = RegressionDetector().detect_regression(make_snapshot(lcp=6000.0), make_baseline(lcp=2500.0))
        report = generate_regression_report(result)
        assert "[CRITICAL] LCP: 2500ms -> 6000ms (+3500ms, +140.0%)" in report
        assert "Action required" in report

    def test_infinite_percent_rendered(self):
        result = RegressionDetector().detect_regression(make_snapshot(fid=50.0), make_baseline(fid=0.0))
        assert "+inf%" in generate_regression_report(result)

    def test_report_is_pure(self):
        result = RegressionDetector().detect_regression(make_snapshot(cls=0.5), make_baseline(cls=0.1))
        assert generate_regression_report(result) == generate_regression_report(result)
