# ============================================================================
# PageVital - Command Line Interface
#
# Purpose: CLI entry point for diagnosing snapshots, managing baselines,
#          comparing against baselines and reading alert history
# Inputs: Command-line arguments, snapshot JSON files
# Outputs: Reports on stdout, exit codes
# Dependencies: argparse, config, monitor, reporting
# Usage: pagevital compare snapshot.json --path /products --locale en
#
# Changelog:
#   2026-09-02: Initial CLI with 'check' command
#   2026-09-09: 'baseline save|list' and 'compare' (exit 3 on critical regression)
#   2026-09-23: 'history' with --severity / --metric filters
# ============================================================================

import argparse
import sys
from pathlib import Path
from typing import Dict, Optional

from PageVital import __version__
from PageVital.config import Config
from PageVital.errors import ConfigurationError, PageVitalError
from PageVital.logging_utils import get_logger, setup_logging
from PageVital.metrics import REGRESSION_METRICS, OverallSeverity
from PageVital.monitor import PageVitalMonitor
from PageVital.reporting.regression_report import generate_regression_report
from PageVital.reporting.schema import BuildInfo, MetricsSnapshot
from PageVital.utils.serialization import snapshot_from_json
from PageVital.utils.time import format_ms_timestamp

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_UNEXPECTED = 2
EXIT_CRITICAL_REGRESSION = 3


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="pagevital",
        description="Web Vitals baselines, regression detection and alerting",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured logging level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check",
        help="Diagnose a snapshot and raise threshold alerts",
    )
    check_parser.add_argument("snapshot", type=str, help="Snapshot JSON file")

    baseline_parser = subparsers.add_parser(
        "baseline",
        help="Manage stored baselines",
    )
    baseline_sub = baseline_parser.add_subparsers(dest="baseline_command", help="Baseline commands")
    save_parser = baseline_sub.add_parser("save", help="Store a snapshot as a new baseline")
    save_parser.add_argument("snapshot", type=str, help="Snapshot JSON file")
    save_parser.add_argument("--version", dest="build_version", type=str, default="unknown", help="Build version")
    save_parser.add_argument("--commit", type=str, default="unknown", help="Commit hash")
    save_parser.add_argument("--branch", type=str, default="unknown", help="Branch name")
    baseline_sub.add_parser("list", help="List stored baselines, newest first")

    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare a snapshot with the most recent matching baseline",
    )
    compare_parser.add_argument("snapshot", type=str, help="Snapshot JSON file")
    compare_parser.add_argument("--path", type=str, required=True, help="Page path, e.g. /products")
    compare_parser.add_argument("--locale", type=str, required=True, help="Locale, e.g. en")

    history_parser = subparsers.add_parser(
        "history",
        help="Show stored alert history",
    )
    history_parser.add_argument(
        "--severity",
        type=str,
        default=None,
        choices=["warning", "critical"],
        help="Only alerts of this severity",
    )
    history_parser.add_argument("--metric", type=str, default=None, help="Only alerts for this metric")

    return parser


def _load_config(args: argparse.Namespace) -> Config:
    config = Config.from_yaml(args.config) if args.config else Config.from_default()
    setup_logging(args.log_level or config.logging.level, config.logging.format)
    return config


def _read_snapshot(path: str) -> MetricsSnapshot:
    snapshot_path = Path(path)
    if not snapshot_path.is_file():
        raise ConfigurationError(f"Snapshot file not found: {path}")
    try:
        return snapshot_from_json(snapshot_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigurationError(f"Invalid snapshot file: {path}", details=str(e)) from e


def _metric_values(snapshot: MetricsSnapshot, score: Optional[float] = None) -> Dict[str, float]:
    values = {m.value: snapshot.value_of(m) for m in REGRESSION_METRICS}
    if score is not None:
        values["score"] = score
    return values


def check_command(args: argparse.Namespace, monitor: PageVitalMonitor) -> int:
    """Print the diagnostic report for a snapshot and dispatch threshold alerts."""
    snapshot = _read_snapshot(args.snapshot)
    report = monitor.collector.generate_diagnostic_report(snapshot)
    analysis = report.analysis
    alerts = monitor.alert_system.check_metrics(_metric_values(snapshot, analysis.score))

    print("\n" + "=" * 60)
    print("✓ Diagnostic Report")
    print("=" * 60)
    print(f"Page:            {snapshot.page.url or 'unknown'}")
    print(f"Score:           {analysis.score:.1f} / 100")
    for metric, rating in analysis.ratings.items():
        print(f"  {metric.value.upper():6s} {snapshot.value_of(metric):>10.3f}  {rating.value}")

    if analysis.issues:
        print(f"\nIssues ({len(analysis.issues)}):")
        for issue in analysis.issues:
            print(f"  - {issue}")
        print("\nRecommendations:")
        for recommendation in analysis.recommendations:
            print(f"  - {recommendation}")

    print(f"\nAlerts raised:   {len(alerts)}")
    print("=" * 60 + "\n")
    return EXIT_OK


def baseline_command(args: argparse.Namespace, monitor: PageVitalMonitor) -> int:
    """Save a snapshot as a baseline or list stored baselines."""
    manager = monitor.baseline_manager

    if args.baseline_command == "save":
        snapshot = _read_snapshot(args.snapshot)
        build_info = BuildInfo(
            version=args.build_version,
            commit=args.commit,
            branch=args.branch,
            timestamp=snapshot.page.timestamp,
        )
        baseline = manager.save_baseline(snapshot, build_info)
        if baseline is None:
            print("\n✗ Error: baseline could not be stored (see log)\n", file=sys.stderr)
            return EXIT_UNEXPECTED
        print(f"\n✓ Saved baseline {baseline.id} for {baseline.url} (score {baseline.score:.1f})\n")
        return EXIT_OK

    if args.baseline_command == "list":
        baselines = manager.get_baselines()
        if not baselines:
            print("No baselines stored")
            return EXIT_OK
        print("-" * 96)
        print(f"{'ID':34s} {'Timestamp':21s} {'Score':>6s}  URL")
        print("-" * 96)
        for baseline in sorted(baselines, key=lambda b: b.timestamp, reverse=True):
            print(f"{baseline.id:34s} {format_ms_timestamp(baseline.timestamp):21s} {baseline.score:6.1f}  {baseline.url}")
        print("-" * 96)
        return EXIT_OK

    print("\n✗ Error: expected 'baseline save' or 'baseline list'\n", file=sys.stderr)
    return EXIT_USAGE


def compare_command(args: argparse.Namespace, monitor: PageVitalMonitor) -> int:
    """
    Compare a snapshot with the most recent baseline for --path / --locale.

    Returns:
        EXIT_CRITICAL_REGRESSION when any regression is critical, else EXIT_OK
    """
    snapshot = _read_snapshot(args.snapshot)
    baseline = monitor.baseline_manager.get_recent_baseline(args.path, args.locale)
    if baseline is None:
        print(f"No baseline found for path={args.path} locale={args.locale}")
        return EXIT_OK

    result = monitor.detector.detect_regression(snapshot, baseline)
    monitor.alert_system.check_and_alert(_metric_values(snapshot), result)
    print(generate_regression_report(result))

    if result.summary.overall_severity is OverallSeverity.CRITICAL:
        return EXIT_CRITICAL_REGRESSION
    return EXIT_OK


def history_command(args: argparse.Namespace, monitor: PageVitalMonitor) -> int:
    """Print stored alerts, oldest first."""
    alerts = monitor.alert_system.filter_history(severity=args.severity, metric=args.metric)
    if not alerts:
        print("No alerts in history")
        return EXIT_OK
    for alert in alerts:
        print(f"{format_ms_timestamp(alert.timestamp)}  [{alert.severity.value.upper():8s}] {alert.message}")
    print(f"\n{len(alerts)} alert(s)")
    return EXIT_OK


COMMANDS = {
    "check": check_command,
    "baseline": baseline_command,
    "compare": compare_command,
    "history": history_command,
}


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    monitor: Optional[PageVitalMonitor] = None
    try:
        config = _load_config(args)
        monitor = PageVitalMonitor.from_config(config)
        return COMMANDS[args.command](args, monitor)
    except PageVitalError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\n✗ Error: {e}\n", file=sys.stderr)
        return EXIT_USAGE
    except Exception as e:
        logger.exception(f"Unexpected error during {args.command}")
        print(f"\n✗ Unexpected error: {e}\n", file=sys.stderr)
        return EXIT_UNEXPECTED
    finally:
        if monitor is not None:
            monitor.close()


if __name__ == "__main__":
    sys.exit(main())
