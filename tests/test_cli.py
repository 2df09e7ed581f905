# ============================================================================
# PageVital - CLI Tests
#
# Purpose: Test argument parsing, command dispatch and exit codes
# Inputs: Temporary config and snapshot files
# Outputs: Test pass/fail
# Dependencies: pytest, PageVital.cli
# Usage: pytest tests/test_cli.py -v
# ============================================================================

import pytest

from conftest import GOOD_METRICS, POOR_METRICS, make_snapshot
from PageVital.cli import create_parser, main
from PageVital.utils.serialization import snapshot_to_json


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "pagevital.yaml"
    path.write_text(f"storage:\n  type: local_file\n  path: {tmp_path / 'store'}\nlogging:\n  level: WARNING\n")
    return str(path)


@pytest.fixture
def write_snapshot(tmp_path):
    def _write(name, **metrics):
        path = tmp_path / name
        path.write_text(snapshot_to_json(make_snapshot(url="https://test.com/en/checkout", **metrics)))
        return str(path)

    return _write


class TestParser:
    def test_compare_requires_path_and_locale(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["compare", "snap.json"])

    def test_baseline_save_options(self):
        args = create_parser().parse_args(["baseline", "save", "s.json", "--version", "2.0", "--commit", "abc"])
        assert args.build_version == "2.0"
        assert args.commit == "abc"
        assert args.branch == "unknown"


class TestCommands:
    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_check(self, config_path, write_snapshot, capsys):
        assert main(["--config", config_path, "check", write_snapshot("good.json", **GOOD_METRICS)]) == 0
        out = capsys.readouterr().out
        assert "Diagnostic Report" in out
        assert "100.0 / 100" in out

    def test_check_poor_records_history(self, config_path, write_snapshot, capsys):
        assert main(["--config", config_path, "check", write_snapshot("poor.json", **POOR_METRICS)]) == 0
        capsys.readouterr()
        assert main(["--config", config_path, "history", "--severity", "critical", "--metric", "lcp"]) == 0
        out = capsys.readouterr().out
        assert "LCP is 9000" in out
        assert "1 alert(s)" in out

    def test_baseline_save_list_and_compare(self, config_path, write_snapshot, capsys):
        good = write_snapshot("good.json", **GOOD_METRICS)
        assert main(["--config", config_path, "baseline", "save", good, "--version", "1.4.0"]) == 0
        assert "Saved baseline" in capsys.readouterr().out

        assert main(["--config", config_path, "baseline", "list"]) == 0
        assert "https://test.com/en/checkout" in capsys.readouterr().out

        assert main(["--config", config_path, "compare", good, "--path", "/checkout", "--locale", "en"]) == 0
        assert "No regressions detected." in capsys.readouterr().out

        poor = write_snapshot("poor.json", **POOR_METRICS)
        assert main(["--config", config_path, "compare", poor, "--path", "/checkout", "--locale", "en"]) == 3
        assert "Overall severity: CRITICAL" in capsys.readouterr().out

    def test_compare_without_baseline(self, config_path, write_snapshot, capsys):
        snap = write_snapshot("s.json", **GOOD_METRICS)
        assert main(["--config", config_path, "compare", snap, "--path", "/checkout", "--locale", "en"]) == 0
        assert "No baseline found" in capsys.readouterr().out

    def test_missing_snapshot(self, config_path, tmp_path, capsys):
        assert main(["--config", config_path, "check", str(tmp_path / "missing.json")]) == 1
        assert "Snapshot file not found" in capsys.readouterr().err

    def test_invalid_snapshot(self, config_path, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text('{"lcp": -5}')
        assert main(["--config", config_path, "check", str(path)]) == 1

    def test_bad_config(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("storage: [\n")
        assert main(["--config", str(path), "history"]) == 1
        assert "not valid YAML" in capsys.readouterr().err

    def test_empty_history(self, config_path, capsys):
        assert main(["--config", config_path, "history"]) == 0
        assert "No alerts in history" in capsys.readouterr().out
