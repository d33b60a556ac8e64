"""
Tests for Phase 8: CLI.

CRITICAL TESTS:
1. test_analyze_text - percentile lines printed in ascending order
2. test_invalid_percentile_list - bad input exits 1 before scanning
"""

import json

import pytest

pytest.importorskip("typer")

from typer.testing import CliRunner

from latscan import __version__
from latscan.cli.main import app, parse_percentile_list


@pytest.fixture
def runner():
    return CliRunner()


class TestParsePercentileList:
    """Test percentile argument parsing."""

    def test_parse(self):
        assert parse_percentile_list("90,95,99") == [90, 95, 99]

    def test_spaces_and_empty_items(self):
        assert parse_percentile_list(" 50, 99,") == [50, 99]

    @pytest.mark.parametrize("text", ["abc", "90,x", "101", "-1", "", ","])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_percentile_list(text)


class TestAnalyze:
    """Test analyze command."""

    def test_analyze_text(self, runner, log_dir, isolated_cwd):
        """
        CRITICAL TEST: one line per percentile, loosest first.
        """
        result = runner.invoke(app, [
            "analyze", "--path", str(log_dir), "--percentile-list", "99,90,95", "-q",
        ])

        assert result.exit_code == 0, result.output
        assert "90% of requests return a response in 91 ms" in result.stdout
        assert "95% of requests return a response in 96 ms" in result.stdout
        assert "99% of requests return a response in 100 ms" in result.stdout
        assert result.stdout.index("90%") < result.stdout.index("99%")
        assert not any(p.name.startswith('tmp') for p in isolated_cwd.iterdir())

    def test_analyze_json_output_file(self, runner, log_dir, isolated_cwd):
        output = isolated_cwd / "report.json"
        result = runner.invoke(app, [
            "analyze", "--path", str(log_dir), "-f", "json", "-o", str(output), "-q",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data['samples']['total'] == 100
        assert [p['percentile'] for p in data['percentiles']] == [90.0, 95.0, 99.0]

    def test_analyze_with_config(self, runner, log_dir, isolated_cwd):
        config = isolated_cwd / "custom.yml"
        config.write_text(f"scan:\n  path: {log_dir}\nanalysis:\n  percentiles: [50]\n")

        result = runner.invoke(app, ["analyze", "-c", str(config), "-q"])

        assert result.exit_code == 0, result.output
        assert "50% of requests return a response in 51 ms" in result.stdout

    def test_invalid_percentile_list(self, runner, log_dir, isolated_cwd):
        """
        CRITICAL TEST: invalid percentiles are rejected with exit code 1.
        """
        result = runner.invoke(app, [
            "analyze", "--path", str(log_dir), "--percentile-list", "90,abc",
        ])
        assert result.exit_code == 1

        result = runner.invoke(app, [
            "analyze", "--path", str(log_dir), "--percentile-list", "150",
        ])
        assert result.exit_code == 1

    def test_missing_directory(self, runner, isolated_cwd):
        result = runner.invoke(app, ["analyze", "--path", str(isolated_cwd / "nope"), "-q"])
        assert result.exit_code == 1

    def test_no_log_files(self, runner, isolated_cwd):
        empty = isolated_cwd / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["analyze", "--path", str(empty), "-q"])
        assert result.exit_code == 1

    def test_invalid_config(self, runner, log_dir, isolated_cwd):
        config = isolated_cwd / "bad.yml"
        config.write_text("analysis:\n  batch_read_size: 0\n")
        result = runner.invoke(app, ["analyze", "--path", str(log_dir), "-c", str(config)])
        assert result.exit_code == 1

    def test_missing_config_file(self, runner, log_dir, isolated_cwd):
        result = runner.invoke(app, [
            "analyze", "--path", str(log_dir), "-c", str(isolated_cwd / "typo.yml"), "-q",
        ])
        assert result.exit_code == 1
        assert "Config not found" in result.output

    def test_string_int_from_env_is_rejected(self, runner, log_dir, isolated_cwd):
        config = isolated_cwd / "env.yml"
        config.write_text("scan:\n  queue_size: ${LATSCAN_UNSET_QUEUE}\n")
        result = runner.invoke(app, ["analyze", "--path", str(log_dir), "-c", str(config), "-q"])
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_spill_failure_exits_1(self, runner, log_dir, isolated_cwd):
        """
        CRITICAL TEST: a spill directory that doesn't exist is reported
        as E1004 and the command fails.
        """
        config = isolated_cwd / "spill.yml"
        config.write_text(f"analysis:\n  spill_dir: {isolated_cwd / 'no-such-dir'}\n")

        result = runner.invoke(app, [
            "analyze", "--path", str(log_dir), "-c", str(config), "-q", "-f", "json",
        ])

        assert result.exit_code == 1
        assert "E1004" in result.output


class TestVersion:
    """Test version command."""

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestConfig:
    """Test config commands."""

    def test_config_init(self, runner):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert "scan:" in result.stdout
        assert "percentiles:" in result.stdout

    def test_config_validate_valid(self, runner, tmp_path):
        path = tmp_path / "latscan.yml"
        path.write_text("analysis:\n  percentiles: [90, 99]\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 0
        assert "Valid" in result.stdout

    def test_config_validate_invalid(self, runner, tmp_path):
        path = tmp_path / "latscan.yml"
        path.write_text("analysis:\n  percentiles: [200]\n")
        result = runner.invoke(app, ["config", "validate", str(path)])
        assert result.exit_code == 1

    def test_config_dump(self, runner, isolated_cwd):
        result = runner.invoke(app, ["config", "dump"])
        assert result.exit_code == 0
        assert "heap_capacity: 1024" in result.stdout

    def test_config_dump_missing_file(self, runner, isolated_cwd):
        result = runner.invoke(app, ["config", "dump", str(isolated_cwd / "nope.yml")])
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_unknown_action(self, runner):
        result = runner.invoke(app, ["config", "frobnicate"])
        assert result.exit_code == 1
