"""Tests for the tradefeed CLI."""

import pytest
from typer.testing import CliRunner

from tests._support.feeds import feed, footer_line, header_line, trade_line, valid_feed
from tradefeed import __version__
from tradefeed.cli import app

runner = CliRunner()

pytestmark = pytest.mark.integration


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestRun:
    def test_writes_reports(self, write_feed, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(app, ["--log-level", "ERROR", "run", str(write_feed(valid_feed())), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "Processed 2 records in" in result.output
        assert (out / "TRADE.csv").exists()
        assert (out / "EXTRADE.csv").exists()
        assert (out / "INFO.csv").exists()

    def test_output_dir_from_environment(self, write_feed, tmp_path, monkeypatch):
        out = tmp_path / "env-out"
        monkeypatch.setenv("TRADEFEED_OUTPUT_DIR", str(out))

        result = runner.invoke(app, ["--log-level", "ERROR", "run", str(write_feed(valid_feed()))])

        assert result.exit_code == 0, result.output
        assert (out / "TRADE.csv").exists()

    def test_json_summary(self, write_feed, tmp_path):
        result = runner.invoke(
            app,
            ["--log-level", "ERROR", "run", str(write_feed(valid_feed())), "-o", str(tmp_path), "--json"],
        )

        assert result.exit_code == 0, result.output
        assert '"status": "completed"' in result.output

    def test_structural_failure_exits_nonzero(self, write_feed, tmp_path):
        content = feed(header_line(), trade_line(), footer_line(5))
        out = tmp_path / "out"

        result = runner.invoke(app, ["--log-level", "ERROR", "run", str(write_feed(content)), "-o", str(out)])

        assert result.exit_code == 1
        assert not (out / "TRADE.csv").exists()

    def test_missing_input_exits_nonzero(self, tmp_path):
        result = runner.invoke(app, ["--log-level", "ERROR", "run", str(tmp_path / "missing.dat"), "-o", str(tmp_path)])
        assert result.exit_code == 1


class TestCheck:
    def test_check_writes_nothing(self, write_feed, tmp_path, monkeypatch):
        monkeypatch.setenv("TRADEFEED_OUTPUT_DIR", str(tmp_path / "out"))

        result = runner.invoke(app, ["--log-level", "ERROR", "check", str(write_feed(valid_feed()))])

        assert result.exit_code == 0, result.output
        assert "Processed 2 records in" in result.output
        assert not (tmp_path / "out").exists()

    def test_check_reports_structural_failure(self, write_feed):
        content = feed(header_line(4, comment="nope"), footer_line(0))
        result = runner.invoke(app, ["--log-level", "ERROR", "check", str(write_feed(content))])

        assert result.exit_code == 1
