"""Tests for FeedSettings and report path resolution."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tradefeed.core.settings import FeedSettings, get_settings, reset_settings


class TestDefaults:
    def test_report_names(self):
        settings = FeedSettings()

        assert settings.trade_report_name == "TRADE.csv"
        assert settings.extrade_report_name == "EXTRADE.csv"
        assert settings.info_report_name == "INFO.csv"
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"

    def test_paths_resolve_under_output_dir(self, tmp_path):
        paths = FeedSettings(output_dir=tmp_path).report_paths()

        assert paths.trade == tmp_path.resolve() / "TRADE.csv"
        assert paths.extrade == tmp_path.resolve() / "EXTRADE.csv"
        assert paths.info == tmp_path.resolve() / "INFO.csv"
        assert paths.errors is None
        assert paths.all_reports() == (paths.trade, paths.extrade, paths.info)

    def test_output_dir_override(self, tmp_path):
        paths = FeedSettings(output_dir=tmp_path / "a").report_paths(tmp_path / "b")
        assert paths.trade.parent == (tmp_path / "b").resolve()


class TestEnvironment:
    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TRADEFEED_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("TRADEFEED_TRADE_REPORT_NAME", "trades.csv")
        monkeypatch.setenv("TRADEFEED_ERROR_LOG_PATH", str(tmp_path / "errors.log"))

        paths = FeedSettings().report_paths()

        assert paths.trade == tmp_path.resolve() / "trades.csv"
        assert paths.errors == (tmp_path / "errors.log").resolve()

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("TRADEFEED_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            FeedSettings()

    def test_cached_instance(self, monkeypatch, tmp_path):
        first = get_settings()
        assert get_settings() is first

        monkeypatch.setenv("TRADEFEED_OUTPUT_DIR", str(tmp_path))
        reset_settings()
        assert get_settings().output_dir == Path(str(tmp_path))


class TestReportNames:
    @pytest.mark.parametrize("name", ["out/TRADE.csv", "../TRADE.csv", ""])
    def test_rejects_paths(self, name):
        with pytest.raises(ValidationError):
            FeedSettings(trade_report_name=name)
