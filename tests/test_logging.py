"""Tests for structured logging and step timing."""

import io
import json

import pytest

from tradefeed.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_configured,
)
from tradefeed.core.timing import TimingResult, log_step, timed_block


def json_lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.fixture
def log_stream() -> io.StringIO:
    stream = io.StringIO()
    configure_logging(level="DEBUG", format="json", stream=stream, force=True)
    return stream


class TestConfigureLogging:
    def test_json_output(self, log_stream):
        get_logger("test").info("feed_loaded", lines=4)

        [event] = json_lines(log_stream)
        assert event["event"] == "feed_loaded"
        assert event["lines"] == 4
        assert event["level"] == "info"
        assert event["service"] == "tradefeed"
        assert "timestamp" in event

    def test_level_filtering(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", format="json", stream=stream, force=True)

        log = get_logger("test")
        log.info("hidden")
        log.warning("shown")

        assert [e["event"] for e in json_lines(stream)] == ["shown"]

    def test_second_call_is_noop_without_force(self, log_stream):
        other = io.StringIO()
        configure_logging(level="DEBUG", format="json", stream=other)

        get_logger("test").info("still_first")
        assert other.getvalue() == ""
        assert is_configured()

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("TRADEFEED_LOG_LEVEL", "ERROR")
        stream = io.StringIO()
        configure_logging(format="json", stream=stream, force=True)

        get_logger("test").warning("hidden")
        assert stream.getvalue() == ""


class TestContext:
    def test_bound_context_is_merged(self, log_stream):
        bind_context(feed="SAMPLE.dat")
        get_logger("test").info("step")
        clear_context()

        assert json_lines(log_stream)[0]["feed"] == "SAMPLE.dat"

    def test_log_context_unbinds_on_exit(self, log_stream):
        log = get_logger("test")
        with LogContext(pipeline="tradefeed.process_feed"):
            log.info("inside")
        log.info("outside")

        inside, outside = json_lines(log_stream)
        assert inside["pipeline"] == "tradefeed.process_feed"
        assert "pipeline" not in outside


class TestTiming:
    def test_timed_block(self):
        with timed_block("run") as timer:
            pass

        assert timer.ended_at is not None
        assert timer.duration_seconds >= 0

    def test_log_step_emits_start_and_end(self, log_stream):
        with log_step("feed.trades", lines=3) as timer:
            timer.add_metric("records", 2)

        start, end = json_lines(log_stream)
        assert start["event"] == "feed.trades.start"
        assert end["event"] == "feed.trades.end"
        assert end["records"] == 2
        assert end["lines"] == 3
        assert "duration_ms" in end

    def test_log_step_logs_error_and_reraises(self, log_stream):
        with pytest.raises(RuntimeError):
            with log_step("feed.reports", log_start=False):
                raise RuntimeError("disk full")

        [event] = json_lines(log_stream)
        assert event["event"] == "feed.reports.error"
        assert event["error_type"] == "RuntimeError"
        assert event["status"] == "error"

    def test_timing_result_dicts(self):
        result = TimingResult(step="x").add_metric("rows", 1).stop()
        assert result.to_log_dict()["rows"] == 1
        assert result.to_error_dict()["status"] == "error"
