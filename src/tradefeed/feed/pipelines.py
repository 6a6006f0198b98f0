"""
Trade feed pipeline - thin orchestration over the feed modules.

Sequence for one run:
1. Read the whole feed once (connector)
2. Check the envelope: tag placement, header, footer, footer count
   -> any STRUCTURAL finding aborts the run before a report is opened
3. TRADE lines: decode, validate, sort by notional, emit
4. EXTRD lines: decode, validate, sort by notional, emit
5. Emit the info report from header and footer

The pipeline contains no business rules - those live in validators.py,
sorting.py and the records. Field-level findings never drop a record; a
decode failure drops only the record that could not be decoded.
"""

import uuid
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO, TypeVar

from tradefeed.core.errors import (
    ConfigError,
    DecodeError,
    EnvelopeError,
    ReportWriteError,
    SourceError,
)
from tradefeed.core.findings import Finding, FindingSink, Severity, Stage
from tradefeed.core.logging import LogContext, get_logger
from tradefeed.core.settings import ReportPaths
from tradefeed.core.timing import log_step, timed_block
from tradefeed.feed.connector import FeedLine, FeedLines, count_tags, read_feed
from tradefeed.feed.records import (
    EnvelopeFooter,
    EnvelopeHeader,
    ExtendedTradeDetail,
    TradeDetail,
)
from tradefeed.feed.reports import (
    write_extended_trade_report,
    write_info_report,
    write_trade_report,
)
from tradefeed.feed.schema import LAYOUTS, RecordTag
from tradefeed.feed.sorting import sort_by_notional
from tradefeed.feed.validators import (
    check_length,
    check_tag_placement,
    validate_extended_trade,
    validate_footer,
    validate_header,
    validate_trade,
)
from tradefeed.framework.pipelines import Pipeline, PipelineResult, PipelineStatus

log = get_logger(__name__)

R = TypeVar("R", TradeDetail, ExtendedTradeDetail)


@dataclass
class Envelope:
    """Decoded header/footer pair (either may be None when unusable)."""

    header: EnvelopeHeader | None = None
    footer: EnvelopeFooter | None = None
    findings: list[Finding] = field(default_factory=list)


# =============================================================================
# STEPS
# =============================================================================


def _decode_failure(error: DecodeError, line: FeedLine, severity: Severity) -> Finding:
    return Finding(
        severity,
        f"{line.tag.value}_DECODE_FAILED",
        f"Cannot decode {line.tag.value} line: {error.message}",
        line.index,
        Stage.DECODE,
    )


def check_envelope(lines: FeedLines) -> Envelope:
    """
    Decode and validate HEADR and FOOTR plus every cross-record rule.

    Returns the envelope with all envelope findings, structural or not.
    """
    envelope = Envelope(findings=check_tag_placement(lines))
    if not lines:
        return envelope

    first, last = lines[0], lines[-1]

    if first.tag is RecordTag.HEADR:
        try:
            envelope.header = EnvelopeHeader.from_line(first.text, first.index)
        except DecodeError as e:
            envelope.findings.append(_decode_failure(e, first, Severity.STRUCTURAL))
        else:
            envelope.findings.extend(validate_header(envelope.header))

    if last.tag is RecordTag.FOOTR and last.index != 0:
        try:
            envelope.footer = EnvelopeFooter.from_line(last.text, last.index)
        except DecodeError as e:
            envelope.findings.append(_decode_failure(e, last, Severity.STRUCTURAL))
        else:
            tags = count_tags(lines)
            detail_count = tags[RecordTag.TRADE] + tags[RecordTag.EXTRD]
            header_version = envelope.header.version if envelope.header else None
            envelope.findings.extend(validate_footer(envelope.footer, detail_count, header_version))

    return envelope


def decode_details(
    lines: FeedLines,
    tag: RecordTag,
    build: Callable[[str, int], R],
    sink: FindingSink,
) -> list[R]:
    """
    Decode every line carrying ``tag``.

    Short lines are reported and decoded as far as possible; lines that
    cannot be decoded are reported and left out.
    """
    layout = LAYOUTS[tag]
    records: list[R] = []
    for line in lines:
        if line.tag is not tag:
            continue
        sink.write_batch(check_length(line.text, layout, line.index))
        try:
            records.append(build(line.text, line.index))
        except DecodeError as e:
            sink.write(_decode_failure(e, line, Severity.FIELD))
    return records


def validate_details(records: list[R], rule: Callable[[R], list[Finding]], sink: FindingSink) -> int:
    """Run ``rule`` over every record. Returns the number of findings."""
    return sum(sink.write_batch(rule(record)) for record in records)


# =============================================================================
# PIPELINE
# =============================================================================


class FeedPipeline(Pipeline):
    """
    Decode, validate, sort and report one trade feed.

    Args:
        input_path: Feed file
        paths: Report destinations (required unless check_only)
        check_only: Decode and validate without writing reports
        input_encoding: Feed file encoding
        csv_encoding: Report file encoding
        error_stream: Error channel override (defaults to ``paths.errors``
            when set, else stderr)
    """

    name = "tradefeed.process_feed"
    description = "Validate a fixed-width trade feed and write TRADE/EXTRADE/INFO reports"

    def __init__(
        self,
        input_path: str | Path,
        paths: ReportPaths | None = None,
        *,
        check_only: bool = False,
        input_encoding: str = "utf-8",
        csv_encoding: str = "utf-8",
        error_stream: TextIO | None = None,
    ) -> None:
        self.input_path = Path(input_path)
        self.paths = paths
        self.check_only = check_only
        self.input_encoding = input_encoding
        self.csv_encoding = csv_encoding
        self.error_stream = error_stream

    def validate_params(self) -> None:
        if not self.check_only and self.paths is None:
            raise ConfigError("Report paths are required unless running in check-only mode")

    def execute(self) -> PipelineResult:
        started_at = datetime.now(UTC)
        metrics: dict = {}
        run_id = uuid.uuid4().hex[:12]

        with ExitStack() as stack, LogContext(pipeline=self.name, run_id=run_id, feed=str(self.input_path)):
            sink = FindingSink(self._open_error_channel(stack))
            timer = stack.enter_context(timed_block("run"))
            try:
                lines = read_feed(self.input_path, self.input_encoding)
                metrics.update(self.process(lines, sink))
                status, error = PipelineStatus.COMPLETED, None
            except EnvelopeError as e:
                log.error("envelope_rejected", structural=len(e.findings))
                status, error = PipelineStatus.FAILED, e.message
            except (SourceError, ReportWriteError) as e:
                log.error("feed_run_failed", **e.to_dict())
                status, error = PipelineStatus.FAILED, e.message

        metrics["findings"] = sink.counts_by_severity()
        metrics["elapsed_seconds"] = round(timer.duration_seconds, 6)
        log.info("feed_processed", run_id=run_id, status=status.value, **metrics)

        return PipelineResult(
            status=status,
            started_at=started_at,
            completed_at=datetime.now(UTC),
            error=error,
            metrics=metrics,
            findings=sink.findings,
        )

    def _open_error_channel(self, stack: ExitStack) -> TextIO | None:
        if self.error_stream is not None:
            return self.error_stream
        if self.paths is not None and self.paths.errors is not None:
            self.paths.errors.parent.mkdir(parents=True, exist_ok=True)
            return stack.enter_context(open(self.paths.errors, "a", encoding="utf-8"))
        return None

    def process(self, lines: FeedLines, sink: FindingSink) -> dict:
        """
        Run every step over already-buffered lines.

        Raises:
            EnvelopeError: the envelope has STRUCTURAL findings; no report
                has been opened
        """
        tags = count_tags(lines)
        metrics: dict = {
            "lines": len(lines),
            "tags": {tag.value: n for tag, n in tags.items() if n},
        }
        log.info("feed_loaded", lines=len(lines))

        with log_step("feed.envelope"):
            envelope = check_envelope(lines)
            sink.write_batch(envelope.findings)
        structural = [f for f in envelope.findings if f.is_structural]
        if structural:
            raise EnvelopeError(
                f"Envelope rejected with {len(structural)} structural finding(s)", structural
            ).with_context(pipeline=self.name, source_path=str(self.input_path))

        with log_step("feed.trades", lines=tags[RecordTag.TRADE]) as timer:
            trades = decode_details(lines, RecordTag.TRADE, TradeDetail.from_line, sink)
            validate_details(trades, validate_trade, sink)
            trades = sort_by_notional(trades)
            timer.add_metric("records", len(trades))
        if not trades:
            log.info("no_trades")

        with log_step("feed.extrades", lines=tags[RecordTag.EXTRD]) as timer:
            extrades = decode_details(lines, RecordTag.EXTRD, ExtendedTradeDetail.from_line, sink)
            validate_details(extrades, validate_extended_trade, sink)
            extrades = sort_by_notional(extrades)
            timer.add_metric("records", len(extrades))
        if not extrades:
            log.info("no_extrades")

        metrics.update(
            trade_records=len(trades),
            extrade_records=len(extrades),
            no_trades=not trades,
            no_extrades=not extrades,
        )

        if self.check_only:
            return metrics

        with log_step("feed.reports"):
            metrics["trade_rows"] = write_trade_report(self.paths.trade, trades, sink, self.csv_encoding)
            metrics["extrade_rows"] = write_extended_trade_report(
                self.paths.extrade, extrades, sink, self.csv_encoding
            )
            metrics["info_rows"] = write_info_report(
                self.paths.info, envelope.header, envelope.footer, sink, self.csv_encoding
            )
        return metrics


def process_feed(
    input_path: str | Path,
    paths: ReportPaths | None = None,
    **kwargs,
) -> PipelineResult:
    """Convenience wrapper: build and run a ``FeedPipeline``."""
    return FeedPipeline(input_path, paths, **kwargs).run()


__all__ = [
    "Envelope",
    "check_envelope",
    "decode_details",
    "validate_details",
    "FeedPipeline",
    "process_feed",
]
