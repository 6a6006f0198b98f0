"""
Report emitters - CSV projections of validated records.

Each ``ReportEmitter`` exclusively owns one destination for the run. It
writes the column header once, then appends one row per record in the
order it is given (the notional order for detail reports). A row that
fails to write becomes an ``emit`` stage finding and the next row is
attempted; nothing already written is rolled back.

Example:
    with ReportEmitter(paths.trade, TRADE_COLUMNS, "trade", sink=sink) as emitter:
        for trade in ordered:
            emitter.emit(trade_row(trade), trade.line_index)
"""

import csv
from collections.abc import Iterable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Any, TextIO

from tradefeed.core.errors import ReportWriteError
from tradefeed.core.findings import Finding, FindingSink, Stage
from tradefeed.core.logging import get_logger
from tradefeed.feed.decoder import format_price
from tradefeed.feed.records import EnvelopeFooter, EnvelopeHeader, ExtendedTradeDetail, TradeDetail
from tradefeed.feed.schema import EXTENDED_TRADE_COLUMNS, INFO_COLUMNS, TRADE_COLUMNS

log = get_logger(__name__)


# =============================================================================
# ROW PROJECTIONS
# =============================================================================


def trade_row(trade: TradeDetail) -> list[Any]:
    return [
        trade.timestamp_text,
        trade.direction,
        trade.item_id,
        format_price(trade.price),
        trade.quantity,
        trade.buyer,
        trade.seller,
        trade.comment,
    ]


def extended_trade_row(extrade: ExtendedTradeDetail) -> list[Any]:
    return [
        extrade.record_version,
        extrade.timestamp_text,
        extrade.direction,
        extrade.item_id,
        format_price(extrade.price),
        extrade.quantity,
        extrade.buyer,
        extrade.seller,
        extrade.nested_tags_text,
    ]


def info_row(header: EnvelopeHeader, footer: EnvelopeFooter) -> list[Any]:
    return [
        header.version,
        header.creation_timestamp_text,
        header.comment,
        footer.total_record_count,
        "" if footer.total_char_count is None else footer.total_char_count,
    ]


# =============================================================================
# EMITTER
# =============================================================================


class ReportEmitter:
    """
    Append-only CSV writer for one report.

    Args:
        path: Destination file (created or truncated on open)
        columns: Header row
        name: Report name used in logs and findings
        sink: Where row write failures are reported
        encoding: File encoding
    """

    def __init__(
        self,
        path: str | Path,
        columns: Sequence[str],
        name: str,
        sink: FindingSink | None = None,
        encoding: str = "utf-8",
    ):
        self.path = Path(path)
        self.columns = tuple(columns)
        self.name = name
        self.sink = sink or FindingSink()
        self.encoding = encoding
        self.rows_written = 0
        self.rows_failed = 0
        self._file: TextIO | None = None
        self._writer: Any = None

    def open(self) -> "ReportEmitter":
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "w", newline="", encoding=self.encoding)
            self._writer = csv.writer(self._file)
            self._writer.writerow(self.columns)
        except OSError as e:
            self.close()
            raise ReportWriteError(f"Cannot open {self.name} report {self.path}: {e}", cause=e).with_context(
                source_path=str(self.path), stage=Stage.EMIT.value
            )
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None

    def __enter__(self) -> "ReportEmitter":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
        log.info(
            "report_written",
            report=self.name,
            path=str(self.path),
            rows=self.rows_written,
            failed=self.rows_failed,
        )

    def emit(self, row: Sequence[Any], line_index: int | None = None) -> bool:
        """Append one row. Returns False (and reports a finding) on failure."""
        if self._writer is None:
            raise ReportWriteError(f"{self.name} report is not open").with_context(
                source_path=str(self.path)
            )
        try:
            self._writer.writerow(row)
            self._file.flush()
        except (OSError, csv.Error, UnicodeEncodeError) as e:
            self.rows_failed += 1
            self.sink.write(
                Finding.field(
                    "REPORT_WRITE_FAILED",
                    f"Could not write {self.name} report row: {e}",
                    line_index,
                    stage=Stage.EMIT,
                )
            )
            return False
        self.rows_written += 1
        return True

    def emit_all(self, rows: Iterable[tuple[Sequence[Any], int | None]]) -> int:
        """Append (row, line_index) pairs. Returns the number written."""
        for row, line_index in rows:
            self.emit(row, line_index)
        return self.rows_written


# =============================================================================
# REPORT WRITERS
# =============================================================================


def write_trade_report(
    path: str | Path, trades: Iterable[TradeDetail], sink: FindingSink, encoding: str = "utf-8"
) -> int:
    with ReportEmitter(path, TRADE_COLUMNS, "trade", sink, encoding) as emitter:
        return emitter.emit_all((trade_row(t), t.line_index) for t in trades)


def write_extended_trade_report(
    path: str | Path,
    extrades: Iterable[ExtendedTradeDetail],
    sink: FindingSink,
    encoding: str = "utf-8",
) -> int:
    with ReportEmitter(path, EXTENDED_TRADE_COLUMNS, "extrade", sink, encoding) as emitter:
        return emitter.emit_all((extended_trade_row(x), x.line_index) for x in extrades)


def write_info_report(
    path: str | Path,
    header: EnvelopeHeader,
    footer: EnvelopeFooter,
    sink: FindingSink,
    encoding: str = "utf-8",
) -> int:
    with ReportEmitter(path, INFO_COLUMNS, "info", sink, encoding) as emitter:
        emitter.emit(info_row(header, footer), header.line_index)
        return emitter.rows_written


__all__ = [
    "trade_row",
    "extended_trade_row",
    "info_row",
    "ReportEmitter",
    "write_trade_report",
    "write_extended_trade_report",
    "write_info_report",
]
