"""
Validation rules for trade feeds.

Every function here is pure: records (and, for the footer, aggregate
counts) in, a list of ``Finding`` out. Nothing raises, nothing is dropped;
the pipeline decides what a STRUCTURAL finding means for the run.

Severity matrix:
    STRUCTURAL  tag placement, header version/comment/comment prefix,
                header comment size, footer record count
    FIELD       direction, item id, quantity, buyer, seller, extended
                record version, unknown interior tag, short line,
                unexpected footer char count
"""

import re

from tradefeed.core.findings import Finding, Stage
from tradefeed.feed.connector import FeedLines
from tradefeed.feed.records import EnvelopeFooter, EnvelopeHeader, ExtendedTradeDetail, TradeDetail
from tradefeed.feed.schema import (
    CHAR_COUNT_HEADER_VERSION,
    COMMENT_HEADER_VERSION,
    EXTENDED_TRADE_DIRECTIONS,
    EXTENDED_TRADE_VERSION,
    HEADER_VERSIONS,
    ITEM_ID_LENGTH,
    ITEM_ID_PREFIX_LENGTH,
    PARTY_CODE_LENGTH,
    TRADE_DIRECTIONS,
    RecordLayout,
    RecordTag,
)

_PARTY_CODE = re.compile(rf"[A-Za-z0-9_]{{{PARTY_CODE_LENGTH}}}")


def _is_upper_letter(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_upper_letter_or_digit(ch: str) -> bool:
    return _is_upper_letter(ch) or "0" <= ch <= "9"


# =============================================================================
# ENVELOPE
# =============================================================================


def check_tag_placement(lines: FeedLines) -> list[Finding]:
    """HEADR only first, FOOTR only last, TRADE/EXTRD in between."""
    if not lines:
        return [Finding.structural("EMPTY_FEED", "Feed contains no lines")]

    findings: list[Finding] = []
    last = len(lines) - 1

    if lines[0].tag is not RecordTag.HEADR:
        findings.append(
            Finding.structural("INVALID_HEADER", f"Invalid Header: first line is {lines[0].tag.value}", 0)
        )
    if lines[last].tag is not RecordTag.FOOTR:
        findings.append(
            Finding.structural(
                "INVALID_FOOTER", f"Invalid Footer: last line is {lines[last].tag.value}", last
            )
        )

    for line in lines:
        if line.index in (0, last):
            continue
        if line.tag is RecordTag.HEADR:
            findings.append(Finding.structural("MISPLACED_HEADER", "HEADR outside the first line", line.index))
        elif line.tag is RecordTag.FOOTR:
            findings.append(Finding.structural("MISPLACED_FOOTER", "FOOTR outside the last line", line.index))
        elif line.tag is RecordTag.UNKNOWN:
            findings.append(
                Finding.field("UNKNOWN_TAG", f"Unknown record tag {line.text[:5]!r}", line.index)
            )

    return findings


def validate_header(header: EnvelopeHeader) -> list[Finding]:
    findings: list[Finding] = []
    idx = header.line_index

    if header.version not in HEADER_VERSIONS:
        findings.append(
            Finding.structural("INVALID_HEADER_VERSION", f"Invalid Header Version {header.version}", idx)
        )
    if header.version < COMMENT_HEADER_VERSION and header.comment:
        findings.append(
            Finding.structural(
                "INVALID_HEADER_COMMENT",
                f"Invalid Header Comment: version {header.version} headers carry no comment",
                idx,
            )
        )
    elif header.comment and header.comment_length_declared is None:
        findings.append(
            Finding.structural(
                "HEADER_COMMENT_PREFIX",
                f"Invalid Header Comment: missing {{n}} length prefix in {header.comment!r}",
                idx,
            )
        )
    if header.comment_length_declared is not None and header.comment_length_declared != len(header.comment):
        findings.append(
            Finding.structural(
                "HEADER_COMMENT_SIZE",
                f"Invalid Header comment size: declared {header.comment_length_declared}, "
                f"actual {len(header.comment)}",
                idx,
            )
        )
    return findings


def validate_footer(
    footer: EnvelopeFooter,
    detail_count: int,
    header_version: int | None,
) -> list[Finding]:
    """
    Cross-record envelope checks.

    Args:
        footer: Decoded footer
        detail_count: Number of TRADE plus EXTRD lines in the feed
        header_version: Decoded header version, None when the header is unusable
    """
    findings: list[Finding] = []
    idx = footer.line_index

    if footer.total_record_count != detail_count:
        findings.append(
            Finding.structural(
                "FOOTER_COUNT_MISMATCH",
                f"Invalid Footer Trade Count: declared {footer.total_record_count}, actual {detail_count}",
                idx,
            )
        )
    if (
        header_version is not None
        and header_version != CHAR_COUNT_HEADER_VERSION
        and footer.has_char_count
    ):
        findings.append(
            Finding.field(
                "UNEXPECTED_CHAR_COUNT",
                f"Invalid Footer Trade Char Count Exists under header version {header_version}",
                idx,
            )
        )
    return findings


# =============================================================================
# DETAIL RECORDS
# =============================================================================


def check_item_id(item_id: str, label: str, line_index: int) -> list[Finding]:
    """3 uppercase letters followed by 9 uppercase letters or digits."""
    bad = [
        pos
        for pos, ch in enumerate(item_id[:ITEM_ID_LENGTH])
        if not (_is_upper_letter(ch) if pos < ITEM_ID_PREFIX_LENGTH else _is_upper_letter_or_digit(ch))
    ]
    findings = []
    if len(item_id) != ITEM_ID_LENGTH:
        findings.append(
            Finding.field(
                "INVALID_ITEM_ID",
                f"Invalid {label} Item ID {item_id!r}: expected {ITEM_ID_LENGTH} characters",
                line_index,
            )
        )
    if bad:
        findings.append(
            Finding.field(
                "INVALID_ITEM_ID",
                f"Invalid {label} Item ID {item_id!r} @ positions {bad}",
                line_index,
            )
        )
    return findings


def check_party_code(code: str, role: str, label: str, line_index: int) -> list[Finding]:
    if _PARTY_CODE.fullmatch(code):
        return []
    return [
        Finding.field(
            f"INVALID_{role.upper()}",
            f"Invalid {label} {role} {code!r}",
            line_index,
        )
    ]


def check_quantity(quantity: int, label: str, line_index: int) -> list[Finding]:
    if quantity > 0:
        return []
    return [Finding.field("INVALID_QUANTITY", f"Invalid {label} Quantity {quantity}", line_index)]


def _common_detail_rules(record: TradeDetail | ExtendedTradeDetail, label: str) -> list[Finding]:
    idx = record.line_index
    findings = check_item_id(record.item_id, label, idx)
    findings.extend(check_quantity(record.quantity, label, idx))
    findings.extend(check_party_code(record.buyer, "Buyer", label, idx))
    findings.extend(check_party_code(record.seller, "Seller", label, idx))
    return findings


def validate_trade(trade: TradeDetail) -> list[Finding]:
    findings: list[Finding] = []
    if trade.direction not in TRADE_DIRECTIONS:
        findings.append(
            Finding.field(
                "INVALID_DIRECTION", f"Invalid Trade Direction {trade.direction!r}", trade.line_index
            )
        )
    findings.extend(_common_detail_rules(trade, "Trade"))
    return findings


def validate_extended_trade(extrade: ExtendedTradeDetail) -> list[Finding]:
    findings: list[Finding] = []
    idx = extrade.line_index
    if extrade.record_version != EXTENDED_TRADE_VERSION:
        findings.append(
            Finding.field("INVALID_EXTRADE_VERSION", f"Invalid ExTrade Version {extrade.record_version}", idx)
        )
    if extrade.direction not in EXTENDED_TRADE_DIRECTIONS:
        findings.append(
            Finding.field("INVALID_DIRECTION", f"Invalid ExTrade Direction {extrade.direction!r}", idx)
        )
    findings.extend(_common_detail_rules(extrade, "ExTrade"))
    return findings


# =============================================================================
# LINE SHAPE
# =============================================================================


def check_length(text: str, layout: RecordLayout, line_index: int) -> list[Finding]:
    """Length violation for lines shorter than their template."""
    if len(text) >= layout.width:
        return []
    return [
        Finding.field(
            "SHORT_RECORD",
            f"{layout.tag.value} line has {len(text)} characters, template needs {layout.width}",
            line_index,
            stage=Stage.DECODE,
        )
    ]


__all__ = [
    "check_tag_placement",
    "validate_header",
    "validate_footer",
    "check_item_id",
    "check_party_code",
    "check_quantity",
    "validate_trade",
    "validate_extended_trade",
    "check_length",
]
