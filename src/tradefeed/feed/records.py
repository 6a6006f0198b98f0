"""
Typed feed records.

Each record is an immutable value built once from one feed line by its
``from_line`` constructor, which delegates all field extraction to
``tradefeed.feed.decoder``. Records keep the 0-based index of their source
line so findings and sort tie-breaks can point back to feed order.

Construction never validates business rules - that is the validators' job.
It only fails (``DecodeError``) when a field cannot be decoded at all.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tradefeed.feed.decoder import decode_line, format_timestamp, scale_price
from tradefeed.feed.schema import (
    COMMENT_STRIP_CHARS,
    EXTENDED_TRADE_LAYOUT,
    FOOTER_LAYOUT,
    HEADER_LAYOUT,
    NESTED_TAG_REMAP,
    TRADE_LAYOUT,
)

_COMMENT_PREFIX = re.compile(r"\{(?P<length>[0-9]+)\}(?P<text>.*)", re.DOTALL)
_COMMENT_STRIP = str.maketrans("", "", COMMENT_STRIP_CHARS)


def parse_length_prefixed(raw: str) -> tuple[int | None, str]:
    """
    Split a ``{n}text`` comment field into (declared length, text).

    A field without the ``{n}`` token has no declared length and keeps its
    raw text; whether that is acceptable depends on the header version.
    """
    match = _COMMENT_PREFIX.fullmatch(raw)
    if match is None:
        return None, raw
    return int(match.group("length")), match.group("text")


def clean_comment(raw: str) -> str:
    """Drop backslash, comma and slash characters and trailing padding."""
    return raw.translate(_COMMENT_STRIP).rstrip()


def remap_nested_tags(raw: str) -> str:
    """Rewrite ``{a|b}`` style delimiters as ``[a,b]`` for the report."""
    return raw.rstrip().translate(NESTED_TAG_REMAP)


@dataclass(frozen=True)
class EnvelopeHeader:
    """HEADR line: feed version, creation time and optional comment."""

    version: int
    creation_timestamp: datetime
    comment_length_declared: int | None
    comment: str
    line_index: int = 0

    @classmethod
    def from_line(cls, line: str, line_index: int = 0) -> "EnvelopeHeader":
        values = decode_line(line, HEADER_LAYOUT)
        declared, comment = parse_length_prefixed(values["comment"])
        return cls(
            version=values["version"],
            creation_timestamp=values["creation_timestamp"],
            comment_length_declared=declared,
            comment=comment,
            line_index=line_index,
        )

    @property
    def creation_timestamp_text(self) -> str:
        return format_timestamp(self.creation_timestamp)


@dataclass(frozen=True)
class TradeDetail:
    """TRADE line."""

    timestamp: datetime
    direction: str
    item_id: str
    price_mantissa: int
    quantity: int
    buyer: str
    seller: str
    comment: str
    line_index: int = 0

    @classmethod
    def from_line(cls, line: str, line_index: int = 0) -> "TradeDetail":
        values = decode_line(line, TRADE_LAYOUT)
        return cls(
            timestamp=values["timestamp"],
            direction=values["direction"],
            item_id=values["item_id"],
            price_mantissa=values["price"],
            quantity=values["quantity"],
            buyer=values["buyer"],
            seller=values["seller"],
            comment=clean_comment(values["comment"]),
            line_index=line_index,
        )

    @property
    def price(self) -> Decimal:
        return scale_price(self.price_mantissa)

    @property
    def timestamp_text(self) -> str:
        return format_timestamp(self.timestamp)


@dataclass(frozen=True)
class ExtendedTradeDetail:
    """EXTRD line: a versioned trade with a nested tag payload."""

    record_version: int
    timestamp: datetime
    direction: str
    item_id: str
    price_mantissa: int
    quantity: int
    buyer: str
    seller: str
    nested_tags: str
    line_index: int = 0

    @classmethod
    def from_line(cls, line: str, line_index: int = 0) -> "ExtendedTradeDetail":
        values = decode_line(line, EXTENDED_TRADE_LAYOUT)
        return cls(
            record_version=values["record_version"],
            timestamp=values["timestamp"],
            direction=values["direction"],
            item_id=values["item_id"],
            price_mantissa=values["price"],
            quantity=values["quantity"],
            buyer=values["buyer"],
            seller=values["seller"],
            nested_tags=values["nested_tags"],
            line_index=line_index,
        )

    @property
    def price(self) -> Decimal:
        return scale_price(self.price_mantissa)

    @property
    def timestamp_text(self) -> str:
        return format_timestamp(self.timestamp)

    @property
    def nested_tags_text(self) -> str:
        return remap_nested_tags(self.nested_tags)


@dataclass(frozen=True)
class EnvelopeFooter:
    """FOOTR line: record count and (version 5 only) character count."""

    total_record_count: int
    total_char_count: int | None
    line_index: int = 0

    @classmethod
    def from_line(cls, line: str, line_index: int = 0) -> "EnvelopeFooter":
        values = decode_line(line, FOOTER_LAYOUT)
        return cls(
            total_record_count=values["total_record_count"],
            total_char_count=values["total_char_count"],
            line_index=line_index,
        )

    @property
    def has_char_count(self) -> bool:
        return self.total_char_count is not None


DetailRecord = TradeDetail | ExtendedTradeDetail


__all__ = [
    "EnvelopeHeader",
    "TradeDetail",
    "ExtendedTradeDetail",
    "EnvelopeFooter",
    "DetailRecord",
    "parse_length_prefixed",
    "clean_comment",
    "remap_nested_tags",
]
