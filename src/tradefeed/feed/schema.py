"""
Trade feed schema - record tags, fixed-width layouts and report columns.

This is the only place that defines feed-format constants.
All other modules in this package import from here.

Offsets are 0-based, end-exclusive character positions. A field with
``length=None`` runs to the end of the line.
"""

from dataclasses import dataclass
from enum import Enum

TAG_WIDTH = 5

PRICE_SCALE = 4  # implied decimal digits in price mantissas
PRICE_DIVISOR = 10**PRICE_SCALE

TIMESTAMP_INPUT_WIDTH = 17  # yyyyMMddHHmmssSSS


class RecordTag(str, Enum):
    """Line classification by the first five characters."""

    HEADR = "HEADR"
    TRADE = "TRADE"
    EXTRD = "EXTRD"
    FOOTR = "FOOTR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def classify(cls, line: str) -> "RecordTag":
        """Classify a raw line. Anything unrecognised is UNKNOWN."""
        try:
            return cls(line[:TAG_WIDTH])
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_detail(self) -> bool:
        return self in (RecordTag.TRADE, RecordTag.EXTRD)


class FieldKind(str, Enum):
    INT = "int"
    PRICE = "price"
    TIMESTAMP = "timestamp"
    CODE = "code"  # fixed-length code, kept verbatim
    TEXT = "text"  # free text


@dataclass(frozen=True)
class FieldSpec:
    """One fixed-width field."""

    name: str
    start: int
    length: int | None
    kind: FieldKind
    optional: bool = False  # may be missing from a short line without a finding

    @property
    def end(self) -> int | None:
        return None if self.length is None else self.start + self.length


@dataclass(frozen=True)
class RecordLayout:
    """Field table for one record tag."""

    tag: RecordTag
    fields: tuple[FieldSpec, ...]

    @property
    def width(self) -> int:
        """Template width: end of the last fixed field that must be present."""
        ends = [f.end if f.end is not None else f.start for f in self.fields if not f.optional]
        return max(ends)

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.tag.value} has no field {name!r}")


# =============================================================================
# LAYOUTS
# =============================================================================

HEADER_LAYOUT = RecordLayout(
    RecordTag.HEADR,
    (
        FieldSpec("version", 5, 4, FieldKind.INT),
        FieldSpec("creation_timestamp", 9, 17, FieldKind.TIMESTAMP),
        FieldSpec("comment", 26, None, FieldKind.TEXT),
    ),
)

TRADE_LAYOUT = RecordLayout(
    RecordTag.TRADE,
    (
        FieldSpec("timestamp", 5, 17, FieldKind.TIMESTAMP),
        FieldSpec("direction", 22, 1, FieldKind.CODE),
        FieldSpec("item_id", 23, 12, FieldKind.CODE),
        FieldSpec("price", 35, 15, FieldKind.PRICE),
        FieldSpec("quantity", 50, 11, FieldKind.INT),
        FieldSpec("buyer", 61, 4, FieldKind.CODE),
        FieldSpec("seller", 65, 4, FieldKind.CODE),
        FieldSpec("comment", 69, 32, FieldKind.TEXT),
    ),
)

EXTENDED_TRADE_LAYOUT = RecordLayout(
    RecordTag.EXTRD,
    (
        FieldSpec("record_version", 5, 4, FieldKind.INT),
        FieldSpec("timestamp", 9, 17, FieldKind.TIMESTAMP),
        FieldSpec("direction", 26, 4, FieldKind.CODE),
        FieldSpec("item_id", 30, 12, FieldKind.CODE),
        FieldSpec("price", 42, 15, FieldKind.PRICE),
        FieldSpec("quantity", 57, 11, FieldKind.INT),
        FieldSpec("buyer", 68, 4, FieldKind.CODE),
        FieldSpec("seller", 72, 4, FieldKind.CODE),
        FieldSpec("nested_tags", 76, None, FieldKind.TEXT),
    ),
)

FOOTER_LAYOUT = RecordLayout(
    RecordTag.FOOTR,
    (
        FieldSpec("total_record_count", 5, 10, FieldKind.INT),
        FieldSpec("total_char_count", 15, 10, FieldKind.INT, optional=True),
    ),
)

LAYOUTS: dict[RecordTag, RecordLayout] = {
    RecordTag.HEADR: HEADER_LAYOUT,
    RecordTag.TRADE: TRADE_LAYOUT,
    RecordTag.EXTRD: EXTENDED_TRADE_LAYOUT,
    RecordTag.FOOTR: FOOTER_LAYOUT,
}


# =============================================================================
# VALUE DOMAINS
# =============================================================================

HEADER_VERSIONS = frozenset({4, 5})
CHAR_COUNT_HEADER_VERSION = 5  # footer char count only means something here
COMMENT_HEADER_VERSION = 5  # lowest version allowed to carry a header comment

TRADE_DIRECTIONS = frozenset({"B", "S"})
EXTENDED_TRADE_DIRECTIONS = frozenset({"BUY_", "SELL"})
EXTENDED_TRADE_VERSION = 1

ITEM_ID_LENGTH = 12
ITEM_ID_PREFIX_LENGTH = 3
PARTY_CODE_LENGTH = 4

COMMENT_STRIP_CHARS = "\\,/"
NESTED_TAG_REMAP = str.maketrans({"{": "[", "}": "]", "|": ","})


# =============================================================================
# REPORT COLUMNS
# =============================================================================

TRADE_COLUMNS = (
    "Trade Date and Time",
    "Direction",
    "Item ID",
    "Price",
    "Quantity",
    "Buyer",
    "Seller",
    "Comment",
)

EXTENDED_TRADE_COLUMNS = (
    "Trade Version",
    "Date & Time",
    "Direction",
    "Item ID",
    "Price",
    "Quantity",
    "Buyer",
    "Seller",
    "Nested Tags",
)

INFO_COLUMNS = (
    "Header Version",
    "File Creation Date and Time",
    "File Comment",
    "Total Number of Trades and ExTrades",
    "Number of Characters in Trade and Extrade Structures",
)
