"""
Fixed-width field decoder.

Extracts fixed-offset substrings from a raw feed line and converts them to
typed values. This module is pure: no I/O, no logging, no state.

Decoding rules:
- Integers parse the exact zero-padded substring (optional sign, ASCII
  digits only). Anything else raises ``DecodeError``.
- Prices parse the substring as an integer mantissa and scale it by
  10**-4 with ``Decimal`` arithmetic; floats are never involved.
- Timestamps must be exactly 17 digits ``yyyyMMddHHmmssSSS`` forming a real
  calendar instant. ``format_timestamp`` renders the canonical
  ``yyyy-MM-dd HH:mm:ss.SSS`` form and is shared by every record type.
- Short lines never raise ``IndexError``: fixed numeric and timestamp
  fields that are truncated raise ``DecodeError``; codes and free text keep
  whatever characters are present.

Example:
    >>> values = decode_line(line, TRADE_LAYOUT)
    >>> values["price"]          # raw mantissa
    10000
    >>> scale_price(values["price"])
    Decimal('1.0000')
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Any

from tradefeed.core.errors import DecodeError
from tradefeed.feed.schema import (
    PRICE_SCALE,
    FieldKind,
    FieldSpec,
    RecordLayout,
)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_TIMESTAMP_PATTERN = re.compile(
    r"(?P<year>[0-9]{4})(?P<month>[0-9]{2})(?P<day>[0-9]{2})"
    r"(?P<hour>[0-9]{2})(?P<minute>[0-9]{2})(?P<second>[0-9]{2})(?P<milli>[0-9]{3})"
)
_PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_SCALE)


# =============================================================================
# SLICING
# =============================================================================


def slice_field(line: str, spec: FieldSpec) -> str | None:
    """
    Return the characters of ``spec`` present in ``line``.

    Returns None when the line ends before the field starts. A fixed field
    that is only partly present returns the partial substring; callers
    decide whether that is acceptable.
    """
    if len(line) <= spec.start and spec.length is not None:
        return None
    if spec.length is None:
        return line[spec.start :]
    return line[spec.start : spec.start + spec.length]


def is_truncated(line: str, spec: FieldSpec) -> bool:
    """True when a fixed-length field is missing or cut short."""
    if spec.length is None:
        return False
    return len(line) < spec.start + spec.length


# =============================================================================
# SCALAR DECODERS
# =============================================================================


def decode_int(raw: str, field: str = "value") -> int:
    """Parse a zero-padded integer exactly."""
    if raw is None or not _INT_PATTERN.fullmatch(raw):
        raise DecodeError(f"{field} is not an integer: {raw!r}", field=field, value=raw)
    return int(raw)


def decode_price_mantissa(raw: str, field: str = "price") -> int:
    """Parse the integer mantissa of a fixed-point price."""
    return decode_int(raw, field)


def scale_price(mantissa: int) -> Decimal:
    """Scale a mantissa by 10**-4 exactly, keeping four fraction digits."""
    return Decimal(mantissa).scaleb(-PRICE_SCALE).quantize(_PRICE_QUANTUM)


def encode_price(price: Decimal) -> int:
    """Inverse of ``scale_price``: the integer mantissa of a price."""
    return int(price.scaleb(PRICE_SCALE).to_integral_exact())


def format_price(price: Decimal) -> str:
    """Render a price with exactly four fraction digits."""
    return f"{price.quantize(_PRICE_QUANTUM):f}"


def decode_timestamp(raw: str, field: str = "timestamp") -> datetime:
    """Parse a 17-character ``yyyyMMddHHmmssSSS`` timestamp."""
    match = _TIMESTAMP_PATTERN.fullmatch(raw or "")
    if match is None:
        raise DecodeError(
            f"{field} does not match yyyyMMddHHmmssSSS: {raw!r}", field=field, value=raw
        )
    parts = {k: int(v) for k, v in match.groupdict().items()}
    try:
        return datetime(
            parts["year"],
            parts["month"],
            parts["day"],
            parts["hour"],
            parts["minute"],
            parts["second"],
            parts["milli"] * 1000,
        )
    except ValueError as e:
        raise DecodeError(f"{field} is not a valid instant: {raw!r}", field=field, value=raw, cause=e)


def format_timestamp(value: datetime) -> str:
    """Render the canonical ``yyyy-MM-dd HH:mm:ss.SSS`` form."""
    return f"{value.year:04d}-{value:%m-%d %H:%M:%S}.{value.microsecond // 1000:03d}"


# =============================================================================
# LINE DECODER
# =============================================================================


def decode_field(line: str, spec: FieldSpec) -> Any:
    """
    Decode one field of ``line`` according to its kind.

    Optional fields that are missing or blank decode to None.
    """
    raw = slice_field(line, spec)

    if spec.optional:
        if raw is None or not raw.strip():
            return None
        if is_truncated(line, spec):
            raise DecodeError(f"{spec.name} is truncated: {raw!r}", field=spec.name, value=raw)

    if spec.kind in (FieldKind.CODE, FieldKind.TEXT):
        return raw or ""

    if raw is None or is_truncated(line, spec):
        raise DecodeError(
            f"{spec.name} is missing or truncated (line has {len(line)} chars, "
            f"field needs [{spec.start},{spec.end}))",
            field=spec.name,
            value=raw,
        )

    if spec.kind is FieldKind.INT:
        return decode_int(raw, spec.name)
    if spec.kind is FieldKind.PRICE:
        return decode_price_mantissa(raw, spec.name)
    if spec.kind is FieldKind.TIMESTAMP:
        return decode_timestamp(raw, spec.name)

    raise DecodeError(f"unsupported field kind {spec.kind!r}", field=spec.name)


def decode_line(line: str, layout: RecordLayout) -> dict[str, Any]:
    """
    Decode every field of ``layout`` from ``line``.

    Raises:
        DecodeError: first required field that cannot be decoded
    """
    return {spec.name: decode_field(line, spec) for spec in layout.fields}


__all__ = [
    "slice_field",
    "is_truncated",
    "decode_int",
    "decode_price_mantissa",
    "scale_price",
    "encode_price",
    "format_price",
    "decode_timestamp",
    "format_timestamp",
    "decode_field",
    "decode_line",
]
