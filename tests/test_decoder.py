"""Tests for tradefeed.feed.decoder - fixed-width field decoding."""

from datetime import datetime
from decimal import Decimal

import pytest

from tests._support.feeds import TS, TS_CANONICAL, trade_line
from tradefeed.core.errors import DecodeError
from tradefeed.feed.decoder import (
    decode_field,
    decode_int,
    decode_line,
    decode_timestamp,
    encode_price,
    format_price,
    format_timestamp,
    scale_price,
    slice_field,
)
from tradefeed.feed.schema import FOOTER_LAYOUT, TRADE_LAYOUT, FieldKind, FieldSpec


class TestDecodeInt:
    def test_zero_padded(self):
        assert decode_int("0000000010") == 10

    def test_signed(self):
        assert decode_int("-0005") == -5

    @pytest.mark.parametrize("raw", ["", "00 1", "12a4", " 123", "1.5", "١٢"])
    def test_rejects_non_digits(self, raw):
        with pytest.raises(DecodeError) as exc_info:
            decode_int(raw, "quantity")
        assert exc_info.value.field == "quantity"


class TestPrices:
    def test_scale_one(self):
        assert scale_price(10000) == Decimal("1.0000")
        assert format_price(scale_price(10000)) == "1.0000"

    def test_scale_keeps_four_digits(self):
        assert format_price(scale_price(5)) == "0.0005"
        assert format_price(scale_price(123456789012345)) == "12345678901.2345"

    def test_no_float_rounding(self):
        # 0.1 + 0.2 style drift would show up here with floats
        assert scale_price(1000) + scale_price(2000) == Decimal("0.3000")

    @pytest.mark.parametrize("mantissa", [0, 1, 9999, 10000, 10001, 999999999999999])
    def test_round_trip_reproduces_mantissa(self, mantissa):
        assert encode_price(scale_price(mantissa)) == mantissa


class TestTimestamps:
    def test_decode_and_format(self):
        value = decode_timestamp(TS)
        assert value == datetime(2024, 1, 2, 3, 4, 5, 678000)
        assert format_timestamp(value) == TS_CANONICAL

    def test_millis_are_zero_padded(self):
        assert format_timestamp(decode_timestamp("20240102030405007")) == "2024-01-02 03:04:05.007"

    def test_year_is_zero_padded(self):
        assert format_timestamp(decode_timestamp("09990102030405678")) == "0999-01-02 03:04:05.678"

    @pytest.mark.parametrize(
        "raw",
        [
            "2024010203040567",  # 16 chars
            "202401020304056789",  # 18 chars
            "2024-01-02T03:04:",
            "20241302030405678",  # month 13
            "20240230030405678",  # Feb 30
            "20240102250405678",  # hour 25
        ],
    )
    def test_rejects_bad_pattern(self, raw):
        with pytest.raises(DecodeError):
            decode_timestamp(raw)


class TestLineDecoding:
    def test_trade_line(self):
        values = decode_line(trade_line(price=10000, quantity=10, comment="hello"), TRADE_LAYOUT)

        assert values["price"] == 10000
        assert values["quantity"] == 10
        assert values["direction"] == "B"
        assert values["item_id"] == "ABC123456789"
        assert values["comment"].rstrip() == "hello"

    def test_slice_past_end_returns_none(self):
        spec = FieldSpec("x", 50, 4, FieldKind.CODE)
        assert slice_field("short", spec) is None

    def test_truncated_code_keeps_partial_value(self):
        line = trade_line()[:63]  # buyer cut after two characters
        assert decode_field(line, TRADE_LAYOUT.field("buyer")) == "BU"
        assert decode_field(line, TRADE_LAYOUT.field("seller")) == ""

    def test_truncated_number_is_decode_failure(self):
        line = trade_line()[:55]  # quantity cut short
        with pytest.raises(DecodeError) as exc_info:
            decode_line(line, TRADE_LAYOUT)
        assert exc_info.value.field == "quantity"

    def test_non_numeric_price(self):
        line = trade_line(price="00000000001000X")
        with pytest.raises(DecodeError) as exc_info:
            decode_line(line, TRADE_LAYOUT)
        assert exc_info.value.field == "price"

    def test_optional_field_absent_when_missing_or_blank(self):
        assert decode_line("FOOTR0000000002", FOOTER_LAYOUT)["total_char_count"] is None
        assert decode_line("FOOTR0000000002" + " " * 10, FOOTER_LAYOUT)["total_char_count"] is None

    def test_optional_field_present(self):
        values = decode_line("FOOTR00000000020000000345", FOOTER_LAYOUT)
        assert values == {"total_record_count": 2, "total_char_count": 345}

    def test_optional_field_truncated(self):
        with pytest.raises(DecodeError):
            decode_line("FOOTR000000000200003", FOOTER_LAYOUT)
