"""Tests for tradefeed.feed.records."""

from datetime import datetime
from decimal import Decimal

import pytest

from tests._support.feeds import TS_CANONICAL, extrade_line, footer_line, header_line, trade_line
from tradefeed.core.errors import DecodeError
from tradefeed.feed.records import (
    EnvelopeFooter,
    EnvelopeHeader,
    ExtendedTradeDetail,
    TradeDetail,
    clean_comment,
    parse_length_prefixed,
    remap_nested_tags,
)


class TestLengthPrefixedComment:
    def test_empty_field(self):
        assert parse_length_prefixed("") == (None, "")

    def test_declared_and_text(self):
        assert parse_length_prefixed("{5}hello") == (5, "hello")

    def test_declared_length_is_not_enforced_here(self):
        assert parse_length_prefixed("{9}abc") == (9, "abc")

    def test_text_may_contain_braces(self):
        assert parse_length_prefixed("{5}{a}bc") == (5, "{a}bc")

    @pytest.mark.parametrize("raw", ["hello", "{x}hello", "{5hello", "  {5}hello", "    "])
    def test_missing_prefix_keeps_raw_text(self, raw):
        assert parse_length_prefixed(raw) == (None, raw)


class TestCleaning:
    def test_clean_comment_strips_separators(self):
        assert clean_comment("a\\b,c/d   ") == "abcd"

    def test_clean_comment_keeps_inner_spaces(self):
        assert clean_comment("  two words  ") == "  two words"

    def test_remap_nested_tags(self):
        assert remap_nested_tags("{a|{b|c}}  ") == "[a,[b,c]]"


class TestEnvelopeHeader:
    def test_version_4_without_comment(self):
        header = EnvelopeHeader.from_line(header_line(4))

        assert header.version == 4
        assert header.creation_timestamp == datetime(2024, 1, 2, 3, 4, 5, 678000)
        assert header.creation_timestamp_text == TS_CANONICAL
        assert header.comment_length_declared is None
        assert header.comment == ""

    def test_version_5_comment(self):
        header = EnvelopeHeader.from_line(header_line(5, comment="hello"))

        assert header.comment_length_declared == 5
        assert header.comment == "hello"

    def test_comment_kept_verbatim(self):
        header = EnvelopeHeader.from_line(header_line(5, comment="a, b/ "))
        assert header.comment == "a, b/ "

    def test_bad_version(self):
        with pytest.raises(DecodeError):
            EnvelopeHeader.from_line(header_line("00x4"))


class TestTradeDetail:
    def test_from_line(self):
        trade = TradeDetail.from_line(trade_line(price=123456, quantity=7, comment="a,b"), 3)

        assert trade.line_index == 3
        assert trade.timestamp_text == TS_CANONICAL
        assert trade.direction == "B"
        assert trade.price == Decimal("12.3456")
        assert trade.quantity == 7
        assert trade.buyer == "BUY1"
        assert trade.seller == "SEL1"
        assert trade.comment == "ab"

    def test_records_are_immutable(self):
        trade = TradeDetail.from_line(trade_line())
        with pytest.raises(AttributeError):
            trade.quantity = 1


class TestExtendedTradeDetail:
    def test_from_line(self):
        extrade = ExtendedTradeDetail.from_line(extrade_line(price=25000, quantity=2), 4)

        assert extrade.record_version == 1
        assert extrade.direction == "BUY_"
        assert extrade.item_id == "XYZ000000001"
        assert extrade.price == Decimal("2.5000")
        assert extrade.nested_tags == "{a|b}"
        assert extrade.nested_tags_text == "[a,b]"
        assert extrade.line_index == 4

    def test_empty_nested_tags(self):
        extrade = ExtendedTradeDetail.from_line(extrade_line(nested_tags=""))
        assert extrade.nested_tags_text == ""


class TestEnvelopeFooter:
    def test_count_only(self):
        footer = EnvelopeFooter.from_line(footer_line(2), 9)

        assert footer.total_record_count == 2
        assert footer.total_char_count is None
        assert not footer.has_char_count
        assert footer.line_index == 9

    def test_with_char_count(self):
        footer = EnvelopeFooter.from_line(footer_line(2, char_count=180))
        assert footer.total_char_count == 180
        assert footer.has_char_count

    def test_bad_count(self):
        with pytest.raises(DecodeError):
            EnvelopeFooter.from_line(footer_line("00000000x2"))
