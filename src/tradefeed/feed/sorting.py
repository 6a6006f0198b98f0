"""
Notional ordering of detail records.

The key is ``price_mantissa * quantity`` computed on the raw integers.
Scaling by 10**-4 would divide every key by the same constant, so the
order is identical and integer arithmetic stays exact.

Ties keep feed order: Python's sort is stable, also with ``reverse=True``,
so records with equal notional appear in ascending ``line_index`` order
as long as the input is in feed order. Re-sorting a sorted list is the
identity.
"""

from collections.abc import Iterable
from typing import TypeVar

from tradefeed.feed.records import DetailRecord, ExtendedTradeDetail, TradeDetail

R = TypeVar("R", TradeDetail, ExtendedTradeDetail)


def notional_key(record: DetailRecord) -> int:
    """Raw notional value used for ordering."""
    return record.price_mantissa * record.quantity


def sort_by_notional(records: Iterable[R]) -> list[R]:
    """Return a new list ordered by notional value, largest first."""
    in_feed_order = sorted(records, key=lambda r: r.line_index)
    return sorted(in_feed_order, key=notional_key, reverse=True)


def is_notional_ordered(records: list[DetailRecord]) -> bool:
    """True when ``records`` is non-increasing in notional value."""
    keys = [notional_key(r) for r in records]
    return all(a >= b for a, b in zip(keys, keys[1:]))


__all__ = ["notional_key", "sort_by_notional", "is_notional_ordered"]
