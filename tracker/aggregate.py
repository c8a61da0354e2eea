from decimal import Decimal
from functools import reduce
from typing import Final, Iterable

from tracker.domain import Record, style_for

ZERO: Final[Decimal] = Decimal(0)


def total(records: Iterable[Record]) -> Decimal:
    return reduce(lambda acc, r: acc + r.amount, records, ZERO)


def group_by_category(records: Iterable[Record]) -> dict[str, Decimal]:
    """Category -> summed amount, keyed on the literal category string.

    Keys appear in the order their category is first seen. A category that
    never occurs is simply absent; readers treat that as zero.
    """
    buckets: dict[str, Decimal] = {}
    for r in records:
        buckets[r.category] = buckets.get(r.category, ZERO) + r.amount
    return buckets


def breakdown_rows(breakdown: dict[str, Decimal]) -> list[dict]:
    # colour comes from the category style table, unknown strings share one
    return [{"name": name, "value": value, "color": style_for(name).color} for name, value in breakdown.items()]
