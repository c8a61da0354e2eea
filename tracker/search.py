from typing import Iterable

from tracker.domain import ALL, Record
from tracker.functional import both
from tracker.temporal import RecordPredicate, iter_records


def matches_text(query: str) -> RecordPredicate:
    needle = (query or "").lower()

    def _filter(r: Record) -> bool:
        return needle in r.name.lower()

    return _filter


def matches_category(category: str) -> RecordPredicate:
    def _filter(r: Record) -> bool:
        return category == ALL or r.category == category

    return _filter


def search(records: Iterable[Record], query: str = "", category: str = ALL) -> tuple[Record, ...]:
    """Records whose name contains ``query`` (any case) and whose category matches.

    Input order is preserved.
    """
    return tuple(iter_records(records, both(matches_text(query), matches_category(category))))
