import calendar
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Iterable, Iterator, Optional

from tracker.domain import Record

RecordPredicate = Callable[[Record], bool]


def local_date(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of a timestamp.

    Naive timestamps are already local. Aware ones are converted to ``tz``,
    or to the platform's local zone when no zone is given.
    """
    return in_zone(ts, tz).date()


def in_zone(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Wall-clock view of a timestamp; naive values are returned as they are."""
    if ts.tzinfo is not None:
        return ts.astimezone(tz)
    return ts


def move_to_day(ts: datetime, day, tz: Optional[tzinfo] = None) -> datetime:
    """Same local time of day as ``ts``, on ``day``, in the zone ``ts`` is viewed in."""
    local = in_zone(ts, tz)
    return datetime.combine(_as_date(day), local.time(), tzinfo=local.tzinfo)


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def on_day(day, tz: Optional[tzinfo] = None) -> RecordPredicate:
    target = _as_date(day)

    def _filter(r: Record) -> bool:
        return local_date(r.created_at, tz) == target

    return _filter


def in_month(ref, tz: Optional[tzinfo] = None) -> RecordPredicate:
    ref = _as_date(ref)

    def _filter(r: Record) -> bool:
        d = local_date(r.created_at, tz)
        return (d.year, d.month) == (ref.year, ref.month)

    return _filter


def in_window(start, end, tz: Optional[tzinfo] = None) -> RecordPredicate:
    start, end = _as_date(start), _as_date(end)

    def _filter(r: Record) -> bool:
        return start <= local_date(r.created_at, tz) <= end

    return _filter


def iter_records(records: Iterable[Record], pred: RecordPredicate) -> Iterator[Record]:
    for r in records:
        if pred(r):
            yield r


def same_day(records: Iterable[Record], day, tz: Optional[tzinfo] = None) -> tuple[Record, ...]:
    return tuple(iter_records(records, on_day(day, tz)))


def same_month(records: Iterable[Record], ref, tz: Optional[tzinfo] = None) -> tuple[Record, ...]:
    return tuple(iter_records(records, in_month(ref, tz)))


def between(records: Iterable[Record], start, end, tz: Optional[tzinfo] = None) -> tuple[Record, ...]:
    # inclusive on both ends
    return tuple(iter_records(records, in_window(start, end, tz)))


def days_in_month(ref) -> int:
    ref = _as_date(ref)
    return calendar.monthrange(ref.year, ref.month)[1]


def remaining_days(ref) -> int:
    """Days left in ref's month, counting ref itself (1 on the last day)."""
    ref = _as_date(ref)
    return days_in_month(ref) - ref.day + 1


def week_start(now) -> date:
    now = _as_date(now)
    return now - timedelta(days=now.weekday())


def shift_month(ref, delta: int) -> date:
    ref = _as_date(ref)
    index = ref.year * 12 + (ref.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def month_label(ref) -> str:
    ref = _as_date(ref)
    return f"{calendar.month_name[ref.month]} {ref.year}"
