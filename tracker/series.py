import calendar
from datetime import timedelta
from typing import Iterable

import pandas as pd

from tracker.aggregate import total
from tracker.domain import Record, WeekPoint
from tracker.temporal import same_day, week_start


def week_series(records: Iterable[Record], now, tz=None) -> tuple[WeekPoint, ...]:
    """Daily totals for Monday..Sunday of the week containing ``now``.

    Always seven points; days without records are zero.
    """
    records = tuple(records)
    monday = week_start(now)
    points = []
    for offset in range(7):
        day = monday + timedelta(days=offset)
        points.append(WeekPoint(
            label=calendar.day_abbr[day.weekday()],
            day=day,
            total=total(same_day(records, day, tz)),
        ))
    return tuple(points)


def series_frame(points: Iterable[WeekPoint]) -> pd.DataFrame:
    rows = [{"day": p.day, "label": p.label, "total": float(p.total)} for p in points]
    return pd.DataFrame(rows, columns=["day", "label", "total"])


def breakdown_frame(rows: list[dict]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=["name", "value", "color"])
    df["value"] = df["value"].astype(float)
    return df


def records_frame(records: Iterable[Record]) -> pd.DataFrame:
    rows = [
        {
            "id": r.id,
            "date": pd.Timestamp(r.created_at),
            "name": r.name,
            "category": r.category,
            "amount": float(r.amount),
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=["id", "date", "name", "category", "amount"])
