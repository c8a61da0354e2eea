from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tracker.domain import (
    ALL, CATEGORY_STYLES, DEFAULT_MONTHLY_LIMIT, UNKNOWN_STYLE,
    Budget, Category, Record, style_for, with_zone,
)
from tracker.temporal import local_date

IST = timezone(timedelta(hours=5, minutes=30))


def test_category_enumeration_is_closed():
    assert [c.value for c in Category] == ["Food", "Games", "Shopping", "Travel", "Bills", "Health", "Other"]
    assert set(CATEGORY_STYLES) == set(Category)
    assert ALL not in {c.value for c in Category}


def test_style_for_known_and_unknown():
    assert style_for("Food").label == "Food"
    assert style_for("Groceries") is UNKNOWN_STYLE


def test_budget_defaults_to_50000():
    assert Budget(owner_id="u1").monthly_limit == DEFAULT_MONTHLY_LIMIT == Decimal(50000)


def test_record_from_row_parses_store_shape():
    row = {
        "id": 7,
        "name": "Lunch",
        "amount": 12.5,
        "category": "Food",
        "created_at": "2026-10-17T12:30:00Z",
        "user_id": "u1",
    }
    r = Record.from_row(row)
    assert r.id == "7"
    assert r.amount == Decimal("12.5")
    assert r.created_at == datetime(2026, 10, 17, 12, 30, tzinfo=timezone.utc)
    assert r.owner_id == "u1"


def test_record_to_row_keeps_full_precision():
    r = Record(None, "Coffee", Decimal("3.456"), "Food", datetime(2026, 10, 1, 8, 0), owner_id="u1")
    row = r.to_row()
    assert row["amount"] == "3.456"
    assert row["created_at"] == datetime(2026, 10, 1, 8, 0).astimezone().isoformat()
    assert row["user_id"] == "u1"
    assert "id" not in row


def test_record_is_immutable():
    r = Record(None, "Coffee", Decimal(3), "Food", datetime(2026, 10, 1))
    with pytest.raises(AttributeError):
        r.amount = Decimal(4)


def test_with_zone_keeps_wall_clock():
    naive = datetime(2026, 10, 18, 23, 0)
    assert with_zone(naive, IST) == datetime(2026, 10, 18, 23, 0, tzinfo=IST)
    assert with_zone(naive).replace(tzinfo=None) == naive
    aware = datetime(2026, 10, 18, 17, 30, tzinfo=timezone.utc)
    assert with_zone(aware, IST) is aware


def test_late_evening_record_keeps_its_day_through_the_store():
    r = Record(None, "Dinner", Decimal(40), "Food", with_zone(datetime(2026, 10, 18, 23, 0), IST))
    row = r.to_row()
    assert row["created_at"] == "2026-10-18T23:00:00+05:30"

    # a timestamptz column answers in UTC
    stored = datetime.fromisoformat(row["created_at"]).astimezone(timezone.utc)
    back = Record.from_row({**row, "created_at": stored.isoformat()})
    assert back.created_at == r.created_at
    assert local_date(back.created_at, IST) == date(2026, 10, 18)


def test_naive_record_is_sent_with_an_offset():
    r = Record(None, "Dinner", Decimal(40), "Food", datetime(2026, 10, 31, 23, 0))
    sent = datetime.fromisoformat(r.to_row()["created_at"])
    assert sent.utcoffset() is not None
    assert local_date(sent.astimezone(timezone.utc)) == date(2026, 10, 31)
