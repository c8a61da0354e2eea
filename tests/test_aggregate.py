from datetime import datetime
from decimal import Decimal

from tracker.aggregate import breakdown_rows, group_by_category, total
from tracker.domain import Record, style_for


def make_record(amount, category, name="item"):
    return Record(None, name, Decimal(str(amount)), category, datetime(2026, 10, 1))


def test_total_empty_is_zero():
    assert total([]) == 0
    assert isinstance(total(()), Decimal)


def test_scenario_sum_and_grouping():
    records = [make_record(100, "Food"), make_record(50, "Food"), make_record(25, "Travel")]
    assert total(records) == 175
    assert group_by_category(records) == {"Food": 150, "Travel": 25}


def test_group_by_category_first_seen_order():
    records = [make_record(1, "Travel"), make_record(2, "Food"), make_record(3, "Travel")]
    assert list(group_by_category(records)) == ["Travel", "Food"]


def test_group_by_category_conserves_total_with_unknown_categories():
    records = [
        make_record("10.10", "Food"),
        make_record("0.20", "food"),
        make_record(7, "Groceries"),
        make_record(0, "Other"),
        make_record("3.333", "Food"),
    ]
    breakdown = group_by_category(records)
    assert sum(breakdown.values()) == total(records)
    assert breakdown["food"] == Decimal("0.20")
    assert breakdown["Groceries"] == 7
    assert "Health" not in breakdown


def test_full_precision_is_kept():
    records = [make_record("0.1", "Food")] * 3
    assert total(records) == Decimal("0.3")


def test_breakdown_rows_colors():
    rows = breakdown_rows({"Food": Decimal(5), "Weird": Decimal(1)})
    assert rows[0] == {"name": "Food", "value": Decimal(5), "color": style_for("Food").color}
    assert rows[1]["color"] == style_for("Weird").color

    assert [r["name"] for r in breakdown_rows({"Travel": Decimal(1), "Food": Decimal(2)})] == ["Travel", "Food"]
