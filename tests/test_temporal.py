from datetime import date, datetime, timedelta, timezone

from tracker.temporal import (
    between, days_in_month, in_zone, local_date, month_label, move_to_day, remaining_days,
    same_day, same_month, shift_month, week_start,
)


def test_same_day_ignores_time_of_day(october):
    result = same_day(october, date(2026, 10, 17))
    assert [r.id for r in result] == ["r1", "r2"]


def test_same_day_accepts_datetime_target(october):
    result = same_day(october, datetime(2026, 10, 1, 23, 0))
    assert [r.id for r in result] == ["r4"]


def test_same_month_respects_month_boundary(october):
    assert [r.id for r in same_month(october, date(2026, 10, 31))] == ["r1", "r2", "r3", "r4"]
    assert [r.id for r in same_month(october, date(2026, 9, 1))] == ["r5"]
    assert same_month(october, date(2025, 10, 5)) == ()


def test_between_is_inclusive(october):
    result = between(october, date(2026, 10, 1), date(2026, 10, 12))
    assert [r.id for r in result] == ["r3", "r4"]


def test_empty_inputs():
    assert same_day((), date(2026, 1, 1)) == ()
    assert same_month([], date(2026, 1, 1)) == ()


def test_local_date_converts_aware_timestamps():
    ts = datetime(2026, 10, 17, 23, 30, tzinfo=timezone.utc)
    plus_two = timezone(timedelta(hours=2))
    assert local_date(ts, plus_two) == date(2026, 10, 18)
    assert local_date(datetime(2026, 10, 17, 23, 30)) == date(2026, 10, 17)


def test_edit_form_keeps_local_day_of_utc_record():
    new_york = timezone(timedelta(hours=-4))
    stored = datetime(2026, 11, 1, 2, 0, tzinfo=timezone.utc)

    shown = in_zone(stored, new_york)
    assert shown.date() == date(2026, 10, 31)
    assert shown.strftime("%H:%M") == "22:00"

    unchanged = move_to_day(stored, shown.date(), new_york)
    assert unchanged == stored
    assert local_date(unchanged, new_york) == date(2026, 10, 31)

    moved = move_to_day(stored, date(2026, 10, 29), new_york)
    assert moved == datetime(2026, 10, 29, 22, 0, tzinfo=new_york)


def test_move_to_day_keeps_naive_values_naive():
    ts = datetime(2026, 10, 17, 9, 15)
    assert in_zone(ts) is ts
    assert move_to_day(ts, date(2026, 10, 3)) == datetime(2026, 10, 3, 9, 15)


def test_remaining_days_counts_reference_day():
    assert remaining_days(date(2026, 10, 31)) == 1
    assert remaining_days(date(2026, 10, 1)) == 31
    assert remaining_days(date(2026, 9, 1)) == 30
    assert remaining_days(date(2028, 2, 1)) == 29


def test_days_in_month():
    assert days_in_month(date(2026, 2, 10)) == 28
    assert days_in_month(date(2026, 12, 10)) == 31


def test_week_start_is_monday():
    assert week_start(date(2026, 10, 18)) == date(2026, 10, 12)  # Sunday
    assert week_start(date(2026, 10, 12)) == date(2026, 10, 12)  # Monday
    assert week_start(date(2026, 10, 15)) == date(2026, 10, 12)


def test_shift_month_returns_new_value():
    ref = date(2026, 12, 31)
    assert shift_month(ref, 1) == date(2027, 1, 1)
    assert shift_month(ref, -12) == date(2025, 12, 1)
    assert shift_month(date(2026, 1, 15), -1) == date(2025, 12, 1)
    assert ref == date(2026, 12, 31)


def test_month_label():
    assert month_label(date(2026, 10, 18)) == "October 2026"
