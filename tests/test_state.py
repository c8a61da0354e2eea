import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tracker.domain import Record, RecordDraft
from tracker.errors import NotFound, StoreUnavailable, ValidationError
from tracker.events import BUDGET_CHANGED, FETCH_FAILED, RECORDS_CHANGED
from tracker.state import TrackerState
from tracker.store import InMemoryStore


class CountingStore(InMemoryStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.creates = 0
        self.fetches = 0

    def create_record(self, record):
        self.creates += 1
        return super().create_record(record)

    def fetch_records(self, owner_id):
        self.fetches += 1
        return super().fetch_records(owner_id)


def make_state():
    store = CountingStore([
        Record("a", "Lunch", Decimal(12), "Food", datetime(2026, 10, 17, 12, 0), "u1"),
    ])
    state = TrackerState(store, "u1")
    state.refresh()
    return state, store


def test_refresh_loads_snapshot():
    state, _ = make_state()
    assert state.loaded
    assert [r.id for r in state.records] == ["a"]
    assert state.budget.monthly_limit == 50000
    assert state.last_error is None


def test_failed_refresh_keeps_previous_snapshot():
    state, store = make_state()
    before = (state.records, state.budget)
    alerts = []
    state.bus.subscribe(FETCH_FAILED, lambda event, payload: alerts.append(payload) or {})

    store.available = False
    assert state.refresh() is False
    assert (state.records, state.budget) == before
    assert isinstance(state.last_error, StoreUnavailable)
    assert alerts and alerts[0]["owner_id"] == "u1"

    store.available = True
    assert state.refresh() is True
    assert state.last_error is None


def test_add_validates_before_calling_store():
    state, store = make_state()
    with pytest.raises(ValidationError) as err:
        state.add(RecordDraft("", "10", "Food"))
    assert err.value.field == "name"
    assert store.creates == 0


def test_add_refreshes_from_store():
    state, store = make_state()
    fetches = store.fetches
    events = []
    state.bus.subscribe(RECORDS_CHANGED, lambda event, payload: events.append(payload) or {})

    rid = state.add(RecordDraft("Taxi", "30.25", "Travel", datetime(2026, 10, 18, 8, 0)))
    assert [r.id for r in state.records] == [rid, "a"]
    assert state.records[0].owner_id == "u1"
    assert store.fetches == fetches + 1
    assert events == [{"action": "create", "id": rid}]


def test_edit_and_remove():
    state, _ = make_state()
    state.edit("a", RecordDraft("Big lunch", "20", "Food"))
    assert state.records[0].name == "Big lunch"
    assert state.records[0].created_at == datetime(2026, 10, 17, 12, 0)

    state.remove("a")
    assert state.records == ()


def test_new_records_carry_the_configured_zone():
    store = InMemoryStore()
    ist = timezone(timedelta(hours=5, minutes=30))
    state = TrackerState(store, "u1", tz=ist)

    state.add(RecordDraft("Dinner", "40", "Food", datetime(2026, 10, 18, 23, 0)))
    assert state.records[0].created_at == datetime(2026, 10, 18, 23, 0, tzinfo=ist)

    state.add(RecordDraft("Tea", "5", "Food"))
    assert all(r.created_at.utcoffset() is not None for r in state.records)


def test_edit_and_remove_only_touch_shown_records():
    state, store = make_state()
    with pytest.raises(NotFound):
        state.edit("zzz", RecordDraft("Taxi", "3", "Travel"))
    with pytest.raises(NotFound):
        state.remove("zzz")

    # removed elsewhere after the last refresh
    store.delete_record("a")
    with pytest.raises(NotFound):
        state.edit("a", RecordDraft("Big lunch", "20", "Food"))
    assert [r.id for r in state.records] == ["a"]


def test_store_errors_propagate_and_leave_snapshot():
    state, store = make_state()
    before = state.records
    with pytest.raises(NotFound):
        state.remove("missing")
    assert state.records == before

    store.available = False
    with pytest.raises(StoreUnavailable):
        state.add(RecordDraft("Taxi", "3", "Travel"))
    assert state.records == before


def test_change_budget():
    state, _ = make_state()
    events = []
    state.bus.subscribe(BUDGET_CHANGED, lambda event, payload: events.append(payload) or {})
    assert state.change_budget("3000") == 3000
    assert state.budget.monthly_limit == 3000
    assert events[0]["monthly_limit"] == 3000

    for bad in ("0", "-5", "lots"):
        with pytest.raises(ValidationError):
            state.change_budget(bad)
    assert state.budget.monthly_limit == 3000


@pytest.mark.asyncio
async def test_refresh_async_loads_snapshot():
    store = InMemoryStore([Record("a", "Lunch", Decimal(12), "Food", datetime(2026, 10, 17), "u1")])
    state = TrackerState(store, "u1")
    assert await state.refresh_async() is True
    assert [r.id for r in state.records] == ["a"]


@pytest.mark.asyncio
async def test_refresh_async_single_in_flight():
    state, store = make_state()
    fetches = store.fetches
    results = await asyncio.gather(state.refresh_async(), state.refresh_async())
    assert sorted(results) == [False, True]
    assert store.fetches == fetches + 1


@pytest.mark.asyncio
async def test_refresh_async_failure_keeps_snapshot():
    state, store = make_state()
    before = state.records
    store.available = False
    assert await state.refresh_async() is False
    assert state.records == before
    assert isinstance(state.last_error, StoreUnavailable)
