"""
Application state: the current snapshot of one owner's records and budget.

The snapshot is only ever replaced as a whole by a successful fetch. A failed
fetch keeps the previous snapshot and remembers the error; mutations go to the
store first and are followed by a full refresh, so what is shown always
reflects the store as of the last completed fetch.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Optional

from tracker.domain import Budget, Record, RecordDraft, with_zone
from tracker.errors import NotFound, StoreUnavailable, TrackerError, Unauthorized, ValidationError
from tracker.events import BUDGET_CHANGED, FETCH_FAILED, RECORDS_CHANGED, EventBus, register_default_handlers
from tracker.functional import find_record, parse_amount, validate_draft
from tracker.store import RecordStore

logger = logging.getLogger(__name__)


class TrackerState:

    def __init__(self, store: RecordStore, owner_id: Optional[str] = None, bus: Optional[EventBus] = None,
                 tz: Optional[tzinfo] = None):
        self.store = store
        self.owner_id = owner_id
        self.tz = tz
        self.bus = bus or register_default_handlers(EventBus())
        self.records: tuple[Record, ...] = ()
        self.budget: Budget = Budget(owner_id=owner_id)
        self.last_error: Optional[TrackerError] = None
        self.loaded = False
        self._in_flight = False

    def _apply(self, records, budget: Budget) -> None:
        self.records = tuple(records)
        self.budget = budget
        self.last_error = None
        self.loaded = True

    def _fetch_failed(self, e: TrackerError) -> bool:
        logger.warning("refresh for %s failed, keeping previous snapshot: %s", self.owner_id, e)
        self.last_error = e
        self.bus.publish(FETCH_FAILED, {"owner_id": self.owner_id, "error": str(e)})
        return False

    def refresh(self) -> bool:
        """Replace the snapshot with fresh store data. False if the fetch failed."""
        try:
            records = self.store.fetch_records(self.owner_id)
            budget = self.store.get_budget(self.owner_id)
        except (StoreUnavailable, Unauthorized) as e:
            return self._fetch_failed(e)
        self._apply(records, budget)
        logger.debug("loaded %d records for %s", len(self.records), self.owner_id)
        return True

    async def refresh_async(self) -> bool:
        """Non-blocking refresh; returns False at once if one is already running."""
        if self._in_flight:
            logger.debug("refresh already in flight for %s", self.owner_id)
            return False
        self._in_flight = True
        try:
            records, budget = await asyncio.gather(
                asyncio.to_thread(self.store.fetch_records, self.owner_id),
                asyncio.to_thread(self.store.get_budget, self.owner_id),
            )
        except (StoreUnavailable, Unauthorized) as e:
            return self._fetch_failed(e)
        finally:
            self._in_flight = False
        self._apply(records, budget)
        return True

    def _validated(self, draft: RecordDraft) -> Record:
        result = validate_draft(draft, owner_id=self.owner_id, now=datetime.now(self.tz))
        if not result.is_right():
            raise ValidationError(result.get_error())
        record = result.get_or_else(None)
        return replace(record, created_at=with_zone(record.created_at, self.tz))

    def _shown(self, record_id: str) -> Record:
        found = find_record(self.records, record_id)
        if not found.is_some():
            raise NotFound(record_id)
        return found.get_or_else(None)

    def add(self, draft: RecordDraft) -> str:
        record = self._validated(draft)
        record_id = self.store.create_record(record)
        logger.info("created record %s", record_id)
        self.bus.publish(RECORDS_CHANGED, {"action": "create", "id": record_id})
        self.refresh()
        return record_id

    def edit(self, record_id: str, draft: RecordDraft) -> None:
        """Replace a shown record's fields; without a new timestamp it keeps its own."""
        current = self._shown(record_id)
        record = self._validated(draft)
        fields = {"name": record.name, "amount": record.amount, "category": record.category}
        if draft.created_at is not None:
            fields["created_at"] = record.created_at
        self.store.update_record(record_id, fields)
        logger.info("updated record %s (%s -> %s)", record_id, current.name, record.name)
        self.bus.publish(RECORDS_CHANGED, {"action": "update", "id": record_id})
        self.refresh()

    def remove(self, record_id: str) -> None:
        current = self._shown(record_id)
        self.store.delete_record(record_id)
        logger.info("deleted record %s (%s)", record_id, current.name)
        self.bus.publish(RECORDS_CHANGED, {"action": "delete", "id": record_id})
        self.refresh()

    def change_budget(self, value) -> Decimal:
        result = parse_amount(value)
        if not result.is_right():
            raise ValidationError(result.get_error())
        limit = result.get_or_else(None)
        if limit <= 0:
            raise ValidationError({"error": "validation_error", "field": "budget", "message": "Budget must be positive"})
        self.store.set_budget(self.owner_id, limit)
        self.bus.publish(BUDGET_CHANGED, {"owner_id": self.owner_id, "monthly_limit": limit})
        self.refresh()
        return limit
