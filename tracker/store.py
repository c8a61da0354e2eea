"""
Record stores: the boundary between the tracker and wherever records live.

Every store exposes the same small API (fetch all records for an owner,
create/update/delete one record, read/write the owner's monthly budget) and
reports failures with the exceptions from tracker.errors:

- StoreUnavailable: the backend could not be reached or answered with an error;
- NotFound: an update/delete targeted a record that no longer exists;
- Unauthorized: the backend rejected the credentials.

InMemoryStore backs tests and the offline demo; RestStore talks to a
PostgREST-style HTTP API (tables ``activities`` and ``budgets``).
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from tracker.domain import DEFAULT_MONTHLY_LIMIT, Budget, Record, with_zone
from tracker.errors import NotFound, StoreUnavailable, Unauthorized

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "amount", "category", "created_at"})


def newest_first(records) -> list[Record]:
    return sorted(records, key=lambda r: r.created_at.timestamp(), reverse=True)


class RecordStore(ABC):

    @abstractmethod
    def fetch_records(self, owner_id: Optional[str]) -> list[Record]:
        """All records of the owner, newest first."""

    @abstractmethod
    def create_record(self, record: Record) -> str:
        pass

    @abstractmethod
    def update_record(self, record_id: str, fields: dict) -> None:
        pass

    @abstractmethod
    def delete_record(self, record_id: str) -> None:
        pass

    @abstractmethod
    def get_budget(self, owner_id: Optional[str]) -> Budget:
        """The owner's budget; a default one is created on first read."""

    @abstractmethod
    def set_budget(self, owner_id: Optional[str], monthly_limit: Decimal) -> None:
        pass


def _check_fields(fields: dict) -> dict:
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
    return fields


class InMemoryStore(RecordStore):

    def __init__(self, records=(), budgets: Optional[dict] = None, default_limit: Decimal = DEFAULT_MONTHLY_LIMIT):
        self._records: dict[str, Record] = {}
        self._budgets: dict[Optional[str], Decimal] = dict(budgets or {})
        self.default_limit = default_limit
        self.available = True
        for r in records:
            rid = r.id or uuid4().hex
            self._records[rid] = replace(r, id=rid)

    def _ensure_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("in-memory store switched off")

    def fetch_records(self, owner_id: Optional[str]) -> list[Record]:
        self._ensure_available()
        mine = (r for r in self._records.values() if owner_id is None or r.owner_id == owner_id)
        return newest_first(mine)

    def create_record(self, record: Record) -> str:
        self._ensure_available()
        rid = uuid4().hex
        self._records[rid] = replace(record, id=rid)
        return rid

    def update_record(self, record_id: str, fields: dict) -> None:
        self._ensure_available()
        if record_id not in self._records:
            raise NotFound(record_id)
        self._records[record_id] = replace(self._records[record_id], **_check_fields(fields))

    def delete_record(self, record_id: str) -> None:
        self._ensure_available()
        if self._records.pop(record_id, None) is None:
            raise NotFound(record_id)

    def get_budget(self, owner_id: Optional[str]) -> Budget:
        self._ensure_available()
        limit = self._budgets.setdefault(owner_id, self.default_limit)
        return Budget(owner_id=owner_id, monthly_limit=limit)

    def set_budget(self, owner_id: Optional[str], monthly_limit: Decimal) -> None:
        self._ensure_available()
        self._budgets[owner_id] = Decimal(monthly_limit)


def load_seed(path, owner_id: Optional[str] = None) -> InMemoryStore:
    """Build an InMemoryStore from a JSON file with ``records`` and ``budgets`` lists."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    records = []
    for row in data.get("records", []):
        r = Record.from_row(row)
        if owner_id is not None and r.owner_id is None:
            r = replace(r, owner_id=owner_id)
        records.append(r)
    budgets = {b.get("user_id") or owner_id: Decimal(str(b["monthly_limit"])) for b in data.get("budgets", [])}
    return InMemoryStore(records, budgets)


def _serialize(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return with_zone(value).isoformat()
    return value


class RestStore(RecordStore):
    RECORDS_TABLE = "activities"
    BUDGETS_TABLE = "budgets"

    def __init__(
        self,
        url: str,
        key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        retries: int = 3,
        default_limit: Decimal = DEFAULT_MONTHLY_LIMIT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.default_limit = default_limit
        self.session = session or requests.Session()
        # idempotent methods only; a retried POST could duplicate a record
        adapter = HTTPAdapter(max_retries=Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(502, 503, 504),
            raise_on_status=False,
        ))
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update({
            "apikey": key,
            "Authorization": f"Bearer {access_token or key}",
            "Content-Type": "application/json",
        })

    def _request(self, method: str, table: str, params=None, payload=None, prefer: Optional[str] = None) -> Any:
        headers = {"Prefer": prefer} if prefer else {}
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, table, e)
            raise StoreUnavailable(str(e)) from e

        if resp.status_code in (401, 403):
            raise Unauthorized(f"{method} {table}: HTTP {resp.status_code}")
        if resp.status_code >= 400:
            logger.warning("%s %s answered HTTP %s: %s", method, table, resp.status_code, resp.text[:200])
            raise StoreUnavailable(f"{method} {table}: HTTP {resp.status_code}")
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise StoreUnavailable(f"{method} {table}: malformed response") from e

    @staticmethod
    def _owner_filter(owner_id: Optional[str]) -> dict:
        return {} if owner_id is None else {"user_id": f"eq.{owner_id}"}

    def fetch_records(self, owner_id: Optional[str]) -> list[Record]:
        params = {"select": "*", "order": "created_at.desc", **self._owner_filter(owner_id)}
        rows = self._request("GET", self.RECORDS_TABLE, params=params) or []
        logger.debug("fetched %d records for %s", len(rows), owner_id)
        try:
            return [Record.from_row(row) for row in rows]
        except (ValueError, TypeError, ArithmeticError) as e:
            logger.warning("malformed record row for %s: %s", owner_id, e)
            raise StoreUnavailable("malformed row") from e

    def create_record(self, record: Record) -> str:
        rows = self._request("POST", self.RECORDS_TABLE, payload=record.to_row(), prefer="return=representation")
        if not rows:
            raise StoreUnavailable("insert returned no row")
        return str(rows[0]["id"])

    def update_record(self, record_id: str, fields: dict) -> None:
        payload = {k: _serialize(v) for k, v in _check_fields(fields).items()}
        rows = self._request(
            "PATCH", self.RECORDS_TABLE,
            params={"id": f"eq.{record_id}"}, payload=payload, prefer="return=representation",
        )
        if not rows:
            raise NotFound(record_id)

    def delete_record(self, record_id: str) -> None:
        rows = self._request(
            "DELETE", self.RECORDS_TABLE,
            params={"id": f"eq.{record_id}"}, prefer="return=representation",
        )
        if not rows:
            raise NotFound(record_id)

    def get_budget(self, owner_id: Optional[str]) -> Budget:
        rows = self._request(
            "GET", self.BUDGETS_TABLE,
            params={"select": "monthly_limit", **self._owner_filter(owner_id)},
        )
        if rows:
            try:
                limit = Decimal(str(rows[0]["monthly_limit"]))
            except (KeyError, ArithmeticError) as e:
                logger.warning("malformed budget row for %s: %r", owner_id, rows[0])
                raise StoreUnavailable("malformed budget row") from e
            return Budget(owner_id=owner_id, monthly_limit=limit)

        logger.info("no budget stored for %s, creating default %s", owner_id, self.default_limit)
        self.set_budget(owner_id, self.default_limit)
        return Budget(owner_id=owner_id, monthly_limit=self.default_limit)

    def set_budget(self, owner_id: Optional[str], monthly_limit: Decimal) -> None:
        row = {"monthly_limit": _serialize(Decimal(monthly_limit))}
        if owner_id is not None:
            row["user_id"] = owner_id
        self._request(
            "POST", self.BUDGETS_TABLE,
            params={"on_conflict": "user_id"}, payload=row,
            prefer="resolution=merge-duplicates",
        )


def make_store(config, owner_id: Optional[str] = None, access_token: Optional[str] = None) -> RecordStore:
    if config.STORE_URL:
        return RestStore(
            config.STORE_URL,
            config.STORE_KEY,
            access_token=access_token,
            timeout=config.STORE_TIMEOUT,
            retries=config.STORE_RETRIES,
            default_limit=config.DEFAULT_BUDGET,
        )
    if Path(config.SEED_PATH).exists():
        store = load_seed(config.SEED_PATH, owner_id)
    else:
        logger.info("seed file %s not found, starting empty", config.SEED_PATH)
        store = InMemoryStore()
    store.default_limit = config.DEFAULT_BUDGET
    return store
