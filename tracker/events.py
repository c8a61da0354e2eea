from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from tracker.allowance import HUNDRED

__all__ = [
    'Event', 'EventBus', 'RECORDS_CHANGED', 'BUDGET_CHANGED', 'FETCH_FAILED', 'BUDGET_ALERT',
    'budget_alert_handler', 'fetch_failed_handler', 'register_default_handlers',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


RECORDS_CHANGED = "RECORDS_CHANGED"
BUDGET_CHANGED = "BUDGET_CHANGED"
FETCH_FAILED = "FETCH_FAILED"
BUDGET_ALERT = "BUDGET_ALERT"


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """payload: budget_percent, day_total, remaining_daily (Decimals)."""
    percent = payload.get("budget_percent", 0)
    if percent >= HUNDRED:
        return {"alert": "Monthly budget used up", "level": "error"}
    if payload.get("day_total", 0) > payload.get("remaining_daily", 0):
        return {"alert": "Today's spending is over the daily allowance", "level": "warning"}
    return {}


def fetch_failed_handler(event: Event, payload: dict) -> dict:
    return {
        "alert": f"Could not refresh data, showing the last loaded values ({payload.get('error', 'unknown error')})",
        "level": "warning",
    }


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(BUDGET_ALERT, budget_alert_handler)
    bus.subscribe(FETCH_FAILED, fetch_failed_handler)
    return bus
