from datetime import datetime
from decimal import Decimal

import pytest

from tracker.domain import Record


def _rec(id, name, amount, category, ts):
    return Record(id=id, name=name, amount=Decimal(str(amount)), category=category,
                  created_at=datetime.fromisoformat(ts))


@pytest.fixture
def october():
    # newest first, the order the store returns
    return (
        _rec("r1", "Lunch", 100, "Food", "2026-10-17T12:30:00"),
        _rec("r2", "Laundry", 50, "Other", "2026-10-17T09:00:00"),
        _rec("r3", "Train", 25, "Travel", "2026-10-12T07:45:00"),
        _rec("r4", "Dinner", "80.5", "Food", "2026-10-01T00:00:00"),
        _rec("r5", "Rent", 900, "Bills", "2026-09-30T23:59:59"),
    )
