from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Final, Optional


class Category(str, Enum):
    FOOD = "Food"
    GAMES = "Games"
    SHOPPING = "Shopping"
    TRAVEL = "Travel"
    BILLS = "Bills"
    HEALTH = "Health"
    OTHER = "Other"


ALL: Final[str] = "All"  # category filter sentinel

DEFAULT_MONTHLY_LIMIT: Final[Decimal] = Decimal(50000)


@dataclass(frozen=True)
class CategoryStyle:
    label: str
    color: str
    icon: str


CATEGORY_STYLES: Final[dict[Category, CategoryStyle]] = {
    Category.FOOD: CategoryStyle("Food", "#f97316", "utensils"),
    Category.GAMES: CategoryStyle("Games", "#8b5cf6", "gamepad"),
    Category.SHOPPING: CategoryStyle("Shopping", "#ec4899", "shopping-bag"),
    Category.TRAVEL: CategoryStyle("Travel", "#0ea5e9", "plane"),
    Category.BILLS: CategoryStyle("Bills", "#ef4444", "receipt"),
    Category.HEALTH: CategoryStyle("Health", "#10b981", "heart-pulse"),
    Category.OTHER: CategoryStyle("Other", "#64748b", "tag"),
}

UNKNOWN_STYLE: Final[CategoryStyle] = CategoryStyle("Unknown", "#94a3b8", "circle-help")


def style_for(category: str) -> CategoryStyle:
    try:
        return CATEGORY_STYLES[Category(category)]
    except ValueError:
        return UNKNOWN_STYLE


def with_zone(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Make a timestamp aware without moving its wall clock.

    Naive values are local time: they get ``tz`` attached, or the platform's
    local zone when no zone is given. Aware values are returned unchanged.
    """
    if ts.tzinfo is not None:
        return ts
    if tz is not None:
        return ts.replace(tzinfo=tz)
    return ts.astimezone()


@dataclass(frozen=True)
class Record:
    id: Optional[str]
    name: str
    amount: Decimal
    category: str        # literal string, may fall outside Category
    created_at: datetime
    owner_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Record":
        created = row.get("created_at")
        if isinstance(created, str):
            created = datetime.fromisoformat(created.replace("Z", "+00:00"))
        elif created is None:
            created = datetime.now()
        return cls(
            id=None if row.get("id") is None else str(row["id"]),
            name=row.get("name") or "",
            amount=Decimal(str(row.get("amount") or 0)),
            category=row.get("category") or Category.OTHER.value,
            created_at=created,
            owner_id=row.get("user_id"),
        )

    def to_row(self) -> dict:
        row = {
            "name": self.name,
            "amount": str(self.amount),
            "category": self.category,
            "created_at": with_zone(self.created_at).isoformat(),
        }
        if self.owner_id is not None:
            row["user_id"] = self.owner_id
        return row


@dataclass(frozen=True)
class RecordDraft:
    """Raw user input for a record, before validation."""
    name: str
    amount: object
    category: str = Category.FOOD.value
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Budget:
    owner_id: Optional[str]
    monthly_limit: Decimal = DEFAULT_MONTHLY_LIMIT


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str = ""
    approved: bool = True


@dataclass(frozen=True)
class WeekPoint:
    label: str
    day: date
    total: Decimal


@dataclass(frozen=True)
class Allowance:
    budget_percent: Decimal
    remaining_days: int
    amount_left: Decimal
    remaining_daily: Decimal
    is_over_daily: bool


@dataclass(frozen=True)
class Dashboard:
    today: date
    viewed_day: date
    day_records: tuple[Record, ...]
    month_records: tuple[Record, ...]
    day_total: Decimal
    month_total: Decimal
    breakdown: dict[str, Decimal]
    allowance: Allowance
    week: tuple[WeekPoint, ...]
    steps: list = field(default_factory=list, compare=False)
