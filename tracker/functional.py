from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Generic, Iterable, Optional, TypeVar

from tracker.domain import Category, Record, RecordDraft

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def find_record(records: Iterable[Record], record_id: str) -> Maybe[Record]:
    for r in records:
        if r.id == record_id:
            return Some(r)
    return Nothing()


def _invalid(field: str, message: str) -> Left:
    return Left({"error": "validation_error", "field": field, "message": message})


def parse_amount(raw: object) -> Either[dict, Decimal]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return _invalid("amount", "Amount is required")
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        return _invalid("amount", f"Amount {raw!r} is not a number")
    if not amount.is_finite():
        return _invalid("amount", f"Amount {raw!r} is not a number")
    if amount < 0:
        return _invalid("amount", "Amount cannot be negative")
    return Right(amount)


def validate_draft(
    draft: RecordDraft,
    owner_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Either[dict, Record]:
    """Turn raw form input into a Record, or a Left with the first problem found.

    The returned record has no id; the store assigns one on creation.
    """
    name = (draft.name or "").strip()
    if not name:
        return _invalid("name", "Name is required")

    if draft.category not in {c.value for c in Category}:
        return _invalid("category", f"Unknown category {draft.category!r}")

    return parse_amount(draft.amount).bind(
        lambda amount: Right(Record(
            id=None,
            name=name,
            amount=amount,
            category=draft.category,
            created_at=draft.created_at or now or datetime.now(),
            owner_id=owner_id,
        ))
    )


def both(*preds):
    def _all(item) -> bool:
        return all(p(item) for p in preds)
    return _all
