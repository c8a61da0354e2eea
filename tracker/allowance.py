from decimal import Decimal
from typing import Final, Iterable, Optional

from tracker.aggregate import ZERO, total
from tracker.domain import Allowance, Budget, Record
from tracker.formatting import format_money
from tracker.temporal import remaining_days, same_day, same_month

HUNDRED: Final[Decimal] = Decimal(100)


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def budget_percent(month_total, monthly_limit) -> Decimal:
    month_total, monthly_limit = _dec(month_total), _dec(monthly_limit)
    if monthly_limit <= 0:
        return HUNDRED
    return max(min(month_total / monthly_limit * HUNDRED, HUNDRED), ZERO)


def amount_left(month_total, monthly_limit, day_total=ZERO) -> Decimal:
    # day_total is added back so a viewed day is not charged against itself
    return _dec(monthly_limit) - _dec(month_total) + _dec(day_total)


def remaining_daily(month_total, monthly_limit, ref, day_total=ZERO) -> Decimal:
    left = amount_left(month_total, monthly_limit, day_total)
    return max(left / remaining_days(ref), ZERO)


def is_over_daily(day_total, allowance) -> bool:
    return _dec(day_total) > _dec(allowance)


def compute_allowance(
    records: Iterable[Record],
    budget: Budget,
    viewed_day,
    tz=None,
    add_back_day: bool = True,
) -> Allowance:
    """Budget position for the month containing ``viewed_day``.

    With ``add_back_day`` the viewed day's own spending is returned to the
    pool before dividing by the days left, which keeps the figure stable
    when looking at a past day. Without it the plain "from now on" figure is
    produced and ``is_over_daily`` still compares the viewed day's total.
    """
    records = tuple(records)
    month_total = total(same_month(records, viewed_day, tz))
    day_total = total(same_day(records, viewed_day, tz))
    back = day_total if add_back_day else ZERO

    daily = remaining_daily(month_total, budget.monthly_limit, viewed_day, back)
    return Allowance(
        budget_percent=budget_percent(month_total, budget.monthly_limit),
        remaining_days=remaining_days(viewed_day),
        amount_left=amount_left(month_total, budget.monthly_limit, back),
        remaining_daily=daily,
        is_over_daily=is_over_daily(day_total, daily),
    )


def allowance_message(allowance: Allowance, day_total, currency: str = "$", formatter=None) -> str:
    fmt = formatter or (lambda v: format_money(v, currency))
    if allowance.is_over_daily:
        over = _dec(day_total) - allowance.remaining_daily
        return f"Over today's allowance by {fmt(over)}"
    return f"You can still spend {fmt(allowance.remaining_daily - _dec(day_total))} today"


def budget_status(allowance: Allowance) -> Optional[str]:
    if allowance.budget_percent >= HUNDRED:
        return "exceeded"
    if allowance.budget_percent >= 80:
        return "warning"
    return None
