from decimal import ROUND_HALF_UP, Decimal


def round_whole(value) -> Decimal:
    """Nearest whole currency unit, halves away from zero. Display only."""
    return Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def format_money(value, currency: str = "$") -> str:
    return f"{currency}{round_whole(value):,}"


def format_percent(value) -> str:
    return f"{round_whole(value)}%"
