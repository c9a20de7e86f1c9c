"""
Formatting helpers for JSON responses.
Money is kept as Decimal internally and rendered as JSON numbers.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date, datetime, time
from typing import Union, Optional

CENTS = Decimal('0.01')


def money(value: Union[int, float, Decimal, str, None]) -> Decimal:
    """
    Normalize a monetary amount to a Decimal with two places.

    Floats are converted through ``str`` so 99.99 stays 99.99.

    Examples:
        money(100) -> Decimal('100.00')
        money(99.99) -> Decimal('99.99')
        money('10.005') -> Decimal('10.01')
        money(None) -> Decimal('0.00')
    """
    if value is None or value == "":
        return Decimal('0.00')
    try:
        num = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f'Invalid monetary value: {value!r}')
    if not num.is_finite():
        raise ValueError(f'Invalid monetary value: {value!r}')
    try:
        return num.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f'Monetary value out of range: {value!r}')


def to_number(value: Union[int, float, Decimal, None]) -> Optional[float]:
    """Render a Decimal amount as a JSON number."""
    if value is None:
        return None
    return float(money(value))


def iso_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD (datetimes are truncated)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def iso_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime in ISO 8601."""
    if value is None:
        return None
    return value.isoformat()


def parse_datetime_param(raw: str, end_of_day: bool = False) -> datetime:
    """
    Parse a query-string date bound.

    A plain YYYY-MM-DD covers the whole day: start bounds begin at 00:00,
    end bounds stop at 23:59:59.999999. Full ISO timestamps (with a trailing
    Z allowed) are used as given.

    Raises:
        ValueError: unparseable value
    """
    raw = (raw or '').strip()
    if len(raw) == 10:
        day = date.fromisoformat(raw)
        return datetime.combine(day, time.max if end_of_day else time.min)
    if raw.endswith('Z'):
        raw = raw[:-1] + '+00:00'
    return datetime.fromisoformat(raw)
