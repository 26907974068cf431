# couture_payments/utils/date_utils.py

from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from couture_payments.constants import DATE_FORMAT


def add_months(base_date: date, months: int) -> date:
    """Adds whole calendar months, clamping to the last day of a shorter month."""
    return base_date + relativedelta(months=months)

def to_date(value: Optional[Union[date, datetime, str]]) -> Optional[date]:
    """Normalizes a date, datetime or ISO string (time part ignored) to a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # "2024-01-01", "2024-01-01T10:00:00Z" and "2024-01-01 10:00:00" all yield 2024-01-01
        return datetime.strptime(value.strip()[:10], DATE_FORMAT).date()
    raise TypeError(f"Cannot convert {type(value).__name__} to date")

def to_date_str(value: Optional[Union[date, datetime]]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(DATE_FORMAT)

def days_between(start: date, end: date) -> int:
    """Whole days from start to end; negative when end precedes start."""
    return (end - start).days
