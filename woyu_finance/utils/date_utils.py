"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Tuple


def today() -> date:
    return date.today()


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Return [first day of month, first day of next month)"""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)


def add_months(from_date: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_between(start: date, end: date) -> int:
    """Number of monthly periods from start to end, inclusive of both months"""
    return max((end.year - start.year) * 12 + (end.month - start.month) + 1, 1)


# Excel stores dates as days since 1899-12-30
EXCEL_EPOCH = date(1899, 12, 30)

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%Y.%m.%d")


def parse_flexible_date(value) -> Optional[date]:
    """Parse ISO, slash-separated, or Excel serial dates; None when unparseable"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        if value != value or value <= 0:  # NaN
            return None
        return EXCEL_EPOCH + timedelta(days=int(value))

    text = str(value).strip()
    if not text:
        return None
    # pandas Timestamps stringify as "YYYY-MM-DD HH:MM:SS"
    text = text.split(" ")[0].split("T")[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
