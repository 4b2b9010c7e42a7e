"""Date manipulation utilities"""

import calendar
from datetime import date


def month_key(day: date) -> str:
    """Format a date's month as YYYY-MM"""
    return f"{day.year:04d}-{day.month:02d}"


def parse_month(month: str) -> tuple[int, int]:
    """Split a YYYY-MM string into (year, month)"""
    year_str, month_str = month.split("-")
    year, month_num = int(year_str), int(month_str)
    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month: {month}")
    return year, month_num


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """Shift (year, month) by offset months, rolling the year over"""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def shift_month(month: str, offset: int) -> str:
    year, month_num = add_months(*parse_month(month), offset)
    return f"{year:04d}-{month_num:02d}"


def previous_month(month: str) -> str:
    return shift_month(month, -1)


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, pulling day back to the month's last day when it overflows"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def in_month(day: date, month: str) -> bool:
    year, month_num = parse_month(month)
    return day.year == year and day.month == month_num
