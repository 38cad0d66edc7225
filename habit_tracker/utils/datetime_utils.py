# utils/datetime_utils.py

import calendar
from datetime import datetime, date
from typing import List, Optional, Tuple

import pytz

MONTH_NAMES = [
    'January', 'February', 'March', 'April',
    'May', 'June', 'July', 'August',
    'September', 'October', 'November', 'December',
]

def now_local(tz_name: Optional[str] = None) -> datetime:
    """Текущее время: в указанной зоне pytz или системное локальное"""
    if tz_name:
        return datetime.now(pytz.timezone(tz_name))
    return datetime.now()

def today_local(tz_name: Optional[str] = None) -> date:
    return now_local(tz_name).date()

def parse_month_key(month: str) -> Tuple[int, int]:
    year_str, month_str = month.split('-')
    year, month_number = int(year_str), int(month_str)
    if not 1 <= month_number <= 12:
        raise ValueError(f"Неверный месяц: {month}")
    return year, month_number

def month_key(year: int, month_number: int) -> str:
    return f"{year:04d}-{month_number:02d}"

def current_month_key(now: Optional[datetime] = None) -> str:
    now = now or now_local()
    return month_key(now.year, now.month)

def days_in_month(month: str) -> int:
    year, month_number = parse_month_key(month)
    return calendar.monthrange(year, month_number)[1]

def date_key(month: str, day: int) -> str:
    return f"{month}-{day:02d}"

def today_key(now: Optional[datetime] = None) -> str:
    now = now or now_local()
    return now.strftime("%Y-%m-%d")

def prev_month_key(month: str) -> str:
    year, month_number = parse_month_key(month)
    if month_number == 1:
        return month_key(year - 1, 12)
    return month_key(year, month_number - 1)

def next_month_key(month: str) -> str:
    year, month_number = parse_month_key(month)
    if month_number == 12:
        return month_key(year + 1, 1)
    return month_key(year, month_number + 1)

def is_current_month(month: str, now: Optional[datetime] = None) -> bool:
    return month == current_month_key(now)

def month_label(month: str) -> str:
    """'2024-03' -> 'March 2024'"""
    year, month_number = parse_month_key(month)
    return f"{MONTH_NAMES[month_number - 1]} {year}"

def short_month_label(month: str) -> str:
    _, month_number = parse_month_key(month)
    return MONTH_NAMES[month_number - 1]

def picker_years(center_year: Optional[int] = None) -> List[int]:
    """Десять лет для выбора месяца: center-5 .. center+4"""
    if center_year is None:
        center_year = now_local().year
    return list(range(center_year - 5, center_year + 5))
