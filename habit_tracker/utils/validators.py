import re
from datetime import datetime

MAX_HABIT_NAME_LENGTH = 30

_MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_DATE_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")

def clean_habit_name(name: str) -> str:
    return name.strip()[:MAX_HABIT_NAME_LENGTH].strip()

def is_valid_month_key(month: str) -> bool:
    return bool(_MONTH_KEY_RE.match(month))

def is_valid_date_key(date_str: str) -> bool:
    """YYYY-MM-DD существующего календарного дня"""
    if not _DATE_KEY_RE.match(date_str):
        return False
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        return False
    return True
