# utils/identifiers.py

import random
import string
import time
from typing import Optional

HABIT_COLORS = [
    '#FF6B9D', '#C44DFF', '#4DFFDB', '#FFD93D',
    '#FF8E53', '#4DAFFF', '#A8FF78', '#FF4D4D',
]

_BASE36 = string.digits + string.ascii_lowercase

def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("to_base36 ожидает неотрицательное число")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))

def random_base36(length: int) -> str:
    return "".join(random.choice(_BASE36) for _ in range(length))

def now_ms() -> int:
    return int(time.time() * 1000)

def generate_id() -> str:
    """Уникальный (best-effort) id привычки: время в base36 + случайный хвост"""
    return to_base36(now_ms()) + random_base36(11)

def get_random_color() -> str:
    return random.choice(HABIT_COLORS)

def generate_user_id(timestamp_ms: Optional[int] = None) -> str:
    """
    Идентификатор установки: user_<ms>_<8 символов base36>.
    Коллизии не проверяются.
    """
    ts = now_ms() if timestamp_ms is None else timestamp_ms
    return f"user_{ts}_{random_base36(8)}"
