# core/analytics.py
"""
Статистика месяца и оси графика "consistency curve".
Входные данные - ряд derive_daily_series.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, List, Optional

from habit_tracker.core.models import MonthData
from habit_tracker.core.state import compute_completion_percent, derive_daily_series, round_half_up
from habit_tracker.utils.datetime_utils import month_key, today_local

@dataclass(frozen=True)
class MonthSummary:
    """Сводка по месяцу"""
    month: str
    habit_count: int
    total_completed: int
    active_days: int
    average_per_active_day: float
    completion_percent: int
    series: List[int]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class ChartAxes:
    max_value: int
    y_ticks: List[int]
    x_label_indices: List[int]

def summarize_month(month_data: MonthData, month: str, today: Optional[date] = None) -> MonthSummary:
    series = derive_daily_series(month_data, month)
    total = sum(series)
    active = len([count for count in series if count > 0])
    # одна цифра после запятой, половина вверх
    average = round_half_up(total * 10 / active) / 10 if active else 0.0
    return MonthSummary(
        month=month,
        habit_count=len(month_data.habits),
        total_completed=total,
        active_days=active,
        average_per_active_day=average,
        completion_percent=compute_completion_percent(month_data, series, today),
        series=series,
    )

def day_completion_ratio(month_data: MonthData, date_key: str) -> float:
    """Доля выполненных привычек за день (0..1)"""
    if not month_data.habits:
        return 0.0
    return len(month_data.completed_on(date_key)) / len(month_data.habits)

def chart_axes(series: List[int], habit_count: int) -> ChartAxes:
    # Y: 0..habits, X: первый день, каждый пятый и последний
    max_value = max(habit_count, 1)
    days = len(series)
    x_labels = {0}
    x_labels.update(range(4, days, 5))
    if days:
        x_labels.add(days - 1)
    return ChartAxes(
        max_value=max_value,
        y_ticks=list(range(max_value + 1)),
        x_label_indices=sorted(x_labels),
    )

def highlight_day(month: str, today: Optional[date] = None) -> Optional[int]:
    """День для подсветки, если месяц - текущий"""
    today = today or today_local()
    if month != month_key(today.year, today.month):
        return None
    return today.day
