#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Curve - State Operations
Чистые функции над AppState / MonthData.

Ни одна функция не изменяет аргументы: каждая возвращает новый снимок,
который вызывающий записывает обратно в новый AppState.
"""

import math
from datetime import date, datetime
from typing import List, Optional

from habit_tracker.core.models import AppState, Habit, MonthData
from habit_tracker.utils.datetime_utils import date_key, days_in_month, today_local
from habit_tracker.utils.validators import clean_habit_name

# ===== MONTH DATA =====

def empty_month_data() -> MonthData:
    return MonthData(habits=(), completions={})

def get_month_data(state: AppState, month: str) -> MonthData:
    """Данные месяца или пустой MonthData (в state не записывается)"""
    return state.month_data.get(month) or empty_month_data()

def set_month_data(state: AppState, month: str, month_data: MonthData) -> AppState:
    month_map = dict(state.month_data)
    month_map[month] = month_data
    return AppState(selected_month=state.selected_month, month_data=month_map)

def toggle_completion(month_data: MonthData, date_key: str, habit_id: str) -> MonthData:
    """
    Добавить habit_id в отметки дня или убрать, если уже отмечен.
    Id, которого нет среди привычек месяца, игнорируется.
    """
    if habit_id not in month_data.habit_ids:
        return month_data

    existing = month_data.completed_on(date_key)
    if habit_id in existing:
        updated = existing - {habit_id}
    else:
        updated = existing | {habit_id}

    completions = dict(month_data.completions)
    if updated:
        completions[date_key] = updated
    else:
        completions.pop(date_key, None)
    return MonthData(habits=month_data.habits, completions=completions)

def add_habit(month_data: MonthData, name: str, color: Optional[str] = None,
              now: Optional[datetime] = None) -> MonthData:
    """Новая привычка в конец списка; пустое имя - без изменений"""
    if not clean_habit_name(name):
        return month_data
    habit = Habit.create(name, color=color, now=now)
    return MonthData(
        habits=month_data.habits + (habit,),
        completions=dict(month_data.completions),
    )

def remove_habit(month_data: MonthData, habit_id: str) -> MonthData:
    """Удалить привычку и все её отметки в этом месяце"""
    return MonthData(
        habits=tuple(h for h in month_data.habits if h.id != habit_id),
        completions={
            key: ids - {habit_id}
            for key, ids in month_data.completions.items()
        },
    )

# ===== DERIVED SERIES =====

def derive_daily_series(month_data: MonthData, month: str) -> List[int]:
    """Количество выполненных привычек по дням месяца (индекс 0 = день 1)"""
    return [
        len(month_data.completed_on(date_key(month, day)))
        for day in range(1, days_in_month(month) + 1)
    ]

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def compute_completion_percent(month_data: MonthData, series: List[int],
                               today: Optional[date] = None) -> int:
    """
    min(100, round(100 * sum / (habits * день_месяца_сегодня))).

    Знаменатель берется от сегодняшнего дня независимо от выбранного месяца.
    """
    habit_count = len(month_data.habits)
    if habit_count == 0:
        return 0
    today = today or today_local()
    max_possible = habit_count * today.day
    return min(100, round_half_up(100 * sum(series) / max_possible))

# ===== APP STATE =====

def default_state(now: Optional[datetime] = None) -> AppState:
    return AppState.default(now)

def select_month(state: AppState, month: str) -> AppState:
    return AppState(selected_month=month, month_data=dict(state.month_data))

def toggle_day(state: AppState, day: int, habit_id: str) -> AppState:
    """Переключить отметку дня выбранного месяца; несуществующий день или привычка - без изменений"""
    month = state.selected_month
    if not 1 <= day <= days_in_month(month):
        return state
    month_data = get_month_data(state, month)
    updated = toggle_completion(month_data, date_key(month, day), habit_id)
    if updated is month_data:
        return state
    return set_month_data(state, month, updated)

def add_habit_to_state(state: AppState, name: str, color: Optional[str] = None) -> AppState:
    month = state.selected_month
    month_data = get_month_data(state, month)
    updated = add_habit(month_data, name, color)
    if updated is month_data:
        return state
    return set_month_data(state, month, updated)

def remove_habit_from_state(state: AppState, habit_id: str) -> AppState:
    month = state.selected_month
    return set_month_data(state, month, remove_habit(get_month_data(state, month), habit_id))
