#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Curve - Core Data Models
Неизменяемые модели: Habit, MonthData, AppState

Версия: 1.0.0
"""

from datetime import datetime, timezone
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Any
import logging

from habit_tracker.utils.datetime_utils import current_month_key
from habit_tracker.utils.identifiers import generate_id, get_random_color
from habit_tracker.utils.validators import clean_habit_name, is_valid_month_key

logger = logging.getLogger(__name__)

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

# ===== CORE MODELS =====

@dataclass(frozen=True)
class Habit:
    """Привычка одного месяца"""
    id: str
    name: str
    color: str
    created_at: str  # ISO timestamp

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
            'createdAt': self.created_at,
        }

    @classmethod
    def create(cls, name: str, color: Optional[str] = None,
               now: Optional[datetime] = None) -> "Habit":
        """Создание новой привычки со свежим id"""
        name = clean_habit_name(name)
        if not name:
            raise ValidationError("Название привычки не может быть пустым")
        return cls(
            id=generate_id(),
            name=name,
            color=color or get_random_color(),
            created_at=(now or datetime.now(timezone.utc)).isoformat(),
        )

@dataclass(frozen=True, eq=False)
class MonthData:
    """
    Привычки и отметки одного месяца.

    completions: date-key -> множество id привычек (только для чтения).
    Отсутствующий ключ равнозначен пустому множеству, поэтому сравнение
    игнорирует пустые наборы.
    """
    habits: Tuple[Habit, ...] = ()
    completions: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'habits', tuple(self.habits))
        object.__setattr__(self, 'completions', MappingProxyType(
            {key: frozenset(ids) for key, ids in self.completions.items()}
        ))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MonthData):
            return NotImplemented
        return (self.habits == other.habits
                and self._non_empty_completions() == other._non_empty_completions())

    __hash__ = None

    def _non_empty_completions(self) -> Dict[str, FrozenSet[str]]:
        return {key: ids for key, ids in self.completions.items() if ids}

    @property
    def habit_ids(self) -> Tuple[str, ...]:
        return tuple(habit.id for habit in self.habits)

    def completed_on(self, date_key: str) -> FrozenSet[str]:
        return self.completions.get(date_key, frozenset())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'habits': [habit.to_dict() for habit in self.habits],
            'completions': {key: sorted(ids) for key, ids in self.completions.items()},
        }

@dataclass(frozen=True)
class AppState:
    """Корневое состояние приложения; заменяется целиком при каждом изменении"""
    selected_month: str
    month_data: Mapping[str, MonthData] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'month_data', MappingProxyType(dict(self.month_data)))
        if not is_valid_month_key(self.selected_month):
            raise ValidationError(f"Неверный формат месяца: {self.selected_month}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'selectedMonth': self.selected_month,
            'monthData': {month: data.to_dict() for month, data in self.month_data.items()},
        }

    @classmethod
    def default(cls, now: Optional[datetime] = None) -> "AppState":
        return cls(selected_month=current_month_key(now), month_data={})
