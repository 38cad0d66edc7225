# shared/models.py
"""
Pydantic-модели JSON-представления состояния (локальное хранилище и удаленный документ).
Непроверенные данные проходят через них перед превращением в core-модели.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from habit_tracker.core.models import AppState, Habit, MonthData
from habit_tracker.utils.validators import is_valid_date_key, is_valid_month_key

logger = logging.getLogger(__name__)

class PayloadError(Exception):
    """Полезная нагрузка не распознана как AppState"""
    pass

class HabitPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str = Field(..., min_length=1)
    name: str
    color: str
    createdAt: str

    def to_habit(self) -> Habit:
        return Habit(id=self.id, name=self.name, color=self.color, created_at=self.createdAt)

class MonthDataPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    habits: List[HabitPayload] = []
    completions: Dict[str, List[str]] = {}

    @field_validator('completions')
    @classmethod
    def drop_invalid_date_keys(cls, v):
        # несуществующие дни отбрасываются, остальной месяц сохраняется
        invalid = [key for key in v if not is_valid_date_key(key)]
        if invalid:
            logger.warning(f"Dropping invalid date keys: {invalid}")
        return {key: ids for key, ids in v.items() if key not in invalid}

    @model_validator(mode='after')
    def drop_orphan_completions(self):
        # повторяющиеся id привычек: остается первая
        seen = set()
        unique = []
        for habit in self.habits:
            if habit.id not in seen:
                seen.add(habit.id)
                unique.append(habit)
        self.habits = unique

        self.completions = {
            key: [habit_id for habit_id in dict.fromkeys(ids) if habit_id in seen]
            for key, ids in self.completions.items()
        }
        return self

    def to_month_data(self) -> MonthData:
        return MonthData(
            habits=tuple(h.to_habit() for h in self.habits),
            completions={key: frozenset(ids) for key, ids in self.completions.items()},
        )

class AppStatePayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    selectedMonth: str
    monthData: Dict[str, MonthDataPayload] = {}

    @field_validator('selectedMonth')
    @classmethod
    def validate_selected_month(cls, v):
        if not is_valid_month_key(v):
            raise ValueError(f'Неверный формат месяца: {v}')
        return v

    @field_validator('monthData')
    @classmethod
    def validate_month_keys(cls, v):
        for key in v:
            if not is_valid_month_key(key):
                raise ValueError(f'Неверный ключ месяца: {key}')
        return v

    def to_state(self) -> AppState:
        return AppState(
            selected_month=self.selectedMonth,
            month_data={month: md.to_month_data() for month, md in self.monthData.items()},
        )

class RemoteDocument(BaseModel):
    """Документ удаленного зеркала {userId, state, updatedAt}"""
    model_config = ConfigDict(extra='ignore')

    userId: Optional[str] = None
    state: Optional[AppStatePayload] = None
    updatedAt: Optional[Any] = None

class MonthHistoryDocument(BaseModel):
    """Ответ findOne с проекцией state.monthData"""
    model_config = ConfigDict(extra='ignore')

    state: Dict[str, Any] = {}

    def month_keys(self) -> List[str]:
        month_data = self.state.get('monthData') or {}
        if not isinstance(month_data, dict):
            return []
        return sorted((key for key in month_data if is_valid_month_key(key)), reverse=True)

def parse_state_payload(raw: Union[str, bytes, Dict[str, Any]]) -> AppState:
    """JSON-строка или dict -> AppState; PayloadError, если данные непригодны"""
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        return AppStatePayload.model_validate(data).to_state()
    except (ValueError, TypeError, ValidationError) as e:
        raise PayloadError(str(e)) from e

def dump_state_payload(state: AppState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False)
