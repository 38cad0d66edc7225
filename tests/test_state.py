from __future__ import annotations

import unittest
from datetime import date

from habit_tracker.core import state as ops
from habit_tracker.core.models import AppState, Habit, MonthData
from habit_tracker.utils.datetime_utils import days_in_month


def _habit(habit_id: str, name: str = "habit") -> Habit:
    return Habit(id=habit_id, name=name, color="#FF6B9D", created_at="2024-03-01T00:00:00+00:00")


def _month() -> MonthData:
    return MonthData(
        habits=(_habit("a", "read"), _habit("b", "run")),
        completions={
            "2024-03-01": frozenset({"a", "b"}),
            "2024-03-02": frozenset({"b"}),
            "2024-03-05": frozenset(),
        },
    )


class TestMonthDataOperations(unittest.TestCase):
    def test_get_month_data_defaults_without_mutating_state(self) -> None:
        state = AppState(selected_month="2024-03", month_data={})
        md = ops.get_month_data(state, "2024-03")
        self.assertEqual(md.habits, ())
        self.assertEqual(md.completions, {})
        self.assertEqual(state.month_data, {})

    def test_toggle_adds_then_removes(self) -> None:
        md = _month()
        added = ops.toggle_completion(md, "2024-03-02", "a")
        self.assertEqual(added.completed_on("2024-03-02"), frozenset({"a", "b"}))
        removed = ops.toggle_completion(added, "2024-03-02", "a")
        self.assertEqual(removed.completed_on("2024-03-02"), frozenset({"b"}))
        self.assertEqual(md.completed_on("2024-03-02"), frozenset({"b"}))

    def test_toggle_is_its_own_inverse(self) -> None:
        md = _month()
        for key in ("2024-03-01", "2024-03-02", "2024-03-05", "2024-03-20"):
            for habit_id in ("a", "b"):
                twice = ops.toggle_completion(ops.toggle_completion(md, key, habit_id), key, habit_id)
                self.assertEqual(twice, md, (key, habit_id))

    def test_toggle_unknown_habit_is_noop(self) -> None:
        md = _month()
        self.assertIs(ops.toggle_completion(md, "2024-03-02", "ghost"), md)
        self.assertEqual(ops.derive_daily_series(md, "2024-03")[1], 1)

    def test_add_habit_appends_with_fresh_id(self) -> None:
        md = _month()
        updated = ops.add_habit(md, "  meditate  ", color="#4DFFDB")
        self.assertEqual(len(updated.habits), 3)
        new = updated.habits[-1]
        self.assertEqual(new.name, "meditate")
        self.assertEqual(new.color, "#4DFFDB")
        self.assertNotIn(new.id, md.habit_ids)
        self.assertEqual(len(md.habits), 2)

    def test_add_habit_ignores_blank_name(self) -> None:
        md = _month()
        self.assertIs(ops.add_habit(md, "   "), md)
        self.assertIs(ops.add_habit(md, ""), md)

    def test_add_habit_truncates_long_name(self) -> None:
        updated = ops.add_habit(_month(), "x" * 45)
        self.assertEqual(len(updated.habits[-1].name), 30)

    def test_remove_habit_filters_every_completion_set(self) -> None:
        md = _month()
        updated = ops.remove_habit(md, "b")
        self.assertEqual(updated.habit_ids, ("a",))
        for key, ids in updated.completions.items():
            self.assertNotIn("b", ids)
            self.assertEqual(ids, md.completions[key] - {"b"})
        self.assertEqual(set(updated.completions), set(md.completions))

    def test_remove_absent_habit_is_noop(self) -> None:
        md = _month()
        self.assertEqual(ops.remove_habit(md, "zzz"), md)


class TestDerivedSeries(unittest.TestCase):
    def test_series_length_matches_days_in_month(self) -> None:
        for month in ("2024-02", "2023-02", "2024-04", "2024-01"):
            series = ops.derive_daily_series(MonthData(), month)
            self.assertEqual(len(series), days_in_month(month))
            self.assertEqual(sum(series), 0)

    def test_series_counts_completions_per_day(self) -> None:
        series = ops.derive_daily_series(_month(), "2024-03")
        self.assertEqual(series[0], 2)
        self.assertEqual(series[1], 1)
        self.assertEqual(series[4], 0)
        self.assertEqual(sum(series), 3)

    def test_completion_percent_uses_today_day_of_month(self) -> None:
        md = _month()
        series = [0] * 31
        series[0] = 8
        series[1] = 7
        self.assertEqual(ops.compute_completion_percent(md, series, today=date(2024, 3, 10)), 75)

    def test_completion_percent_caps_at_100_and_handles_no_habits(self) -> None:
        md = _month()
        self.assertEqual(ops.compute_completion_percent(md, [2] * 31, today=date(2024, 3, 1)), 100)
        self.assertEqual(ops.compute_completion_percent(MonthData(), [3, 4], today=date(2024, 3, 1)), 0)

    def test_completion_percent_rounds_half_up(self) -> None:
        md = _month()
        # 100 * 5 / (2 * 4) = 62.5
        self.assertEqual(ops.compute_completion_percent(md, [5], today=date(2024, 3, 4)), 63)


class TestAppStateOperations(unittest.TestCase):
    def test_toggle_day_writes_back_into_new_state(self) -> None:
        state = AppState(selected_month="2024-03", month_data={"2024-03": _month()})
        updated = ops.toggle_day(state, 9, "a")
        self.assertIsNot(updated, state)
        self.assertEqual(updated.month_data["2024-03"].completed_on("2024-03-09"), frozenset({"a"}))
        self.assertEqual(state.month_data["2024-03"].completed_on("2024-03-09"), frozenset())

    def test_toggle_day_ignores_unknown_habit(self) -> None:
        state = AppState(selected_month="2024-03", month_data={"2024-03": _month()})
        self.assertIs(ops.toggle_day(state, 2, "ghost"), state)
        empty = AppState(selected_month="2024-04")
        self.assertIs(ops.toggle_day(empty, 1, "a"), empty)

    def test_toggle_day_outside_month_is_noop(self) -> None:
        state = AppState(selected_month="2024-03", month_data={"2024-03": _month()})
        for day in (0, -1, 32):
            self.assertIs(ops.toggle_day(state, day, "a"), state, day)
        feb = AppState(selected_month="2023-02", month_data={"2023-02": _month()})
        self.assertIs(ops.toggle_day(feb, 29, "a"), feb)
        self.assertIsNot(ops.toggle_day(feb, 28, "a"), feb)

    def test_add_habit_to_empty_month_creates_entry(self) -> None:
        state = AppState(selected_month="2024-05", month_data={})
        updated = ops.add_habit_to_state(state, "read")
        self.assertEqual([h.name for h in updated.month_data["2024-05"].habits], ["read"])
        self.assertIs(ops.add_habit_to_state(state, " "), state)

    def test_select_month_keeps_all_month_data(self) -> None:
        state = AppState(selected_month="2024-03", month_data={"2024-03": _month()})
        moved = ops.select_month(state, "2024-04")
        self.assertEqual(moved.selected_month, "2024-04")
        self.assertEqual(moved.month_data, state.month_data)

    def test_remove_habit_only_touches_selected_month(self) -> None:
        other = MonthData(habits=(_habit("a"),), completions={"2024-02-01": frozenset({"a"})})
        state = AppState(selected_month="2024-03", month_data={"2024-03": _month(), "2024-02": other})
        updated = ops.remove_habit_from_state(state, "a")
        self.assertEqual(updated.month_data["2024-02"], other)
        self.assertEqual(updated.month_data["2024-03"].habit_ids, ("b",))


if __name__ == "__main__":
    unittest.main(verbosity=2)
