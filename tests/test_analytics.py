from __future__ import annotations

import unittest
from datetime import date

from habit_tracker.core.analytics import chart_axes, day_completion_ratio, highlight_day, summarize_month
from habit_tracker.core.models import Habit, MonthData


def _month() -> MonthData:
    habits = tuple(
        Habit(id=h, name=h, color="#FFD93D", created_at="2024-03-01T00:00:00+00:00") for h in ("a", "b")
    )
    return MonthData(
        habits=habits,
        completions={
            "2024-03-01": frozenset({"a", "b"}),
            "2024-03-02": frozenset({"a"}),
            "2024-03-04": frozenset({"b"}),
        },
    )


class TestMonthSummary(unittest.TestCase):
    def test_summary_counts(self) -> None:
        summary = summarize_month(_month(), "2024-03", today=date(2024, 3, 10))
        self.assertEqual(summary.habit_count, 2)
        self.assertEqual(summary.total_completed, 4)
        self.assertEqual(summary.active_days, 3)
        self.assertEqual(summary.average_per_active_day, 1.3)
        self.assertEqual(summary.completion_percent, 20)
        self.assertEqual(len(summary.series), 31)
        self.assertEqual(summary.to_dict()["month"], "2024-03")

    def test_average_rounds_half_up(self) -> None:
        md = _month()
        md = MonthData(habits=md.habits, completions={**md.completions, "2024-03-05": frozenset({"a"})})
        summary = summarize_month(md, "2024-03", today=date(2024, 3, 10))
        # 5 отметок за 4 активных дня = 1.25
        self.assertEqual((summary.total_completed, summary.active_days), (5, 4))
        self.assertEqual(summary.average_per_active_day, 1.3)

    def test_summary_of_empty_month(self) -> None:
        summary = summarize_month(MonthData(), "2024-02", today=date(2024, 2, 3))
        self.assertEqual(summary.active_days, 0)
        self.assertEqual(summary.average_per_active_day, 0.0)
        self.assertEqual(summary.completion_percent, 0)
        self.assertEqual(len(summary.series), 29)

    def test_day_ratio(self) -> None:
        self.assertEqual(day_completion_ratio(_month(), "2024-03-01"), 1.0)
        self.assertEqual(day_completion_ratio(_month(), "2024-03-02"), 0.5)
        self.assertEqual(day_completion_ratio(_month(), "2024-03-03"), 0.0)
        self.assertEqual(day_completion_ratio(MonthData(), "2024-03-01"), 0.0)


class TestChartHelpers(unittest.TestCase):
    def test_axes_for_31_day_month(self) -> None:
        axes = chart_axes([0] * 31, habit_count=3)
        self.assertEqual(axes.max_value, 3)
        self.assertEqual(axes.y_ticks, [0, 1, 2, 3])
        self.assertEqual(axes.x_label_indices, [0, 4, 9, 14, 19, 24, 29, 30])

    def test_axes_without_habits(self) -> None:
        axes = chart_axes([0] * 28, habit_count=0)
        self.assertEqual(axes.y_ticks, [0, 1])
        self.assertEqual(axes.x_label_indices, [0, 4, 9, 14, 19, 24, 27])

    def test_highlight_day_only_for_current_month(self) -> None:
        self.assertEqual(highlight_day("2024-03", today=date(2024, 3, 17)), 17)
        self.assertIsNone(highlight_day("2024-02", today=date(2024, 3, 17)))


if __name__ == "__main__":
    unittest.main(verbosity=2)
