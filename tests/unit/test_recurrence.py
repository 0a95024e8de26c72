"""Tests for recurring-task due dates and series membership."""

from datetime import date

import pytest

from audit_tracker.domain.enums import TaskFrequency
from audit_tracker.domain.recurrence import (
    add_months,
    can_roll_over,
    next_due_date,
    series_id,
)


class TestNextDueDate:
    @pytest.mark.parametrize(
        ("frequency", "expected"),
        [
            (TaskFrequency.DAILY, date(2025, 4, 1)),
            (TaskFrequency.WEEKLY, date(2025, 4, 7)),
            (TaskFrequency.BI_WEEKLY, date(2025, 4, 14)),
            (TaskFrequency.MONTHLY, date(2025, 4, 30)),
            (TaskFrequency.QUARTERLY, date(2025, 6, 30)),
            (TaskFrequency.YEARLY, date(2026, 3, 31)),
        ],
    )
    def test_one_period_later(self, frequency, expected) -> None:
        assert next_due_date(date(2025, 3, 31), frequency) == expected

    def test_one_time_task_has_no_next_date(self) -> None:
        assert next_due_date(date(2025, 3, 31), TaskFrequency.ONCE) is None

    def test_accepts_raw_value(self) -> None:
        assert next_due_date(date(2025, 1, 15), "monthly") == date(2025, 2, 15)


class TestAddMonths:
    def test_clamps_to_month_end(self) -> None:
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_crosses_year(self) -> None:
        assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)
        assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


class TestSeries:
    def test_first_task_is_its_own_series(self, make_task) -> None:
        assert series_id(make_task(id="base")) == "base"

    def test_instance_points_at_first_task(self, make_task) -> None:
        assert series_id(make_task(id="next", parent_task_id="base")) == "base"

    def test_can_roll_over(self, make_task) -> None:
        assert can_roll_over(make_task())
        assert not can_roll_over(make_task(is_recurring=False))
        assert not can_roll_over(make_task(frequency=TaskFrequency.ONCE))
