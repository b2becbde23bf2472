"""Tests for due-date status and sorting."""

from datetime import date, timedelta

import pytest

from taskblocks.core.dates import (
    TaskStatus,
    effective_date,
    format_due_date,
    next_sort_order,
    parse_due_date,
    resolve_date_format,
    sort_tasks,
    task_status,
)
from taskblocks.core.models import DateFormat, SortOrder, Task, ValidationError


@pytest.fixture
def work_tasks():
    """The 'Work' scenario: A and C due 2024-01-01, B unscheduled."""
    return [
        Task(id="a", text="A", due_date=date(2024, 1, 1)),
        Task(id="b", text="B"),
        Task(id="c", text="C", due_date=date(2024, 1, 1)),
    ]


class TestTaskStatus:
    def test_overdue(self, today):
        assert task_status(today - timedelta(days=1), today) is TaskStatus.OVERDUE

    def test_due_today(self, today):
        assert task_status(today, today) is TaskStatus.DUE_TODAY

    def test_scheduled(self, today):
        assert task_status(today + timedelta(days=3), today) is TaskStatus.SCHEDULED

    def test_unscheduled(self, today):
        assert task_status(None, today) is TaskStatus.UNSCHEDULED

    def test_defaults_to_local_today(self):
        assert task_status(date.today()) is TaskStatus.DUE_TODAY

    def test_work_scenario(self, work_tasks, today):
        a, b, c = work_tasks
        assert task_status(a.due_date, today) is TaskStatus.OVERDUE
        assert task_status(c.due_date, today) is TaskStatus.OVERDUE
        # B has no date; for sorting it counts as today
        assert task_status(effective_date(b, today), today) is TaskStatus.DUE_TODAY


class TestSortOrder:
    def test_first_sort_is_ascending(self):
        assert next_sort_order(None) is SortOrder.ASC

    def test_alternates(self):
        assert next_sort_order(SortOrder.ASC) is SortOrder.DESC
        assert next_sort_order(SortOrder.DESC) is SortOrder.ASC


class TestSortTasks:
    def test_ascending_keeps_ties_in_order(self, work_tasks, today):
        result = sort_tasks(work_tasks, SortOrder.ASC, today)
        assert [t.id for t in result] == ["a", "c", "b"]

    def test_descending_keeps_ties_in_order(self, work_tasks, today):
        result = sort_tasks(work_tasks, SortOrder.DESC, today)
        assert [t.id for t in result] == ["b", "a", "c"]

    def test_does_not_modify_input(self, work_tasks, today):
        sort_tasks(work_tasks, SortOrder.ASC, today)
        assert [t.id for t in work_tasks] == ["a", "b", "c"]
        assert work_tasks[1].due_date is None

    def test_unscheduled_sorts_between_past_and_future(self, today):
        tasks = [
            Task(id="later", text="later", due_date=today + timedelta(days=5)),
            Task(id="none", text="none"),
            Task(id="past", text="past", due_date=today - timedelta(days=5)),
        ]
        result = sort_tasks(tasks, SortOrder.ASC, today)
        assert [t.id for t in result] == ["past", "none", "later"]


class TestParseDueDate:
    def test_valid(self):
        assert parse_due_date("2024-03-09") == date(2024, 3, 9)

    def test_empty_means_none(self):
        assert parse_due_date("") is None
        assert parse_due_date(None) is None
        assert parse_due_date("   ") is None

    def test_invalid(self):
        with pytest.raises(ValidationError):
            parse_due_date("09/03/2024")

    @pytest.mark.parametrize("raw", ["20240101", "2024-W01-1", "2024-1-5", "2024-01-01T00:00"])
    def test_only_dashed_calendar_dates(self, raw):
        with pytest.raises(ValidationError):
            parse_due_date(raw)


class TestFormatDueDate:
    def test_iso(self):
        assert format_due_date(date(2024, 3, 9), DateFormat.ISO) == "2024-03-09"

    def test_day_first(self):
        assert format_due_date(date(2024, 3, 9), DateFormat.DAY_FIRST) == "09-03-2024"

    def test_auto_french_locale(self):
        assert format_due_date(date(2024, 3, 9), DateFormat.AUTO, "fr_FR") == "09-03-2024"

    def test_auto_other_locale(self):
        assert format_due_date(date(2024, 3, 9), DateFormat.AUTO, "en_US") == "2024-03-09"
        assert format_due_date(date(2024, 3, 9), DateFormat.AUTO, None) == "2024-03-09"

    def test_explicit_format_ignores_locale(self):
        assert resolve_date_format(DateFormat.ISO, "fr_CA") is DateFormat.ISO
