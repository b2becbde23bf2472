"""Due-date status and sorting - pure functions, no I/O."""

from datetime import date, datetime
from enum import Enum

from .models import DateFormat, SortOrder, Task, ValidationError


class TaskStatus(Enum):
    """Display status derived from a task's due date."""

    OVERDUE = "overdue"
    DUE_TODAY = "today"
    SCHEDULED = "scheduled"
    UNSCHEDULED = "unscheduled"


def task_status(due_date: date | None, today: date | None = None) -> TaskStatus:
    """Classify a due date relative to the local calendar date."""
    if due_date is None:
        return TaskStatus.UNSCHEDULED
    today = today or date.today()
    if due_date < today:
        return TaskStatus.OVERDUE
    if due_date == today:
        return TaskStatus.DUE_TODAY
    return TaskStatus.SCHEDULED


def effective_date(task: Task, today: date) -> date:
    """Due date used for sorting; unscheduled tasks count as due today."""
    return task.due_date or today


def next_sort_order(last: SortOrder | None) -> SortOrder:
    """
    Flip the previous sort direction.

    A never-sorted category counts as descending, so the first sort is ascending.
    """
    return SortOrder.DESC if last is SortOrder.ASC else SortOrder.ASC


def sort_tasks(tasks: list[Task], order: SortOrder, today: date | None = None) -> list[Task]:
    """
    Sort tasks by effective date.

    Stable in both directions: tasks with equal dates keep their relative order.
    Returns a new list; tasks are not modified.
    """
    today = today or date.today()
    return sorted(
        tasks,
        key=lambda t: effective_date(t, today),
        reverse=order is SortOrder.DESC,
    )


def parse_due_date(raw: str | None) -> date | None:
    """Parse a YYYY-MM-DD string from user input. Empty means no due date."""
    value = (raw or "").strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {raw!r}, expected YYYY-MM-DD") from None


def resolve_date_format(fmt: DateFormat, locale_name: str | None) -> DateFormat:
    """Resolve 'auto' to a concrete format: day-first for French locales."""
    if fmt is not DateFormat.AUTO:
        return fmt
    if (locale_name or "").lower().startswith("fr"):
        return DateFormat.DAY_FIRST
    return DateFormat.ISO


def format_due_date(due_date: date, fmt: DateFormat, locale_name: str | None = None) -> str:
    """Format a due date for display."""
    if resolve_date_format(fmt, locale_name) is DateFormat.DAY_FIRST:
        return due_date.strftime("%d-%m-%Y")
    return due_date.isoformat()
