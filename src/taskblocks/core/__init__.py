"""Functional core - pure business logic with no I/O."""

from .models import (
    Task,
    Category,
    Document,
    CategoryColor,
    DateFormat,
    SortOrder,
    ValidationError,
)
from .dates import TaskStatus, task_status, sort_tasks, next_sort_order, format_due_date

__all__ = [
    # Models
    "Task",
    "Category",
    "Document",
    "CategoryColor",
    "DateFormat",
    "SortOrder",
    "ValidationError",
    # Dates
    "TaskStatus",
    "task_status",
    "sort_tasks",
    "next_sort_order",
    "format_due_date",
]
