"""Text rendering of the task board for the terminal."""

from datetime import date

import click

from .core.dates import TaskStatus, format_due_date, task_status
from .core.models import Category, CategoryColor, Document, Task

# click color names for each category color
CATEGORY_FG = {
    CategoryColor.DEFAULT: None,
    CategoryColor.RED: "red",
    CategoryColor.GREEN: "green",
    CategoryColor.BLUE: "blue",
    CategoryColor.YELLOW: "yellow",
    CategoryColor.PURPLE: "magenta",
    CategoryColor.GREY: "bright_black",
}

STATUS_FG = {
    TaskStatus.OVERDUE: "red",
    TaskStatus.DUE_TODAY: "yellow",
}


def format_task_line(
    task: Task,
    position: int,
    document: Document,
    today: date | None = None,
    locale_name: str | None = None,
    color: bool = True,
) -> str:
    """Format one task row: checkbox, position, text and date badge."""
    today = today or date.today()
    box = "[x]" if task.completed else "[ ]"
    text = click.style(task.text, dim=True) if color and task.completed else task.text
    line = f"    {box} {position}. {text}"

    if task.due_date:
        status = task_status(task.due_date, today)
        badge = format_due_date(task.due_date, document.date_format, locale_name)
        if status is TaskStatus.OVERDUE:
            badge = f"{badge} (overdue)"
        elif status is TaskStatus.DUE_TODAY:
            badge = f"{badge} (today)"
        if color and status in STATUS_FG:
            badge = click.style(badge, fg=STATUS_FG[status], bold=True)
        line = f"{line}  {badge}"
    return line


def format_category(
    category: Category,
    position: int,
    document: Document,
    today: date | None = None,
    locale_name: str | None = None,
    color: bool = True,
) -> list[str]:
    """Format a category header and, unless collapsed, its tasks."""
    chevron = ">" if category.is_collapsed else "v"
    name = category.name
    if color and CATEGORY_FG[category.color]:
        name = click.style(name, fg=CATEGORY_FG[category.color], bold=True)
    done = category.completed_count
    header = f"{chevron} {position}. {name} ({done}/{len(category.tasks)})"
    if category.last_sort_order:
        header = f"{header} [sorted {category.last_sort_order.label}]"

    lines = [header]
    if category.is_collapsed:
        return lines
    if not category.tasks:
        lines.append("    (no tasks)")
    for i, task in enumerate(category.tasks, start=1):
        lines.append(format_task_line(task, i, document, today, locale_name, color))
    return lines


def format_board(
    document: Document,
    today: date | None = None,
    locale_name: str | None = None,
    color: bool = True,
) -> str:
    """Render the whole document as text."""
    if not document.categories:
        return "No categories yet. Create one with 'taskblocks new-category'."
    lines: list[str] = []
    for i, category in enumerate(document.categories, start=1):
        if lines:
            lines.append("")
        lines.extend(format_category(category, i, document, today, locale_name, color))
    return "\n".join(lines)
