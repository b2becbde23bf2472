"""Category and task records - pure domain model, no I/O."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when user input breaks a model invariant."""

    pass


def new_id() -> str:
    """Generate a fresh opaque identifier."""
    return uuid.uuid4().hex


def require_text(value: str | None, field_name: str) -> str:
    """Strip a required text field, rejecting empty values."""
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} must not be empty")
    return text


class SortOrder(Enum):
    """Direction of the last date sort applied to a category."""

    ASC = "asc"
    DESC = "desc"

    @property
    def label(self) -> str:
        return "ascending" if self is SortOrder.ASC else "descending"


class DateFormat(Enum):
    """How due dates are displayed."""

    AUTO = "auto"
    ISO = "YYYY-MM-DD"
    DAY_FIRST = "DD-MM-YYYY"

    @classmethod
    def parse(cls, raw: str) -> "DateFormat":
        """Parse a user or stored value. Accepts the legacy 'Automatic' spelling."""
        value = (raw or "").strip()
        if value.lower() in ("auto", "automatic"):
            return cls.AUTO
        for fmt in cls:
            if fmt.value == value.upper():
                return fmt
        raise ValidationError(f"Unknown date format: {raw!r}")


class CategoryColor(Enum):
    """Closed set of category background colors."""

    DEFAULT = "default"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    PURPLE = "purple"
    GREY = "grey"

    @property
    def css(self) -> str:
        """Translucent background used by graphical front ends ('' = default)."""
        return _COLOR_CSS[self]

    @classmethod
    def parse(cls, raw: str | None) -> "CategoryColor":
        """
        Parse a color token.

        Accepts the enum name in any case, 'gray', an empty value (default),
        or one of the rgba strings older data files stored.
        """
        value = (raw or "").strip()
        if not value:
            return cls.DEFAULT
        lowered = value.lower()
        if lowered == "gray":
            return cls.GREY
        for color in cls:
            if color.value == lowered:
                return color
        compact = lowered.replace(" ", "")
        for color, css in _COLOR_CSS.items():
            if css and css.replace(" ", "") == compact:
                return color
        raise ValidationError(f"Unknown color: {raw!r}")


_COLOR_CSS = {
    CategoryColor.DEFAULT: "",
    CategoryColor.RED: "rgba(233, 30, 99, 0.1)",
    CategoryColor.GREEN: "rgba(76, 175, 80, 0.1)",
    CategoryColor.BLUE: "rgba(33, 150, 243, 0.1)",
    CategoryColor.YELLOW: "rgba(255, 235, 59, 0.1)",
    CategoryColor.PURPLE: "rgba(156, 39, 176, 0.1)",
    CategoryColor.GREY: "rgba(158, 158, 158, 0.1)",
}


@dataclass
class Task:
    """A single actionable item."""

    id: str
    text: str
    completed: bool = False
    due_date: date | None = None

    def to_dict(self) -> dict:
        data: dict = {"id": self.id, "text": self.text, "completed": self.completed}
        if self.due_date:
            data["dueDate"] = self.due_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        due = None
        raw_due = data.get("dueDate")
        if raw_due:
            try:
                due = datetime.strptime(str(raw_due), "%Y-%m-%d").date()
            except ValueError:
                logger.warning(f"Ignoring invalid due date {raw_due!r} on task {data.get('id')}")
        return cls(
            id=str(data.get("id") or ""),
            text=str(data.get("text") or "").strip(),
            completed=_flag(data, "completed", f"task {data.get('id')}"),
            due_date=due,
        )


@dataclass
class Category:
    """A named, ordered, collapsible group of tasks."""

    id: str
    name: str
    tasks: list[Task] = field(default_factory=list)
    is_collapsed: bool = False
    color: CategoryColor = CategoryColor.DEFAULT
    last_sort_order: SortOrder | None = None

    def find_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    def to_dict(self) -> dict:
        data: dict = {
            "id": self.id,
            "name": self.name,
            "tasks": [t.to_dict() for t in self.tasks],
            "isCollapsed": self.is_collapsed,
            "color": "" if self.color is CategoryColor.DEFAULT else self.color.value,
        }
        if self.last_sort_order:
            data["lastSortOrder"] = self.last_sort_order.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        try:
            color = CategoryColor.parse(data.get("color"))
        except ValidationError:
            logger.warning(f"Unknown color {data.get('color')!r} on category {data.get('id')}, using default")
            color = CategoryColor.DEFAULT

        try:
            last_sort = SortOrder(data["lastSortOrder"]) if data.get("lastSortOrder") else None
        except ValueError:
            last_sort = None

        tasks = []
        for raw in _entries(data, "tasks", f"category {data.get('id')}"):
            task = Task.from_dict(raw)
            if not task.text:
                logger.warning(f"Dropping task {task.id or '?'} with empty text")
                continue
            tasks.append(task)

        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or "").strip(),
            tasks=tasks,
            is_collapsed=_flag(data, "isCollapsed", f"category {data.get('id')}"),
            color=color,
            last_sort_order=last_sort,
        )


@dataclass
class Document:
    """The complete persisted state: categories plus global settings."""

    categories: list[Category] = field(default_factory=list)
    confirm_task_deletion: bool = False
    date_format: DateFormat = DateFormat.AUTO

    def find_category(self, category_id: str) -> Category | None:
        return next((c for c in self.categories if c.id == category_id), None)

    def ids(self) -> set[str]:
        """Every category and task id in the document."""
        found = set()
        for category in self.categories:
            found.add(category.id)
            found.update(t.id for t in category.tasks)
        return found

    def to_dict(self) -> dict:
        return {
            "categories": [c.to_dict() for c in self.categories],
            "confirmTaskDeletion": self.confirm_task_deletion,
            "dateFormat": self.date_format.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """
        Build a document from persisted data.

        Missing keys fall back to defaults. Unnamed categories are dropped and
        blank or duplicate ids are re-issued so ids stay unique.
        """
        try:
            date_format = DateFormat.parse(data.get("dateFormat") or "auto")
        except ValidationError:
            logger.warning(f"Unknown date format {data.get('dateFormat')!r}, using auto")
            date_format = DateFormat.AUTO

        categories = []
        for raw in _entries(data, "categories", "document"):
            category = Category.from_dict(raw)
            if not category.name:
                logger.warning(f"Dropping category {category.id or '?'} with empty name")
                continue
            categories.append(category)

        seen: set[str] = set()
        for category in categories:
            if not category.id or category.id in seen:
                category.id = _reissue(category.id, seen)
            seen.add(category.id)
            for task in category.tasks:
                if not task.id or task.id in seen:
                    task.id = _reissue(task.id, seen)
                seen.add(task.id)

        return cls(
            categories=categories,
            confirm_task_deletion=_flag(data, "confirmTaskDeletion", "document"),
            date_format=date_format,
        )


def _flag(data: dict, key: str, owner: str) -> bool:
    value = data.get(key, False)
    if isinstance(value, bool):
        return value
    logger.warning(f"Ignoring non-boolean {key} {value!r} on {owner}")
    return False


def _entries(data: dict, key: str, owner: str) -> list[dict]:
    """The dict entries of a persisted list. Anything else is skipped."""
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning(f"Ignoring {key} on {owner}: expected a list, got {type(raw).__name__}")
        return []
    entries = []
    for entry in raw:
        if isinstance(entry, dict):
            entries.append(entry)
        else:
            logger.warning(f"Skipping malformed entry in {key} on {owner}: {entry!r}")
    return entries


def _reissue(old_id: str, seen: set[str]) -> str:
    fresh = new_id()
    while fresh in seen:
        fresh = new_id()
    logger.warning(f"Re-issuing duplicate or missing id {old_id!r} as {fresh}")
    return fresh
