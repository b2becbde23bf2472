"""Task store - owns the document and applies every mutation to it.

Each successful mutation queues exactly one save and fires exactly one change
notification. Operations that change nothing (unknown id, same value) do
neither.
"""

import logging
from concurrent.futures import Future
from datetime import date
from typing import Callable

from .core.dates import next_sort_order, sort_tasks
from .core.models import (
    Category,
    CategoryColor,
    DateFormat,
    Document,
    SortOrder,
    Task,
    ValidationError,
    new_id,
    require_text,
)
from .persistence import PersistenceError, PersistenceGateway

logger = logging.getLogger(__name__)

Listener = Callable[[Document], None]


class Store:
    """
    In-memory owner of the task document.

    Mutations apply synchronously, then queue a save through the gateway and
    notify subscribers. Saves never block the caller; call flush() to wait
    for them and surface failures.
    """

    def __init__(
        self,
        document: Document,
        gateway: PersistenceGateway,
        id_factory: Callable[[], str] = new_id,
    ):
        self._document = document
        self._gateway = gateway
        self._id_factory = id_factory
        self._listeners: list[Listener] = []
        self._unsaved = False
        self._queued = False
        self._last_save: Future | None = None

    @classmethod
    def open(cls, gateway: PersistenceGateway, **kwargs) -> "Store":
        """Create a store from the gateway's saved document."""
        return cls(gateway.load(), gateway, **kwargs)

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ============== Reads ==============

    @property
    def last_save(self) -> Future | None:
        """
        Future of the save queued by the most recent mutation.

        It settles with PersistenceError if that write fails. The same failure
        is also raised by the next flush().
        """
        return self._last_save

    @property
    def document(self) -> Document:
        return self._document

    @property
    def categories(self) -> list[Category]:
        return self._document.categories

    def get_category(self, category_id: str) -> Category | None:
        return self._document.find_category(category_id)

    def get_task(self, category_id: str, task_id: str) -> Task | None:
        category = self.get_category(category_id)
        return category.find_task(task_id) if category else None

    # ============== Notification & lifecycle ==============

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-changed listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def flush(self) -> None:
        """Wait for queued saves. Raises PersistenceError if any failed."""
        queued, self._queued = self._queued, False
        try:
            self._gateway.flush()
        except PersistenceError:
            self._unsaved = True
            raise
        if queued:
            self._unsaved = False

    def close(self) -> None:
        """
        Flush pending saves and stop the writer.

        If a save failed, the current state is saved once more so the
        accumulated changes are not lost.
        """
        try:
            try:
                self.flush()
            except PersistenceError as e:
                logger.warning(f"Retrying final save after failure: {e}")
            if self._unsaved:
                self._save()
                self.flush()
        finally:
            self._gateway.close()

    def _commit(self, action: str) -> None:
        logger.debug(f"Mutation: {action}")
        self._last_save = self._save()
        for listener in list(self._listeners):
            listener(self._document)

    def _save(self) -> Future:
        self._queued = True
        return self._gateway.save(self._document)

    def _new_id(self, reserved: set[str] | None = None) -> str:
        existing = self._document.ids() | (reserved or set())
        fresh = self._id_factory()
        while fresh in existing:
            fresh = self._id_factory()
        return fresh

    # ============== Categories ==============

    def create_category(
        self,
        name: str,
        first_task_text: str | None = None,
        first_task_due: date | None = None,
    ) -> Category:
        """Append a new category, optionally with a first task."""
        name = require_text(name, "Category name")
        category = Category(id=self._new_id(), name=name)
        if first_task_text and first_task_text.strip():
            category.tasks.append(
                Task(id=self._new_id({category.id}), text=first_task_text.strip(), due_date=first_task_due)
            )
        self._document.categories.append(category)
        self._commit(f"create category {category.id}")
        return category

    def delete_category(self, category_id: str) -> bool:
        """Remove a category and its tasks. Returns False if it did not exist."""
        remaining = [c for c in self._document.categories if c.id != category_id]
        if len(remaining) == len(self._document.categories):
            return False
        self._document.categories = remaining
        self._commit(f"delete category {category_id}")
        return True

    def rename_category(self, category_id: str, new_name: str) -> None:
        new_name = require_text(new_name, "Category name")
        category = self.get_category(category_id)
        if category is None or category.name == new_name:
            return
        category.name = new_name
        self._commit(f"rename category {category_id}")

    def set_category_color(self, category_id: str, color: CategoryColor) -> None:
        category = self.get_category(category_id)
        if category is None or category.color is color:
            return
        category.color = color
        self._commit(f"color category {category_id} {color.value}")

    def toggle_category_collapsed(self, category_id: str) -> bool | None:
        """Flip one category's collapsed flag. Returns the new state."""
        category = self.get_category(category_id)
        if category is None:
            return None
        category.is_collapsed = not category.is_collapsed
        self._commit(f"toggle category {category_id}")
        return category.is_collapsed

    def toggle_all_categories_collapsed(self) -> bool | None:
        """
        Collapse every category if any is expanded, otherwise expand them all.

        Returns the collapsed state applied, or None when there are no categories.
        """
        if not self._document.categories:
            return None
        collapse = any(not c.is_collapsed for c in self._document.categories)
        for category in self._document.categories:
            category.is_collapsed = collapse
        self._commit("collapse all" if collapse else "expand all")
        return collapse

    def reorder_category(self, from_index: int, to_index: int) -> None:
        """Move the category at from_index so it ends up at to_index."""
        count = len(self._document.categories)
        for index in (from_index, to_index):
            if not 0 <= index < count:
                raise IndexError(f"Category index {index} out of range (0-{count - 1})")
        if from_index == to_index:
            return
        moved = self._document.categories.pop(from_index)
        self._document.categories.insert(to_index, moved)
        self._commit(f"move category {from_index} -> {to_index}")

    # ============== Tasks ==============

    def add_task(self, category_id: str, text: str, due_date: date | None = None) -> Task:
        """Append a task to a category."""
        text = require_text(text, "Task text")
        category = self.get_category(category_id)
        if category is None:
            raise ValidationError(f"Category {category_id} does not exist")
        task = Task(id=self._new_id(), text=text, due_date=due_date)
        category.tasks.append(task)
        self._commit(f"add task {task.id} to {category_id}")
        return task

    def rename_task(self, category_id: str, task_id: str, new_text: str) -> None:
        new_text = require_text(new_text, "Task text")
        task = self.get_task(category_id, task_id)
        if task is None or task.text == new_text:
            return
        task.text = new_text
        self._commit(f"rename task {task_id}")

    def set_task_due_date(self, category_id: str, task_id: str, due_date: date | None) -> None:
        """Set or clear (None) a task's due date."""
        task = self.get_task(category_id, task_id)
        if task is None or task.due_date == due_date:
            return
        task.due_date = due_date
        self._commit(f"due date task {task_id}")

    def set_task_completed(self, category_id: str, task_id: str, completed: bool) -> None:
        task = self.get_task(category_id, task_id)
        if task is None or task.completed == completed:
            return
        task.completed = completed
        self._commit(f"complete task {task_id}" if completed else f"reopen task {task_id}")

    def delete_task(self, category_id: str, task_id: str) -> bool:
        """Remove a task. Returns False if it did not exist."""
        category = self.get_category(category_id)
        if category is None or category.find_task(task_id) is None:
            return False
        category.tasks = [t for t in category.tasks if t.id != task_id]
        self._commit(f"delete task {task_id}")
        return True

    def sort_category_tasks(self, category_id: str, today: date | None = None) -> SortOrder | None:
        """
        Sort a category's tasks by due date, alternating direction on each call.

        Returns the direction applied, or None if the category does not exist.
        """
        category = self.get_category(category_id)
        if category is None:
            return None
        order = next_sort_order(category.last_sort_order)
        category.tasks = sort_tasks(category.tasks, order, today)
        category.last_sort_order = order
        self._commit(f"sort category {category_id} {order.value}")
        return order

    def clean_completed_tasks(self) -> int:
        """Remove every completed task from every category. Returns how many were removed."""
        cleaned = [[t for t in c.tasks if not t.completed] for c in self._document.categories]
        removed = sum(len(c.tasks) - len(kept) for c, kept in zip(self._document.categories, cleaned))
        if not removed:
            return 0
        for category, kept in zip(self._document.categories, cleaned):
            category.tasks = kept
        self._commit(f"clean {removed} completed tasks")
        return removed

    # ============== Settings ==============

    def set_confirm_task_deletion(self, enabled: bool) -> None:
        if self._document.confirm_task_deletion == enabled:
            return
        self._document.confirm_task_deletion = enabled
        self._commit(f"confirm task deletion {enabled}")

    def set_date_format(self, date_format: DateFormat) -> None:
        if self._document.date_format is date_format:
            return
        self._document.date_format = date_format
        self._commit(f"date format {date_format.value}")
