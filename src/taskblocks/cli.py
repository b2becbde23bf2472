"""taskblocks CLI - categorized task lists."""

import json
import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import click

from .config import build_settings_store, load_config, resolve_locale
from .core.dates import parse_due_date
from .core.models import Category, CategoryColor, DateFormat, Task, ValidationError
from .persistence import PersistenceError, PersistenceGateway
from .render import format_board
from .store import Store


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """taskblocks - categorized task lists."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@contextmanager
def _open_store(render: bool = True) -> Iterator[Store]:
    """
    Open the store for one command.

    When render is set, the board is re-printed after each change. Input
    errors and failed saves are reported on stderr with exit code 1.
    """
    config = load_config()
    locale_name = resolve_locale(config)
    try:
        gateway = PersistenceGateway(build_settings_store(config))
        store = Store.open(gateway)
    except (PersistenceError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if render:
        store.subscribe(lambda document: click.echo(format_board(document, locale_name=locale_name)))

    exit_code = 0
    try:
        yield store
    except (ValidationError, IndexError) as e:
        click.echo(f"Error: {e}", err=True)
        exit_code = 1
    finally:
        try:
            store.close()
        except PersistenceError as e:
            click.echo(f"Warning: changes were not saved: {e}", err=True)
            exit_code = 1

    if exit_code:
        sys.exit(exit_code)


def _category(store: Store, ref: str) -> Category:
    """Resolve a category by 1-based position or id."""
    if ref.isdigit():
        index = int(ref) - 1
        if 0 <= index < len(store.categories):
            return store.categories[index]
    category = store.get_category(ref)
    if category is None:
        raise click.ClickException(f"No category '{ref}'")
    return category


def _task(category: Category, ref: str) -> Task:
    """Resolve a task by 1-based position within its category or id."""
    if ref.isdigit():
        index = int(ref) - 1
        if 0 <= index < len(category.tasks):
            return category.tasks[index]
    task = category.find_task(ref)
    if task is None:
        raise click.ClickException(f"No task '{ref}' in {category.name}")
    return task


@main.command("new-category")
@click.argument("name", required=False)
@click.option("--task", "first_task", default=None, help="Text of the first task")
@click.option("--due", default=None, help="Due date of the first task (YYYY-MM-DD)")
def new_category(name: str | None, first_task: str | None, due: str | None):
    """Create new task category."""
    if name is None:
        name = click.prompt("Category name")
        if first_task is None:
            first_task = click.prompt("First task (optional)", default="", show_default=False)
        if due is None and first_task:
            due = click.prompt("Due date (YYYY-MM-DD, optional)", default="", show_default=False)

    with _open_store() as store:
        category = store.create_category(name, first_task, parse_due_date(due))
        click.echo(f"Created category '{category.name}'")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(as_json: bool):
    """Show all categories and tasks."""
    locale_name = resolve_locale(load_config())
    with _open_store(render=False) as store:
        if as_json:
            click.echo(json.dumps(store.document.to_dict(), indent=2, ensure_ascii=False))
        else:
            click.echo(format_board(store.document, locale_name=locale_name))


@main.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def clean(yes: bool):
    """Delete completed tasks from all categories."""
    with _open_store() as store:
        if not yes and not click.confirm("Delete ALL completed tasks from ALL categories?"):
            return
        removed = store.clean_completed_tasks()
        click.echo(f"Removed {removed} completed task{'s' if removed != 1 else ''}.")


@main.command()
@click.option("--confirm-deletion/--no-confirm-deletion", default=None,
              help="Ask before deleting a task")
@click.option("--date-format", type=click.Choice([f.value for f in DateFormat], case_sensitive=False),
              default=None, help="How due dates are displayed")
def settings(confirm_deletion: bool | None, date_format: str | None):
    """Show or change settings."""
    with _open_store(render=False) as store:
        if confirm_deletion is not None:
            store.set_confirm_task_deletion(confirm_deletion)
        if date_format is not None:
            store.set_date_format(DateFormat.parse(date_format))

        document = store.document
        click.echo(f"confirm_task_deletion: {'on' if document.confirm_task_deletion else 'off'}")
        click.echo(f"date_format: {document.date_format.value}")


# ============== Categories ==============


@main.group()
def category():
    """Manage categories."""
    pass


@category.command("rename")
@click.argument("ref")
@click.argument("name")
def category_rename(ref: str, name: str):
    """Rename a category."""
    with _open_store() as store:
        store.rename_category(_category(store, ref).id, name)


@category.command("delete")
@click.argument("ref")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def category_delete(ref: str, yes: bool):
    """Delete a category and all its tasks."""
    with _open_store() as store:
        cat = _category(store, ref)
        if not yes and not click.confirm(f'Are you sure you want to delete category "{cat.name}"?'):
            return
        store.delete_category(cat.id)


@category.command("color")
@click.argument("ref")
@click.argument("color", type=click.Choice([c.value for c in CategoryColor], case_sensitive=False))
def category_color(ref: str, color: str):
    """Change a category's color."""
    with _open_store() as store:
        store.set_category_color(_category(store, ref).id, CategoryColor.parse(color))


@category.command("collapse")
@click.argument("ref")
def category_collapse(ref: str):
    """Fold or unfold a category."""
    with _open_store() as store:
        store.toggle_category_collapsed(_category(store, ref).id)


@category.command("collapse-all")
def category_collapse_all():
    """Fold all categories, or unfold them if all are folded."""
    with _open_store() as store:
        if store.toggle_all_categories_collapsed() is None:
            click.echo("No categories.")


@category.command("move")
@click.argument("from_pos", type=int)
@click.argument("to_pos", type=int)
def category_move(from_pos: int, to_pos: int):
    """Move the category at FROM_POS to TO_POS (1-based)."""
    with _open_store() as store:
        try:
            store.reorder_category(from_pos - 1, to_pos - 1)
        except IndexError:
            raise click.ClickException(f"Positions must be between 1 and {len(store.categories)}") from None


@category.command("sort")
@click.argument("ref")
def category_sort(ref: str):
    """Sort a category's tasks by due date, alternating direction."""
    with _open_store() as store:
        order = store.sort_category_tasks(_category(store, ref).id)
        click.echo(f"Sorted tasks {order.label}")


# ============== Tasks ==============


@main.group()
def task():
    """Manage tasks."""
    pass


@task.command("add")
@click.argument("category_ref")
@click.argument("text")
@click.option("--due", default=None, help="Due date (YYYY-MM-DD)")
def task_add(category_ref: str, text: str, due: str | None):
    """Add a task to a category."""
    with _open_store() as store:
        store.add_task(_category(store, category_ref).id, text, parse_due_date(due))


@task.command("rename")
@click.argument("category_ref")
@click.argument("task_ref")
@click.argument("text")
def task_rename(category_ref: str, task_ref: str, text: str):
    """Change a task's text."""
    with _open_store() as store:
        cat = _category(store, category_ref)
        store.rename_task(cat.id, _task(cat, task_ref).id, text)


@task.command("due")
@click.argument("category_ref")
@click.argument("task_ref")
@click.argument("due", required=False)
@click.option("--clear", is_flag=True, help="Remove the due date")
def task_due(category_ref: str, task_ref: str, due: str | None, clear: bool):
    """Set or clear a task's due date."""
    if not clear and not due:
        raise click.UsageError("Give a date (YYYY-MM-DD) or --clear")
    with _open_store() as store:
        cat = _category(store, category_ref)
        store.set_task_due_date(cat.id, _task(cat, task_ref).id, None if clear else parse_due_date(due))


@task.command("done")
@click.argument("category_ref")
@click.argument("task_ref")
def task_done(category_ref: str, task_ref: str):
    """Mark a task completed."""
    with _open_store() as store:
        cat = _category(store, category_ref)
        store.set_task_completed(cat.id, _task(cat, task_ref).id, True)


@task.command("undo")
@click.argument("category_ref")
@click.argument("task_ref")
def task_undo(category_ref: str, task_ref: str):
    """Mark a task not completed."""
    with _open_store() as store:
        cat = _category(store, category_ref)
        store.set_task_completed(cat.id, _task(cat, task_ref).id, False)


@task.command("delete")
@click.argument("category_ref")
@click.argument("task_ref")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def task_delete(category_ref: str, task_ref: str, yes: bool):
    """Delete a task."""
    with _open_store() as store:
        cat = _category(store, category_ref)
        t = _task(cat, task_ref)
        if store.document.confirm_task_deletion and not yes:
            if not click.confirm(f'Delete task "{t.text}"?'):
                return
        store.delete_task(cat.id, t.id)


if __name__ == "__main__":
    main()
