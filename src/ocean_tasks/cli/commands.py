# src/ocean_tasks/cli/commands.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable

from ..core.state import AppState
from ..core.theme import Theme, save_theme, toggle_theme
from ..tasks.task_models import Task, TaskFilter

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  (plain text adds a new task)")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def _items_left(n: int) -> str:
    return f"{n} {'item' if n == 1 else 'items'} left"


def render_view(state: AppState) -> str:
    """Plain-text rendering of the current filtered/searched view."""
    session = state.session
    header = f"{state.settings.app_name} [filter: {session.state.filter.value}]"
    if session.state.search_query.strip():
        header += f' [search: "{session.state.search_query.strip()}"]'
    lines = [header]

    visible = list(session.visible_tasks())
    if not visible:
        lines.append("  No tasks found. Add a task or adjust your search and filter.")
    for i, task in enumerate(visible, start=1):
        mark = "x" if task.completed else " "
        lines.append(f"  {i:>2}. [{mark}] {task.title}  ({task.id[:6]})")

    if session.state.editing_id is not None:
        lines.append(f'  editing {session.state.editing_id[:6]}: "{session.state.editing_title}"')

    footer = _items_left(session.remaining_count)
    if session.has_completed:
        footer += " | /clear removes completed"
    lines.append(footer)
    return "\n".join(lines)


def resolve_task(state: AppState, ref: str) -> Task | None:
    """
    Resolve a user reference to a task:
    - a number is the 1-based position in the visible view
    - anything else is a unique id prefix
    """
    ref = ref.strip().rstrip(".")
    if not ref:
        return None

    if ref.isdigit():
        idx = int(ref) - 1
        visible = list(state.session.visible_tasks())
        if 0 <= idx < len(visible):
            return visible[idx]
        return None

    matches = [t for t in state.session.tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return render_view(state)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    title = " ".join(args).strip()
    if not title:
        return "Usage: /add <title>"
    state.session.add(title)
    return render_view(state)


def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return "Usage: /done <n>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    state.session.toggle(task.id)
    return render_view(state)


def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return "Usage: /rm <n>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    state.session.remove(task.id)
    return render_view(state)


def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /edit <n>            -> start editing task n
    /edit <n> <title...> -> start, replace title and save in one step
    """
    if not args:
        return "Usage: /edit <n> [new title]"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."

    session = state.session
    if not session.begin_edit(task.id):
        return "Another task is being edited. Use /save or /cancel first."

    if len(args) > 1:
        session.change_edit(" ".join(args[1:]))
        session.commit_edit()
        return render_view(state)

    return f'Editing "{task.title}". Use /title <text>, then /save or /cancel.'


def cmd_title(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.session.state.is_editing:
        return "Nothing is being edited. Use /edit <n> first."
    state.session.change_edit(" ".join(args))
    return f'Title: "{state.session.state.editing_title}" (/save or /cancel)'


def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.session.state.is_editing:
        return "Nothing is being edited."
    state.session.commit_edit()
    return render_view(state)


def cmd_cancel(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.session.state.is_editing:
        return "Nothing is being edited."
    state.session.cancel_edit()
    return "Edit cancelled."


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not state.session.has_completed:
        return "No completed tasks to clear."
    state.session.clear_completed()
    return render_view(state)


def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1 or args[0].lower() not in {f.value for f in TaskFilter}:
        return "Usage: /filter all|active|completed"
    state.session.set_filter(args[0])
    return render_view(state)


def cmd_search(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/search <query> sets the query; /search alone clears it."""
    state.session.set_search(" ".join(args))
    return render_view(state)


def cmd_theme(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /theme        -> switch light <-> dark
    /theme dark   -> set explicitly
    """
    if not args:
        new_theme = toggle_theme(state.theme)
    elif args[0].lower() in {t.value for t in Theme}:
        new_theme = Theme(args[0].lower())
    else:
        return "Usage: /theme [light|dark]"

    state.theme = new_theme
    if not save_theme(state.storage, state.settings.theme_key, new_theme) and emit:
        with contextlib.suppress(Exception):
            emit("[THEME] Could not save preference; it applies to this session only.")
    logger.debug("Theme set to %s", new_theme.value)
    return f"Theme: {new_theme.value}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks (current filter and search).", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <title>.")
registry.register("done", cmd_done, help_text="Toggle completed: /done <n>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n>.", aliases=["remove", "del"])
registry.register("edit", cmd_edit, help_text="Edit a title: /edit <n> [new title].")
registry.register("title", cmd_title, help_text="Change the title under edit: /title <text>.")
registry.register("save", cmd_save, help_text="Save the edit (empty title deletes the task).")
registry.register("cancel", cmd_cancel, help_text="Discard the edit.")
registry.register("clear", cmd_clear, help_text="Remove all completed tasks.")
registry.register("filter", cmd_filter, help_text="Filter: /filter all | active | completed.")
registry.register("search", cmd_search, help_text="Search titles: /search [text] (empty clears).")
registry.register("theme", cmd_theme, help_text="Switch theme: /theme [light|dark].")
