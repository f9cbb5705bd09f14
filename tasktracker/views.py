"""Derived task views: search, status filter and sort.

Everything here is a pure function of its arguments. Views are recomputed
from the full collection on every call rather than patched incrementally.
"""

import locale
from collections.abc import Iterable, Sequence
from datetime import date

from tasktracker.models import EmptyState, SortKey, StatusFilter, Task, TaskCounts


def matches_search(task: Task, query: str) -> bool:
    """Case-insensitive substring match on title, description or category."""
    if not query:
        return True
    needle = query.casefold()
    for field in (task.title, task.description, task.category):
        if field is not None and needle in field.casefold():
            return True
    return False


def search(tasks: Iterable[Task], query: str) -> list[Task]:
    """Keep the tasks matching ``query``; an empty query keeps everything."""
    return [t for t in tasks if matches_search(t, query)]


def filter_status(tasks: Iterable[Task], status_filter: StatusFilter) -> list[Task]:
    """Keep the tasks passing the completion-status filter."""
    if status_filter == StatusFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    if status_filter == StatusFilter.PENDING:
        return [t for t in tasks if not t.completed]
    return list(tasks)


def _title_key(task: Task) -> tuple[str, str]:
    return locale.strxfrm(task.title.casefold()), task.title


def sort_tasks(tasks: Iterable[Task], sort_key: SortKey) -> list[Task]:
    """Sort tasks by the given key. Every ordering is stable."""
    if sort_key == SortKey.TITLE:
        return sorted(tasks, key=_title_key)
    if sort_key == SortKey.DUE_DATE:
        # Undated tasks go last.
        return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or date.min))
    if sort_key == SortKey.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority.weight, reverse=True)
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


def project(
    tasks: Iterable[Task],
    search_query: str = "",
    status_filter: StatusFilter = StatusFilter.ALL,
    sort_key: SortKey = SortKey.CREATED,
) -> list[Task]:
    """Return the visible tasks: search, then status filter, then sort."""
    visible = search(tasks, search_query)
    visible = filter_status(visible, status_filter)
    return sort_tasks(visible, sort_key)


def counts_for(tasks: Iterable[Task], search_query: str = "") -> TaskCounts:
    """Per-status counts over the search result, ignoring the status filter."""
    found = search(tasks, search_query)
    completed = sum(1 for t in found if t.completed)
    return TaskCounts(all=len(found), completed=completed, pending=len(found) - completed)


def empty_state(
    tasks: Sequence[Task], visible: Sequence[Task], status_filter: StatusFilter
) -> EmptyState | None:
    """Return which empty-state message applies, or None if something is visible."""
    if not tasks:
        return EmptyState.NO_TASKS
    if visible:
        return None
    if status_filter == StatusFilter.COMPLETED:
        return EmptyState.NO_COMPLETED
    if status_filter == StatusFilter.PENDING:
        return EmptyState.NO_PENDING
    return EmptyState.NO_RESULTS
