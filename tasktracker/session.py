"""Session controller: user actions against the repository.

The controller keeps a local copy of the tasks and a statistics snapshot for
display. The local copy changes only after the repository has confirmed an
action, so a failed action leaves everything exactly as it was and there is
nothing to roll back.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from tasktracker import views
from tasktracker.errors import TaskBusy, TaskTrackerError
from tasktracker.models import (
    EmptyState,
    SortKey,
    StatusFilter,
    Task,
    TaskCounts,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)
from tasktracker.repository import TaskRepository
from tasktracker.stats import completion_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of a session action: either ``task`` (when any) or ``error``."""

    ok: bool
    task: Task | None = None
    error: TaskTrackerError | None = None

    @classmethod
    def success(cls, task: Task | None = None) -> "Outcome":
        """A confirmed action, carrying the affected task when there is one."""
        return cls(ok=True, task=task)

    @classmethod
    def failure(cls, error: TaskTrackerError) -> "Outcome":
        """A failed action; nothing local was changed."""
        return cls(ok=False, error=error)


class SessionController:
    """Holds the displayed task list and runs create/edit/toggle/delete."""

    def __init__(self, repository: TaskRepository) -> None:
        self._repository = repository
        self.tasks: list[Task] = []
        self.stats = TaskStats()
        self.search_query = ""
        self.status_filter = StatusFilter.ALL
        self.sort_key = SortKey.CREATED
        self._busy: set[str] = set()

    # ---- derived view ----

    @property
    def visible_tasks(self) -> list[Task]:
        return views.project(self.tasks, self.search_query, self.status_filter, self.sort_key)

    @property
    def counts(self) -> TaskCounts:
        return views.counts_for(self.tasks, self.search_query)

    @property
    def empty_state(self) -> EmptyState | None:
        return views.empty_state(self.tasks, self.visible_tasks, self.status_filter)

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.stats)

    def is_busy(self, task_id: str) -> bool:
        """True while an action on ``task_id`` is in flight; the UI disables its controls."""
        return task_id in self._busy

    @contextmanager
    def _claim(self, task_id: str) -> Iterator[None]:
        if task_id in self._busy:
            raise TaskBusy(task_id)
        self._busy.add(task_id)
        try:
            yield
        finally:
            self._busy.discard(task_id)

    # ---- actions ----

    async def refresh(self) -> Outcome:
        """Reload tasks and statistics from the repository."""
        try:
            tasks = await self._repository.list_tasks()
            stats = await self._repository.get_stats()
        except TaskTrackerError as exc:
            logger.exception("Failed to load tasks")
            return Outcome.failure(exc)
        self.tasks = tasks
        self.stats = stats
        logger.info("Tasks loaded: %d", len(tasks))
        return Outcome.success()

    async def create(self, data: TaskCreate) -> Outcome:
        """Create a task and prepend it to the displayed list."""
        try:
            task = await self._repository.create_task(data)
        except TaskTrackerError as exc:
            logger.exception("Failed to create task")
            return Outcome.failure(exc)
        self.tasks = [task, *self.tasks]
        self.stats = TaskStats(
            total=self.stats.total + 1,
            completed=self.stats.completed,
            pending=self.stats.pending + 1,
        )
        logger.info("Task created: %s", task.title)
        return Outcome.success(task)

    async def update(self, task_id: str, data: TaskUpdate) -> Outcome:
        """Apply an edit; the cached entry is replaced by the repository's record."""
        try:
            with self._claim(task_id):
                task = await self._repository.update_task(task_id, data)
        except TaskTrackerError as exc:
            logger.exception("Failed to update task %s", task_id)
            return Outcome.failure(exc)
        before = self._cached(task_id)
        self._replace(task)
        if before is not None and before.completed != task.completed:
            self._shift_completed(task.completed)
        logger.info("Task updated: %s", task.title)
        return Outcome.success(task)

    async def toggle_complete(self, task_id: str, completed: bool) -> Outcome:
        """Mark a task completed or pending and move one unit between the counters."""
        try:
            with self._claim(task_id):
                task = await self._repository.update_task(
                    task_id, TaskUpdate(completed=completed)
                )
        except TaskTrackerError as exc:
            logger.exception("Failed to toggle task %s", task_id)
            return Outcome.failure(exc)
        before = self._cached(task_id)
        self._replace(task)
        if before is not None and before.completed != task.completed:
            self._shift_completed(task.completed)
        logger.info("Task toggled: %s completed=%s", task_id, completed)
        return Outcome.success(task)

    async def delete(self, task_id: str) -> Outcome:
        """Delete a task; counters drop according to its status before removal."""
        removed = self._cached(task_id)
        try:
            with self._claim(task_id):
                await self._repository.delete_task(task_id)
        except TaskTrackerError as exc:
            logger.exception("Failed to delete task %s", task_id)
            return Outcome.failure(exc)
        if removed is not None:
            self.tasks = [t for t in self.tasks if t.id != task_id]
            self.stats = TaskStats(
                total=self.stats.total - 1,
                completed=self.stats.completed - (1 if removed.completed else 0),
                pending=self.stats.pending - (0 if removed.completed else 1),
            )
        logger.info("Task deleted: %s", task_id)
        return Outcome.success(removed)

    # ---- cache helpers ----

    def _cached(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def _replace(self, task: Task) -> None:
        self.tasks = [task if t.id == task.id else t for t in self.tasks]

    def _shift_completed(self, completed: bool) -> None:
        step = 1 if completed else -1
        self.stats = TaskStats(
            total=self.stats.total,
            completed=self.stats.completed + step,
            pending=self.stats.pending - step,
        )
