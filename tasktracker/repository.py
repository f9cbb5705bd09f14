"""Task repository: the only component that mutates stored tasks.

Every operation reads the store afresh and writes it back before returning,
so results always reflect the committed state. The operations are
coroutines so a networked backend can replace the local store without
changing callers.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from tasktracker.errors import TaskNotFound, TaskValidationError
from tasktracker.models import Task, TaskCreate, TaskStats, TaskUpdate
from tasktracker.stats import compute_stats
from tasktracker.store import TaskStore

logger = logging.getLogger(__name__)

# Fields that are not nullable on Task; an explicit None means "leave as is".
_NON_NULLABLE = ("title", "completed", "priority")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid4())


class TaskRepository:
    """Create, read, update, delete and stat tasks over a task store."""

    def __init__(
        self,
        store: TaskStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._store = store
        self._clock = clock
        self._id_factory = id_factory

    async def list_tasks(self) -> list[Task]:
        """Return all tasks, newest created first."""
        return self._store.load()

    async def get_task(self, task_id: str) -> Task:
        """Return one task, or raise TaskNotFound."""
        for task in self._store.load():
            if task.id == task_id:
                return task
        raise TaskNotFound(task_id)

    async def create_task(self, data: TaskCreate) -> Task:
        """Create a task at the front of the collection and return it."""
        if not data.title or not data.title.strip():
            raise TaskValidationError("Title is required")

        tasks = self._store.load()
        existing = {t.id for t in tasks}
        task_id = self._id_factory()
        while task_id in existing:
            task_id = self._id_factory()

        now = self._clock()
        task = Task(
            id=task_id,
            title=data.title,
            description=data.description,
            completed=False,
            priority=data.priority,
            due_date=data.due_date,
            category=data.category,
            created_at=now,
            updated_at=now,
        )
        self._store.save([task, *tasks])
        logger.info("Task created id=%s", task.id)
        return task

    async def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        """Merge the supplied fields into a task and return the result."""
        update_data = data.model_dump(exclude_unset=True)
        for name in _NON_NULLABLE:
            if name in update_data and update_data[name] is None:
                del update_data[name]
        if "title" in update_data and not update_data["title"].strip():
            raise TaskValidationError("Title must not be blank")

        tasks = self._store.load()
        for index, task in enumerate(tasks):
            if task.id == task_id:
                break
        else:
            raise TaskNotFound(task_id)

        update_data["updated_at"] = max(self._clock(), task.updated_at)
        updated_task = task.model_copy(update=update_data)
        tasks[index] = updated_task
        self._store.save(tasks)
        logger.info("Task updated id=%s fields=%s", task_id, sorted(update_data))
        return updated_task

    async def delete_task(self, task_id: str) -> None:
        """Delete a task. Deleting a missing id succeeds without writing."""
        tasks = self._store.load()
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            logger.debug("Delete of missing task id=%s ignored", task_id)
            return
        self._store.save(remaining)
        logger.info("Task deleted id=%s", task_id)

    async def get_stats(self) -> TaskStats:
        """Recompute statistics from the stored collection."""
        return compute_stats(self._store.load())
