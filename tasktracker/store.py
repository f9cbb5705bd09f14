"""Task storage.

The whole collection lives in a single slot holding one JSON array of task
records, read and written wholesale. ``JsonFileTaskStore`` keeps the slot in
a file on disk; ``MemoryTaskStore`` keeps it in process, which is what the
tests and embedders use.
"""

import logging
import os
import tempfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from tasktracker.errors import PersistenceUnavailable
from tasktracker.models import Priority, Task

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(list[Task])


def default_tasks() -> list[Task]:
    """Return the two example tasks written to an empty store."""
    return [
        Task(
            id="1",
            title="Complete React assignment",
            description="Build a task tracker application",
            completed=False,
            priority=Priority.MEDIUM,
            created_at=datetime(2024, 1, 15, 10, 0, tzinfo=UTC),
            updated_at=datetime(2024, 1, 15, 10, 0, tzinfo=UTC),
        ),
        Task(
            id="2",
            title="Review JavaScript concepts",
            description="Go through ES6+ features",
            completed=True,
            priority=Priority.MEDIUM,
            created_at=datetime(2024, 1, 14, 15, 30, tzinfo=UTC),
            updated_at=datetime(2024, 1, 14, 15, 30, tzinfo=UTC),
        ),
    ]


class TaskStore(Protocol):
    """Persistence contract used by the repository."""

    def load(self) -> list[Task]: ...

    def save(self, tasks: Sequence[Task]) -> None: ...


class SlotTaskStore:
    """Load/save logic shared by every single-slot store.

    Subclasses only move raw text in and out of the slot. ``_read`` returns
    None when nothing has been stored yet.
    """

    def __init__(self, *, seed_defaults: bool = True) -> None:
        self.seed_defaults = seed_defaults

    def _read(self) -> str | None:
        raise NotImplementedError

    def _write(self, raw: str) -> None:
        raise NotImplementedError

    def load(self) -> list[Task]:
        """Return the persisted tasks in stored order.

        An empty slot is seeded with the default tasks (and the seed is
        written back so later loads agree). Malformed content loads as an
        empty collection instead of failing; so does a collection that
        repeats an id.
        """
        raw = self._read()
        if raw is None or not raw.strip():
            if not self.seed_defaults:
                return []
            tasks = default_tasks()
            self.save(tasks)
            logger.info("Seeded empty task store with %d default tasks", len(tasks))
            return tasks
        try:
            tasks = _TASK_LIST.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Stored tasks are malformed, loading empty collection (%d errors)",
                exc.error_count(),
            )
            return []
        ids = {t.id for t in tasks}
        if len(ids) != len(tasks):
            logger.warning(
                "Stored tasks repeat %d ids, loading empty collection", len(tasks) - len(ids)
            )
            return []
        return tasks

    def save(self, tasks: Sequence[Task]) -> None:
        """Overwrite the slot with the given tasks."""
        raw = _TASK_LIST.dump_json(list(tasks), indent=2).decode("utf-8")
        self._write(raw)
        logger.debug("Saved %d tasks", len(tasks))


class MemoryTaskStore(SlotTaskStore):
    """In-process slot; the serialized text is kept so it behaves like the file store."""

    def __init__(self, raw: str | None = None, *, seed_defaults: bool = True) -> None:
        super().__init__(seed_defaults=seed_defaults)
        self.raw = raw

    def _read(self) -> str | None:
        return self.raw

    def _write(self, raw: str) -> None:
        self.raw = raw

    def clear(self) -> None:
        """Empty the slot. Useful for testing."""
        self.raw = None


class JsonFileTaskStore(SlotTaskStore):
    """Slot backed by a JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a half-written file.
    """

    def __init__(self, path: str | Path, *, seed_defaults: bool = True) -> None:
        super().__init__(seed_defaults=seed_defaults)
        self.path = Path(path)

    def _read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceUnavailable(f"Cannot read {self.path}: {exc}") from exc

    def _write(self, raw: str) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(raw)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
