"""Tests for the task repository."""

from datetime import date, timedelta

import pytest

from tasktracker.errors import PersistenceUnavailable, TaskNotFound, TaskValidationError
from tasktracker.models import Priority, TaskCreate, TaskStats, TaskUpdate
from tasktracker.repository import TaskRepository
from tasktracker.store import MemoryTaskStore

from .fakes import FlakyStore, TickingClock


@pytest.mark.asyncio
async def test_create_then_complete_scenario(repository: TaskRepository) -> None:
    task = await repository.create_task(TaskCreate(title="Buy milk"))

    assert task.completed is False
    assert task.priority == Priority.MEDIUM
    assert task.created_at == task.updated_at
    before = await repository.get_stats()

    done = await repository.update_task(task.id, TaskUpdate(completed=True))

    assert done.completed is True
    assert done.updated_at > done.created_at
    after = await repository.get_stats()
    assert after.pending == before.pending - 1
    assert after.completed == before.completed + 1


@pytest.mark.asyncio
async def test_create_inserts_newest_first(repository: TaskRepository) -> None:
    for title in ("one", "two", "three"):
        await repository.create_task(TaskCreate(title=title))

    titles = [t.title for t in await repository.list_tasks()]
    assert titles == ["three", "two", "one"]


@pytest.mark.asyncio
async def test_create_copies_optional_fields(repository: TaskRepository) -> None:
    task = await repository.create_task(
        TaskCreate(
            title="Write report",
            description="Q1",
            priority=Priority.HIGH,
            due_date=date(2025, 4, 1),
            category="Work",
        )
    )

    stored = await repository.get_task(task.id)
    assert stored == task
    assert stored.category == "Work"
    assert stored.due_date == date(2025, 4, 1)


@pytest.mark.asyncio
async def test_create_rejects_blank_title(repository: TaskRepository, store: FlakyStore) -> None:
    with pytest.raises(TaskValidationError):
        await repository.create_task(TaskCreate(title="  "))
    assert await repository.list_tasks() == []


@pytest.mark.asyncio
async def test_create_regenerates_colliding_ids(store: FlakyStore, clock: TickingClock) -> None:
    ids = iter(["dup", "dup", "fresh"])
    repository = TaskRepository(store, clock=clock, id_factory=lambda: next(ids))

    first = await repository.create_task(TaskCreate(title="a"))
    second = await repository.create_task(TaskCreate(title="b"))

    assert first.id == "dup"
    assert second.id == "fresh"


@pytest.mark.asyncio
async def test_update_merges_only_supplied_fields(repository: TaskRepository) -> None:
    task = await repository.create_task(
        TaskCreate(title="Plan trip", description="Book hotel", category="Travel")
    )

    updated = await repository.update_task(task.id, TaskUpdate(priority=Priority.HIGH))

    assert updated.priority == Priority.HIGH
    assert updated.title == "Plan trip"
    assert updated.description == "Book hotel"
    assert updated.category == "Travel"


@pytest.mark.asyncio
async def test_update_never_changes_id_or_created_at(repository: TaskRepository) -> None:
    task = await repository.create_task(TaskCreate(title="Original"))
    data = TaskUpdate.model_validate(
        {"id": "hijack", "created_at": "2000-01-01T00:00:00Z", "title": "Renamed"}
    )

    updated = await repository.update_task(task.id, data)

    assert updated.id == task.id
    assert updated.created_at == task.created_at
    assert updated.title == "Renamed"


@pytest.mark.asyncio
async def test_update_explicit_none_clears_optional_but_not_required(
    repository: TaskRepository,
) -> None:
    task = await repository.create_task(
        TaskCreate(title="Dentist", due_date=date(2025, 6, 1), category="Health")
    )

    updated = await repository.update_task(
        task.id, TaskUpdate(title=None, completed=None, due_date=None, category=None)
    )

    assert updated.title == "Dentist"
    assert updated.completed is False
    assert updated.due_date is None
    assert updated.category is None


@pytest.mark.asyncio
async def test_update_rejects_blank_title(repository: TaskRepository) -> None:
    task = await repository.create_task(TaskCreate(title="Keep"))

    with pytest.raises(TaskValidationError):
        await repository.update_task(task.id, TaskUpdate(title=" "))
    assert (await repository.get_task(task.id)).title == "Keep"


@pytest.mark.asyncio
async def test_update_missing_task(repository: TaskRepository) -> None:
    with pytest.raises(TaskNotFound):
        await repository.update_task("missing", TaskUpdate(completed=True))


@pytest.mark.asyncio
async def test_updated_at_never_moves_backwards(store: FlakyStore) -> None:
    clock = TickingClock(step=timedelta(seconds=-1))
    repository = TaskRepository(store, clock=clock)
    task = await repository.create_task(TaskCreate(title="Time travel"))

    updated = await repository.update_task(task.id, TaskUpdate(title="Still here"))

    assert updated.updated_at >= task.updated_at
    assert updated.updated_at >= updated.created_at


@pytest.mark.asyncio
async def test_updated_at_increases_on_each_update(repository: TaskRepository) -> None:
    task = await repository.create_task(TaskCreate(title="Tick"))
    stamps = [task.updated_at]
    for completed in (True, False, True):
        task = await repository.update_task(task.id, TaskUpdate(completed=completed))
        stamps.append(task.updated_at)

    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


@pytest.mark.asyncio
async def test_delete_removes_task(repository: TaskRepository) -> None:
    task = await repository.create_task(TaskCreate(title="Gone"))

    await repository.delete_task(task.id)

    assert await repository.list_tasks() == []
    with pytest.raises(TaskNotFound):
        await repository.get_task(task.id)


@pytest.mark.asyncio
async def test_delete_missing_is_idempotent(repository: TaskRepository, store: FlakyStore) -> None:
    await repository.create_task(TaskCreate(title="Stay"))
    before = await repository.list_tasks()

    await repository.delete_task("missing")
    await repository.delete_task("missing")

    assert await repository.list_tasks() == before


@pytest.mark.asyncio
async def test_delete_missing_does_not_write(repository: TaskRepository, store: FlakyStore) -> None:
    await repository.create_task(TaskCreate(title="Stay"))
    store.fail_writes = True

    await repository.delete_task("missing")


@pytest.mark.asyncio
async def test_stats_on_empty_collection(repository: TaskRepository) -> None:
    stats = await repository.get_stats()

    assert stats == TaskStats(total=0, completed=0, pending=0)
    assert stats.completion_rate == 0


@pytest.mark.asyncio
async def test_stats_stay_consistent_across_operations(repository: TaskRepository) -> None:
    ids = []
    for i in range(4):
        ids.append((await repository.create_task(TaskCreate(title=f"t{i}"))).id)
    operations = [
        repository.update_task(ids[0], TaskUpdate(completed=True)),
        repository.update_task(ids[1], TaskUpdate(completed=True)),
        repository.delete_task(ids[0]),
        repository.update_task(ids[1], TaskUpdate(completed=False)),
        repository.delete_task("missing"),
        repository.delete_task(ids[3]),
    ]
    for op in operations:
        await op
        stats = await repository.get_stats()
        assert stats.total == stats.completed + stats.pending
        assert stats.total == len(await repository.list_tasks())


@pytest.mark.asyncio
async def test_stats_read_committed_state() -> None:
    store = MemoryTaskStore(seed_defaults=True)
    repository = TaskRepository(store)

    assert await repository.get_stats() == TaskStats(total=2, completed=1, pending=1)

    # Another writer replaces the slot; stats are not cached.
    store.save([])
    assert await repository.get_stats() == TaskStats(total=0, completed=0, pending=0)


@pytest.mark.asyncio
async def test_write_failure_leaves_store_unchanged(
    repository: TaskRepository, store: FlakyStore
) -> None:
    task = await repository.create_task(TaskCreate(title="Safe"))
    store.fail_writes = True

    with pytest.raises(PersistenceUnavailable):
        await repository.create_task(TaskCreate(title="Lost"))
    with pytest.raises(PersistenceUnavailable):
        await repository.update_task(task.id, TaskUpdate(completed=True))
    with pytest.raises(PersistenceUnavailable):
        await repository.delete_task(task.id)

    store.fail_writes = False
    assert await repository.list_tasks() == [task]


@pytest.mark.asyncio
async def test_read_failure_propagates(repository: TaskRepository, store: FlakyStore) -> None:
    store.fail_reads = True

    with pytest.raises(PersistenceUnavailable):
        await repository.list_tasks()
    with pytest.raises(PersistenceUnavailable):
        await repository.get_stats()
