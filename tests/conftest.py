"""Pytest fixtures for the task tracker tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tasktracker.config import Settings
from tasktracker.main import create_app
from tasktracker.repository import TaskRepository
from tasktracker.store import MemoryTaskStore

from .fakes import FlakyStore, TickingClock


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a per-test directory, independent of the environment."""
    return Settings(
        app_name="Task Tracker",
        log_level="INFO",
        log_dir=None,
        data_dir=tmp_path,
        tasks_path=tmp_path / "tasks.json",
        seed_defaults=False,
        host="127.0.0.1",
        port=8000,
        cors_origins=["http://localhost:3000"],
    )


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture()
def repository(store: FlakyStore, clock: TickingClock) -> TaskRepository:
    return TaskRepository(store, clock=clock)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """Create a test client for the API over an empty, unseeded store."""
    return TestClient(create_app(settings, store=MemoryTaskStore(seed_defaults=False)))
