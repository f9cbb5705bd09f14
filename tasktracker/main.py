"""FastAPI application entry point."""

import logging

import uvicorn
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasktracker import __version__, views
from tasktracker.config import Settings
from tasktracker.errors import PersistenceUnavailable, TaskNotFound, TaskValidationError
from tasktracker.logging_setup import setup_logging
from tasktracker.models import (
    HealthResponse,
    SortKey,
    StatusFilter,
    Task,
    TaskCounts,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)
from tasktracker.repository import TaskRepository
from tasktracker.store import JsonFileTaskStore, TaskStore

logger = logging.getLogger(__name__)


def get_repository(request: Request) -> TaskRepository:
    """Dependency returning the repository bound to the running app."""
    return request.app.state.repository


def create_app(settings: Settings | None = None, store: TaskStore | None = None) -> FastAPI:
    """Build the API around a task store (a JSON file from settings by default)."""
    if settings is None:
        settings = Settings.from_env()
    if store is None:
        store = JsonFileTaskStore(settings.tasks_path, seed_defaults=settings.seed_defaults)

    app = FastAPI(
        title=settings.app_name,
        description="Personal task tracker API.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.repository = TaskRepository(store)

    # Configure CORS for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TaskNotFound)
    async def task_not_found_handler(request: Request, exc: TaskNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Task not found"},
        )

    @app.exception_handler(TaskValidationError)
    async def task_validation_handler(request: Request, exc: TaskValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(PersistenceUnavailable)
    async def persistence_handler(request: Request, exc: PersistenceUnavailable) -> JSONResponse:
        logger.error("Persistence unavailable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Task storage unavailable"},
        )

    register_routes(app)
    return app


def register_routes(app: FastAPI) -> None:
    """Attach the task endpoints to ``app``."""

    @app.get("/api/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(version=__version__)

    @app.get("/api/tasks", response_model=list[Task], tags=["Tasks"])
    async def list_tasks(
        search: str = "",
        status_filter: StatusFilter | None = Query(default=None, alias="status"),
        sort: SortKey | None = None,
        repository: TaskRepository = Depends(get_repository),
    ) -> list[Task]:
        """List tasks, optionally searched, filtered and sorted.

        Without any parameter the stored order (newest first) is returned.
        """
        tasks = await repository.list_tasks()
        if not search and status_filter is None and sort is None:
            return tasks
        return views.project(
            tasks,
            search,
            status_filter or StatusFilter.ALL,
            sort or SortKey.CREATED,
        )

    @app.get("/api/tasks/counts", response_model=TaskCounts, tags=["Tasks"])
    async def task_counts(
        search: str = "",
        repository: TaskRepository = Depends(get_repository),
    ) -> TaskCounts:
        """Per-status counts for the current search."""
        return views.counts_for(await repository.list_tasks(), search)

    @app.get("/api/tasks/stats", response_model=TaskStats, tags=["Tasks"])
    async def task_stats(repository: TaskRepository = Depends(get_repository)) -> TaskStats:
        """Completion statistics over all tasks."""
        return await repository.get_stats()

    @app.post(
        "/api/tasks",
        response_model=Task,
        status_code=status.HTTP_201_CREATED,
        tags=["Tasks"],
    )
    async def create_task(
        data: TaskCreate, repository: TaskRepository = Depends(get_repository)
    ) -> Task:
        """Create a new task."""
        return await repository.create_task(data)

    @app.get("/api/tasks/{task_id}", response_model=Task, tags=["Tasks"])
    async def get_task(task_id: str, repository: TaskRepository = Depends(get_repository)) -> Task:
        """Get a specific task by ID."""
        return await repository.get_task(task_id)

    @app.patch("/api/tasks/{task_id}", response_model=Task, tags=["Tasks"])
    async def update_task(
        task_id: str, data: TaskUpdate, repository: TaskRepository = Depends(get_repository)
    ) -> Task:
        """Update an existing task."""
        return await repository.update_task(task_id, data)

    @app.delete(
        "/api/tasks/{task_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["Tasks"],
    )
    async def delete_task(
        task_id: str, repository: TaskRepository = Depends(get_repository)
    ) -> None:
        """Delete a task. Deleting a missing task also succeeds."""
        await repository.delete_task(task_id)


def serve() -> None:
    """Run the API with uvicorn using settings from the environment."""
    settings = Settings.from_env()
    setup_logging(log_dir=settings.log_dir, console_level=settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    serve()
