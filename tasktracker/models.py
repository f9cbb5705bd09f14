"""Pydantic models for the task tracker.

Field limits mirror the constraints of the task form: titles up to 100
characters, descriptions up to 500, categories up to 50.
"""

import math
from datetime import date
from enum import StrEnum

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)


class Priority(StrEnum):
    """Task priority, ordered by severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        """Severity weight used for sorting (high=3, medium=2, low=1)."""
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class StatusFilter(StrEnum):
    """Which tasks a view keeps, by completion status."""

    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class SortKey(StrEnum):
    """Orderings offered by the task view."""

    CREATED = "created"
    TITLE = "title"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"


class EmptyState(StrEnum):
    """Why a view came out empty."""

    NO_TASKS = "no-tasks"
    NO_RESULTS = "no-results"
    NO_COMPLETED = "no-completed"
    NO_PENDING = "no-pending"


class TaskCreate(BaseModel):
    """Input for creating a new task."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="The task title (required, 1-100 characters)",
    )
    description: str | None = Field(default=None, max_length=500)
    priority: Priority = Field(default=Priority.MEDIUM)
    due_date: date | None = Field(default=None, description="Calendar due date")
    category: str | None = Field(default=None, max_length=50)


class TaskUpdate(BaseModel):
    """Partial input for updating an existing task.

    Only the fields that were explicitly set are applied. Keys outside this
    model (``id``, ``created_at``, ``updated_at``) are ignored.
    """

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    completed: bool | None = Field(default=None, description="New completion status")
    priority: Priority | None = None
    due_date: date | None = None
    category: str | None = Field(default=None, max_length=50)


class Task(BaseModel):
    """A task record as persisted by the task store."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique identifier for the task")
    title: str = Field(..., description="The task title")
    description: str | None = None
    completed: bool = Field(default=False, description="Whether the task has been completed")
    priority: Priority = Priority.MEDIUM
    due_date: date | None = None
    category: str | None = None
    created_at: AwareDatetime = Field(..., description="When the task was created")
    updated_at: AwareDatetime = Field(..., description="When the task was last updated")

    @model_validator(mode="after")
    def check_timestamps(self) -> "Task":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self


class TaskStats(BaseModel):
    """Aggregate completion counts. ``total`` always equals ``completed + pending``."""

    total: int = 0
    completed: int = 0
    pending: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_rate(self) -> int:
        """Percentage of completed tasks, halves rounded up; 0 when there are none."""
        if self.total <= 0:
            return 0
        return math.floor(100 * self.completed / self.total + 0.5)


class TaskCounts(BaseModel):
    """Per-status counts over a search result, for the filter tabs."""

    all: int = 0
    completed: int = 0
    pending: int = 0


class HealthResponse(BaseModel):
    """Response from the health check endpoint."""

    status: str = "healthy"
    version: str = "1.0.0"
