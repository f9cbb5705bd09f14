"""Error taxonomy shared by the store, repository and session controller."""


class TaskTrackerError(Exception):
    """Base class for all task tracker errors."""


class TaskValidationError(TaskTrackerError):
    """Create or update input the repository refuses to apply."""


class TaskNotFound(TaskTrackerError):
    """An update or read targeted an id that does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class PersistenceUnavailable(TaskTrackerError):
    """The persistence medium could not be read or written."""


class TaskBusy(TaskTrackerError):
    """Another action on the same task is still in flight."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} has an operation in progress")
        self.task_id = task_id
