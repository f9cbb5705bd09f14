"""Completion statistics over a task collection."""

from collections.abc import Iterable

from tasktracker.models import Task, TaskStats


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    """Count total, completed and pending tasks."""
    tasks = list(tasks)
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskStats(total=total, completed=completed, pending=total - completed)


def completion_rate(stats: TaskStats) -> int:
    """Percentage of completed tasks, halves rounded up; 0 when there are none."""
    return stats.completion_rate
