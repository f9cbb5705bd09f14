"""Personal task tracker: task store, repository, views and session controller."""

__version__ = "1.0.0"
