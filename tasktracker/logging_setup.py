"""Logging configuration for the task tracker service."""

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow all tasktracker logs
    - let uvicorn's own logs through at INFO+
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - any other third-party logger only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "tasktracker" or name.startswith("tasktracker."):
            return True

        if name.startswith("uvicorn"):
            return record.levelno >= logging.INFO

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: filtered for interactive use
    - File handler (when ``log_dir`` is given): full logs for debugging

    Call this ONCE, before the application starts serving.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "tasktracker.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
