"""Settings loaded from environment variables (+ optional .env).

All variables use the ``TASKTRACKER_`` prefix, e.g. ``TASKTRACKER_TASKS_PATH``.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTRACKER"
DEFAULT_DATA_DIR = Path(".local/tasktracker")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    if raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path | None

    # ---- Storage ----
    data_dir: Path
    tasks_path: Path
    seed_defaults: bool

    # ---- HTTP ----
    host: str
    port: int
    cors_origins: list[str]

    @staticmethod
    def from_env(*, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv(override=False)

        data_dir = _env_path(_k("DATA_DIR"), DEFAULT_DATA_DIR) or Path(".")
        tasks_path = _env_path(_k("TASKS_PATH"), None) or data_dir / "tasks.json"

        return Settings(
            app_name=_env(_k("APP_NAME"), "Task Tracker"),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            log_dir=_env_path(_k("LOG_DIR"), data_dir),
            data_dir=data_dir,
            tasks_path=tasks_path,
            seed_defaults=_env_bool(_k("SEED_DEFAULTS"), True),
            host=_env(_k("HOST"), "127.0.0.1"),
            port=_env_int(_k("PORT"), 8000),
            cors_origins=_env_list(_k("CORS_ORIGINS"), ["http://localhost:3000"]),
        )
