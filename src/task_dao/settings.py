from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DB_PATH = "./data/tasks.db"
DEFAULT_DB_TIMEOUT = 5.0


@dataclass(frozen=True)
class Settings:
    """
    Settings loaded from environment variables.

    Env vars:
    - TASK_DAO_BACKEND: 'sqlite' (default) or 'memory'
    - TASK_DAO_DB_PATH: path to the sqlite db file. Default './data/tasks.db'
    - TASK_DAO_DB_TIMEOUT: seconds to wait on a locked database. Default 5.0
    - TASK_DAO_INIT_SCHEMA: 'false' to skip creating the task table (default: true)
    """

    backend: str
    db_path: str
    db_timeout: float
    init_schema: bool


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_timeout(value: str, default: float) -> float:
    try:
        timeout = float(value.strip())
    except ValueError:
        return default
    return timeout if timeout >= 0 else default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return settings loaded from environment variables."""
    backend = _get_env("TASK_DAO_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "sqlite"

    return Settings(
        backend=backend,
        db_path=_get_env("TASK_DAO_DB_PATH", DEFAULT_DB_PATH).strip(),
        db_timeout=_parse_timeout(_get_env("TASK_DAO_DB_TIMEOUT", str(DEFAULT_DB_TIMEOUT)), DEFAULT_DB_TIMEOUT),
        init_schema=_parse_bool(_get_env("TASK_DAO_INIT_SCHEMA", "true"), True),
    )
