from __future__ import annotations

from pathlib import Path

import pytest

from task_dao.db import SQLiteTaskRepository, init_schema, sqlite_connection_provider
from task_dao.repositories import InMemoryTaskRepository, TaskRepository


@pytest.fixture()
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "tasks.db")


@pytest.fixture()
def provider(db_path: str):
    """Connection provider over a fresh SQLite file with the task table created."""
    p = sqlite_connection_provider(db_path)
    init_schema(p)
    return p


@pytest.fixture()
def sqlite_repo(provider) -> SQLiteTaskRepository:
    return SQLiteTaskRepository(provider)


@pytest.fixture(params=["sqlite", "memory"])
def repo(request) -> TaskRepository:
    """Every repository implementation, so contract tests run against both."""
    if request.param == "memory":
        return InMemoryTaskRepository()
    return request.getfixturevalue("sqlite_repo")
