"""
Task data-access package.

Exposes the Task entity, the repository contract with its SQLite and in-memory
implementations, and the PersistenceError raised on database failures.
"""

from .db import SQLiteTaskRepository, init_schema, sqlite_connection_provider
from .errors import PersistenceError
from .models import Task
from .repositories import InMemoryTaskRepository, TaskRepository, get_repository

__all__ = [
    "InMemoryTaskRepository",
    "PersistenceError",
    "SQLiteTaskRepository",
    "Task",
    "TaskRepository",
    "get_repository",
    "init_schema",
    "sqlite_connection_provider",
]
