from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional

from .models import Task
from .settings import Settings, get_settings


def _check_count(count: int) -> None:
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")


def _timestamp_key(value: datetime) -> datetime:
    # Aware values compare as their UTC wall time, the same way the SQL backend stores them.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def save(self, task: Task) -> Task:
        """Insert the task, assign the generated id onto it and return the same instance."""

    @abstractmethod
    def find_all(self) -> List[Task]:
        """Return every task ordered by id ascending."""

    @abstractmethod
    def find_all_not_finished(self) -> List[Task]:
        """Return all tasks whose finished flag is false. Order is unspecified."""

    @abstractmethod
    def find_newest_tasks(self, count: int) -> List[Task]:
        """
        Return at most ``count`` tasks with the most recent created_date, newest first.
        Tie order between equal timestamps is unspecified.
        Raises ValueError for a negative count, before any storage access.
        """

    @abstractmethod
    def get_by_id(self, task_id: int) -> Optional[Task]:
        """Return the task with the given id, or None if not found."""

    @abstractmethod
    def finish_task(self, task: Task) -> Task:
        """Mark the task finished in storage and on the instance. Return the same instance."""

    @abstractmethod
    def delete_by_id(self, task_id: int) -> None:
        """Delete the task with the given id. Missing ids are ignored."""

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every task and return how many were removed."""


class InMemoryTaskRepository(TaskRepository):
    """
    Thread-safe in-memory repository for callers that need a substitute for the
    database in their own tests.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[int, Task] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def save(self, task: Task) -> Task:
        task.id = self._allocate_id()
        with self._lock:
            self._items[task.id] = task.model_copy()
        return task

    def find_all(self) -> List[Task]:
        with self._lock:
            return [self._items[i].model_copy() for i in sorted(self._items)]

    def find_all_not_finished(self) -> List[Task]:
        with self._lock:
            return [t.model_copy() for t in self._items.values() if not t.finished]

    def find_newest_tasks(self, count: int) -> List[Task]:
        _check_count(count)
        with self._lock:
            newest = sorted(self._items.values(), key=lambda t: _timestamp_key(t.created_date), reverse=True)
            return [t.model_copy() for t in newest[:count]]

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.model_copy()

    def finish_task(self, task: Task) -> Task:
        with self._lock:
            stored = self._items.get(task.id) if task.id is not None else None
            if stored is not None:
                stored.finished = True
        task.finished = True
        return task

    def delete_by_id(self, task_id: int) -> None:
        with self._lock:
            self._items.pop(task_id, None)

    def delete_all(self) -> int:
        with self._lock:
            removed = len(self._items)
            self._items.clear()
            return removed


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> TaskRepository:
    """
    Factory to return the configured repository based on settings.
    - sqlite: SQLiteTaskRepository over a file-backed connection provider
    - memory: InMemoryTaskRepository
    """
    settings = settings or get_settings()
    if settings.backend == "memory":
        return InMemoryTaskRepository()

    from .db import SQLiteTaskRepository, init_schema, sqlite_connection_provider

    provider = sqlite_connection_provider(settings.db_path, timeout=settings.db_timeout)
    if settings.init_schema:
        init_schema(provider)
    return SQLiteTaskRepository(provider)
