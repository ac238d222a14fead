from __future__ import annotations

import os
import sqlite3
from contextlib import closing, contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generator, List, Optional, Sequence

from .errors import PersistenceError
from .models import Task
from .repositories import TaskRepository, _check_count

# Zero-argument callable returning a new, ready to use DB-API connection
# (sqlite3.Connection compatible, qmark paramstyle). The repository closes
# every connection it obtains.
ConnectionProvider = Callable[[], sqlite3.Connection]


@dataclass(frozen=True)
class _Cols:
    table: str = "task"
    id: str = "task_id"
    title: str = "title"
    finished: str = "finished"
    created_date: str = "created_date"


_COLS = _Cols()

_SELECT = f"SELECT {_COLS.id}, {_COLS.title}, {_COLS.finished}, {_COLS.created_date} FROM {_COLS.table}"


def _to_db_timestamp(value: datetime) -> str:
    # Fixed width and a single UTC offset keep text order equal to chronological order.
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.isoformat(sep=" ", timespec="microseconds")


def _row_to_task(row: Sequence[Any]) -> Task:
    return Task(id=row[0], title=row[1], finished=row[2], created_date=row[3])


# PUBLIC_INTERFACE
def sqlite_connection_provider(db_path: str, *, timeout: float = 5.0) -> ConnectionProvider:
    """
    Return a connection provider opening a new connection to a SQLite file on
    each call. The parent directory is created if missing.

    Note: ':memory:' is not useful here since every connection would see a
    fresh, empty database.
    """
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    def connect() -> sqlite3.Connection:
        return sqlite3.connect(db_path, timeout=timeout)

    return connect


# PUBLIC_INTERFACE
def init_schema(provider: ConnectionProvider) -> None:
    """Create the task table and its created_date index if they do not exist."""
    try:
        with closing(provider()) as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.finished} BOOLEAN NOT NULL DEFAULT 0,
                    {_COLS.created_date} TIMESTAMP NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_date "
                f"ON {_COLS.table}({_COLS.created_date})"
            )
            conn.commit()
    except sqlite3.Error as e:
        raise PersistenceError("Failed to create task schema") from e


class SQLiteTaskRepository(TaskRepository):
    """
    SQL repository for the task table.

    Every method obtains its own connection from the injected provider, runs a
    single statement, commits and closes the connection on every exit path.
    Driver errors are re-raised as PersistenceError.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        self._provider = provider

    @contextmanager
    def _conn(self, operation: str, task_id: Optional[int] = None) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = self._provider()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not open connection for {operation}", task_id=task_id) from e
        try:
            yield conn
            conn.commit()
        except (sqlite3.Error, OverflowError) as e:
            # OverflowError: an int parameter outside the SQLite INTEGER range.
            # Closing without commit discards anything left uncommitted.
            raise PersistenceError(f"{operation} failed", task_id=task_id) from e
        finally:
            conn.close()

    def save(self, task: Task) -> Task:
        with self._conn("save") as conn:
            cur = conn.execute(
                f"INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.finished}, {_COLS.created_date}) "
                "VALUES (?, ?, ?)",
                (task.title, task.finished, _to_db_timestamp(task.created_date)),
            )
            task.id = cur.lastrowid
        return task

    def find_all(self) -> List[Task]:
        with self._conn("find_all") as conn:
            rows = conn.execute(f"{_SELECT} ORDER BY {_COLS.id}").fetchall()
        return [_row_to_task(r) for r in rows]

    def find_all_not_finished(self) -> List[Task]:
        with self._conn("find_all_not_finished") as conn:
            rows = conn.execute(f"{_SELECT} WHERE {_COLS.finished} = ?", (False,)).fetchall()
        return [_row_to_task(r) for r in rows]

    def find_newest_tasks(self, count: int) -> List[Task]:
        _check_count(count)
        with self._conn("find_newest_tasks") as conn:
            rows = conn.execute(
                f"{_SELECT} ORDER BY {_COLS.created_date} DESC LIMIT ?", (count,)
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with self._conn("get_by_id", task_id) as conn:
            row = conn.execute(f"{_SELECT} WHERE {_COLS.id} = ?", (task_id,)).fetchone()
        return _row_to_task(row) if row else None

    def finish_task(self, task: Task) -> Task:
        with self._conn("finish_task", task.id) as conn:
            conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.finished} = ? WHERE {_COLS.id} = ?",
                (True, task.id),
            )
        task.finished = True
        return task

    def delete_by_id(self, task_id: int) -> None:
        with self._conn("delete_by_id", task_id) as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))

    def delete_all(self) -> int:
        with self._conn("delete_all") as conn:
            return conn.execute(f"DELETE FROM {_COLS.table}").rowcount
