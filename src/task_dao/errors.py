from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class PersistenceError(Exception):
    """
    Raised when the underlying database call fails.

    The driver exception is chained as ``__cause__``. ``task_id`` is set when
    the failing operation targeted a single task.
    """

    def __init__(self, message: str, *, task_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.task_id = task_id

    def __str__(self) -> str:
        if self.task_id is None:
            return self.message
        return f"{self.message} (task_id={self.task_id})"
