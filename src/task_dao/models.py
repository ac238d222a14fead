from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A task as stored in the ``task`` table.

    Fields:
    - id: Identifier assigned by the repository on insert; None until saved
    - title: Free-form title
    - finished: Completion flag
    - created_date: Creation timestamp chosen by the caller

    The model carries values only. Row values are coerced on construction
    (0/1 integers to bool, ISO8601 text to datetime); attribute assignment is
    not validated.
    """

    id: Optional[int] = Field(default=None, description="Identifier assigned by the repository")
    title: str = Field(..., description="Title of the task")
    finished: bool = Field(default=False, description="Completion flag")
    created_date: datetime = Field(..., description="Creation timestamp")
