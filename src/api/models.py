from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a Task as handed between the
    storage backends and the route layer.

    Fields:
    - id: Globally unique string identifier (UUID4), never reassigned
    - title: Trimmed, non-empty title
    - done: Boolean completion flag
    - created_at: UTC creation timestamp (datetime)
    - updated_at: UTC last update timestamp (datetime)
    """

    id: str
    title: str
    done: bool
    created_at: datetime
    updated_at: datetime
