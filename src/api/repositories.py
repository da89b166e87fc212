from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from itertools import count
from threading import RLock
from typing import Any, Dict, List, Optional

from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate
from .settings import Settings
from .utils import new_task_id, utcnow

logger = logging.getLogger(__name__)


def update_fields(data: TaskUpdate) -> Dict[str, Any]:
    """
    Return the fields a partial update should apply.

    Absent fields and explicit nulls are both left untouched.
    """
    return data.model_dump(exclude_unset=True, exclude_none=True)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    driver: str = "unknown"

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Persist a task with a freshly generated id and return it."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """Apply the supplied fields to an existing task. Return the updated task or None if not found."""

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete exactly one task by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return every task, most recently created first."""

    @abstractmethod
    def ping(self) -> None:
        """Round-trip to the store. Raise if it is unreachable."""

    def close(self) -> None:
        """Release store resources. No-op by default."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    driver = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TaskEntity] = {}
        # insertion sequence, breaks created_at ties when listing
        self._seq: dict[str, int] = {}
        self._counter = count()

    def create(self, data: TaskCreate) -> TaskEntity:
        now = utcnow()
        entity: TaskEntity = {
            "id": new_task_id(),
            "title": data.title or "",
            "done": bool(data.done),
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
            self._seq[entity["id"]] = next(self._counter)
        return entity.copy()  # type: ignore[return-value]

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            updated.update(update_fields(data))  # type: ignore[typeddict-item]
            updated["updated_at"] = utcnow()

            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete(self, task_id: str) -> bool:
        with self._lock:
            self._seq.pop(task_id, None)
            return self._items.pop(task_id, None) is not None

    def list(self) -> List[TaskEntity]:
        with self._lock:
            items = sorted(
                self._items.values(),
                key=lambda t: (t["created_at"], self._seq[t["id"]]),
                reverse=True,
            )
            # Return copies to avoid external mutation
            return [t.copy() for t in items]  # type: ignore[misc]

    def ping(self) -> None:
        return None


# PUBLIC_INTERFACE
def build_repository(settings: Settings) -> Repository:
    """
    Factory returning the configured repository.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository (standard library sqlite3)
    - mongo: MongoRepository (pymongo)
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("using sqlite store at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    if settings.persistence_backend == "mongo":
        from .mongo import MongoRepository

        logger.info("using mongo store")
        return MongoRepository.from_uri(
            settings.mongo_uri,
            db_name=settings.mongo_db_name,
            timeout_ms=settings.mongo_timeout_ms,
        )
    logger.info("using in-memory store")
    return InMemoryRepository()
