from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection

from .models import TaskEntity
from .repositories import Repository, update_fields
from .schemas import TaskCreate, TaskUpdate
from .utils import as_utc, new_task_id, utcnow

logger = logging.getLogger(__name__)

_COLLECTION = "tasks"
# never hand the store's internal identifier to callers
_PROJECTION = {"_id": False}


def _bson_now() -> datetime:
    """Current UTC time truncated to the millisecond precision BSON dates keep."""
    now = utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class MongoRepository(Repository):
    """
    Document store repository backed by MongoDB.

    Documents carry the public fields under their wire names
    (id, title, done, createdAt, updatedAt); `id` has a unique index.
    """

    driver = "mongo"

    def __init__(self, client: Any, db_name: str = "tasks") -> None:
        self._client = client
        self._collection: Collection = client[db_name][_COLLECTION]
        self._indexes_ready = False

    def _ensure_indexes(self) -> None:
        # runs on the first successful ping, never in the constructor
        if self._indexes_ready:
            return
        self._collection.create_index([("id", ASCENDING)], unique=True)
        self._collection.create_index([("createdAt", DESCENDING)])
        self._indexes_ready = True

    @classmethod
    def from_uri(cls, uri: str, db_name: str = "tasks", timeout_ms: int = 5000) -> "MongoRepository":
        """Connect with a bounded server selection timeout so startup fails fast."""
        client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        database = client.get_default_database(default=db_name)
        logger.info("mongodb client created for database %s", database.name)
        return cls(client, db_name=database.name)

    def _doc_to_entity(self, doc: Mapping[str, Any]) -> TaskEntity:
        return {
            "id": str(doc["id"]),
            "title": str(doc["title"]),
            "done": bool(doc.get("done", False)),
            "created_at": as_utc(doc["createdAt"]),
            "updated_at": as_utc(doc["updatedAt"]),
        }

    def create(self, data: TaskCreate) -> TaskEntity:
        now = _bson_now()
        doc = {
            "id": new_task_id(),
            "title": data.title or "",
            "done": bool(data.done),
            "createdAt": now,
            "updatedAt": now,
        }
        # insert_one adds _id to the dict it is given
        self._collection.insert_one(dict(doc))
        return self._doc_to_entity(doc)

    def get(self, task_id: str) -> Optional[TaskEntity]:
        doc = self._collection.find_one({"id": task_id}, _PROJECTION)
        return self._doc_to_entity(doc) if doc else None

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        changes = dict(update_fields(data))
        changes["updatedAt"] = _bson_now()
        doc = self._collection.find_one_and_update(
            {"id": task_id},
            {"$set": changes},
            projection=_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return self._doc_to_entity(doc) if doc else None

    def delete(self, task_id: str) -> bool:
        result = self._collection.delete_one({"id": task_id})
        return result.deleted_count == 1

    def list(self) -> List[TaskEntity]:
        cursor = self._collection.find({}, _PROJECTION).sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
        return [self._doc_to_entity(doc) for doc in cursor]

    def ping(self) -> None:
        self._client.admin.command("ping")
        self._ensure_indexes()

    def close(self) -> None:
        self._client.close()
