from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .models import TaskEntity
from .repositories import Repository, update_fields
from .schemas import TaskCreate, TaskUpdate
from .utils import as_utc, new_task_id, utcnow


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    done: str = "done"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.
    """

    driver = "sqlite"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY NOT NULL,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.done} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "done": bool(row[_COLS.done]),
            "created_at": as_utc(datetime.fromisoformat(row[_COLS.created_at])),
            "updated_at": as_utc(datetime.fromisoformat(row[_COLS.updated_at])),
        }

    def _select(self, conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()

    def create(self, data: TaskCreate) -> TaskEntity:
        now = utcnow().isoformat()
        task_id = new_task_id()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.done},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?)
                """,
                (task_id, data.title or "", 1 if data.done else 0, now, now),
            )
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        fields = update_fields(data)
        with self._conn() as conn:
            if self._select(conn, task_id) is None:
                return None

            assignments = [f"{_COLS.updated_at} = ?"]
            params: list = [utcnow().isoformat()]
            if "title" in fields:
                assignments.append(f"{_COLS.title} = ?")
                params.append(fields["title"])
            if "done" in fields:
                assignments.append(f"{_COLS.done} = ?")
                params.append(1 if fields["done"] else 0)

            conn.execute(
                f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                [*params, task_id],
            )
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount == 1

    def list(self) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC, rowid DESC"
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def ping(self) -> None:
        with self._conn() as conn:
            conn.execute("SELECT 1").fetchone()
