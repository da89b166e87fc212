from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.client.api import ApiError


@dataclass
class FakeTaskApi:
    """
    In-memory stand-in for TaskApiClient.

    Records every call; `fail` makes the named operation raise ApiError;
    `gate` makes mutations wait until the event is set.
    """

    tasks: List[Dict[str, Any]] = field(default_factory=list)
    calls: List[tuple] = field(default_factory=list)
    fail: Dict[str, str] = field(default_factory=dict)
    gate: Optional[asyncio.Event] = None
    health_report: Dict[str, Any] = field(default_factory=lambda: {"ok": True, "driver": "memory", "uptime": 12.6})

    async def _maybe_fail(self, name: str) -> None:
        if self.gate is not None and name != "list_tasks":
            await self.gate.wait()
        if name in self.fail:
            raise ApiError(self.fail[name])

    async def list_tasks(self) -> List[Dict[str, Any]]:
        self.calls.append(("list_tasks",))
        await self._maybe_fail("list_tasks")
        return [dict(t) for t in self.tasks]

    async def create_task(self, title: str, done: bool = False) -> Dict[str, Any]:
        self.calls.append(("create_task", title, done))
        await self._maybe_fail("create_task")
        task = {"id": f"id-{len(self.tasks) + 1}", "title": title, "done": done}
        self.tasks.insert(0, task)
        return dict(task)

    async def update_task(self, task_id: str, *, title=None, done=None) -> Dict[str, Any]:
        self.calls.append(("update_task", task_id, title, done))
        await self._maybe_fail("update_task")
        for task in self.tasks:
            if task["id"] == task_id:
                if title is not None:
                    task["title"] = title
                if done is not None:
                    task["done"] = done
                return dict(task)
        raise ApiError("not found", status_code=404)

    async def delete_task(self, task_id: str) -> None:
        self.calls.append(("delete_task", task_id))
        await self._maybe_fail("delete_task")
        self.tasks = [t for t in self.tasks if t["id"] != task_id]

    async def health(self) -> Dict[str, Any]:
        self.calls.append(("health",))
        await self._maybe_fail("health")
        return dict(self.health_report)

    def names(self) -> List[str]:
        return [c[0] for c in self.calls]
