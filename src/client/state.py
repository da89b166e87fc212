"""
Client-side state machine for the task list.

Holds what the screen shows (tasks, composer draft, edit row, error) and the
single busy gate that serializes mutations. Every successful mutation is
followed by a full reload; the client never patches its list locally.

Transitions per mutation:

    IDLE --(start)--> SUBMITTING --(ok: reload)--> IDLE
                                 --(fail: record error)--> IDLE
"""

from __future__ import annotations

import enum
import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Union

from .api import ApiError, TaskApiClient

logger = logging.getLogger(__name__)

Task = Dict[str, Any]

# UI ports. Either plain or async callables are accepted.
Confirm = Callable[[str], Union[bool, Awaitable[bool]]]
Alert = Callable[[str], Union[None, Awaitable[None]]]


class Phase(enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


@dataclass
class ClientState:
    tasks: List[Task] = field(default_factory=list)
    draft: str = ""
    editing_id: Optional[str] = None
    edit_draft: str = ""
    phase: Phase = Phase.IDLE
    error: str = ""

    @property
    def busy(self) -> bool:
        return self.phase is Phase.SUBMITTING

    @property
    def editing(self) -> bool:
        return self.editing_id is not None

    def can_create(self) -> bool:
        return not self.busy and bool(self.draft.strip())

    def can_save_edit(self) -> bool:
        return not self.busy and self.editing and bool(self.edit_draft.strip())


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class TaskController:
    """
    Operations the UI can trigger. Mutations return True when a request was
    issued and succeeded, False when refused by a guard or when it failed
    (the message is then in `state.error`).
    """

    def __init__(
        self,
        api: TaskApiClient,
        *,
        confirm: Confirm,
        alert: Alert,
        state: Optional[ClientState] = None,
    ) -> None:
        self.api = api
        self.state = state or ClientState()
        self._confirm = confirm
        self._alert = alert

    @asynccontextmanager
    async def _submitting(self) -> AsyncIterator[None]:
        self.state.phase = Phase.SUBMITTING
        self.state.error = ""
        try:
            yield
        finally:
            self.state.phase = Phase.IDLE

    async def load(self) -> bool:
        """Replace the list with the server's; on failure keep the old list."""
        self.state.error = ""
        try:
            self.state.tasks = await self.api.list_tasks()
        except ApiError as exc:
            logger.debug("reload failed: %s", exc.message)
            self.state.error = exc.message
            return False
        return True

    def set_draft(self, text: str) -> None:
        self.state.draft = text

    async def create(self) -> bool:
        title = self.state.draft.strip()
        if not title or self.state.busy:
            return False
        async with self._submitting():
            try:
                await self.api.create_task(title, done=False)
            except ApiError as exc:
                self.state.error = exc.message
                return False
            self.state.draft = ""
            await self.load()
        return True

    async def toggle(self, task: Task) -> bool:
        if self.state.editing or self.state.busy:
            return False
        async with self._submitting():
            try:
                await self.api.update_task(task["id"], done=not task.get("done"))
            except ApiError as exc:
                self.state.error = exc.message
                return False
            await self.load()
        return True

    async def remove(self, task: Task) -> bool:
        if self.state.busy:
            return False
        if not await _resolve(self._confirm(f'Delete "{task["title"]}"?')):
            return False
        async with self._submitting():
            try:
                await self.api.delete_task(task["id"])
            except ApiError as exc:
                self.state.error = exc.message
                return False
            await self.load()
        return True

    def start_edit(self, task: Task) -> bool:
        if self.state.busy:
            return False
        self.state.editing_id = task["id"]
        self.state.edit_draft = task["title"]
        return True

    def set_edit_draft(self, text: str) -> None:
        self.state.edit_draft = text

    def cancel_edit(self) -> bool:
        if self.state.busy:
            return False
        self._clear_edit()
        return True

    def _clear_edit(self) -> None:
        self.state.editing_id = None
        self.state.edit_draft = ""

    async def save_edit(self) -> bool:
        task_id = self.state.editing_id
        title = self.state.edit_draft.strip()
        if task_id is None or not title or self.state.busy:
            return False
        async with self._submitting():
            try:
                await self.api.update_task(task_id, title=title)
            except ApiError as exc:
                self.state.error = exc.message
                return False
            self._clear_edit()
            await self.load()
        return True

    async def health(self) -> None:
        """Check the API health and hand the result to the alert port."""
        try:
            report = await self.api.health()
        except ApiError as exc:
            await _resolve(self._alert(exc.message))
            return
        uptime = round(float(report.get("uptime", 0)))
        await _resolve(self._alert(f"API OK\nDriver: {report.get('driver')}\nUptime: {uptime}s"))
