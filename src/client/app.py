"""
Interactive terminal client.

Renders the task screen with rich, reads one short command per line and
maps it onto `TaskController` operations. Blocking prompts run in a worker
thread so the event loop stays free while waiting for input.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from .api import TaskApiClient
from .logging_setup import setup_client_logging
from .render import HELP, build_screen
from .settings import ClientSettings, get_client_settings
from .state import Task, TaskController

Ask = Callable[[str], Awaitable[str]]


class TerminalUI:
    """Console-backed implementations of the controller's UI ports."""

    def __init__(self, console: Console) -> None:
        self.console = console

    async def ask(self, prompt: str) -> str:
        return await asyncio.to_thread(Prompt.ask, prompt, console=self.console, default="", show_default=False)

    async def confirm(self, message: str) -> bool:
        return await asyncio.to_thread(Confirm.ask, escape(message), console=self.console, default=False)

    async def alert(self, message: str) -> None:
        self.console.print(Panel(Text(message), border_style="green"))
        await asyncio.to_thread(self.console.input, "[dim]Press Enter to continue[/dim]")


def _task_at(controller: TaskController, arg: str) -> Optional[Task]:
    tasks = controller.state.tasks
    try:
        index = int(arg)
    except ValueError:
        controller.state.error = f"not a task number: {arg!r}"
        return None
    if not 1 <= index <= len(tasks):
        controller.state.error = f"no task #{index}"
        return None
    return tasks[index - 1]


async def handle_command(controller: TaskController, line: str, ask: Ask) -> bool:
    """
    Run one command line against the controller.

    Returns False when the user asked to quit.
    """
    cmd, _, arg = line.strip().partition(" ")
    cmd = cmd.lower()
    arg = arg.strip()

    if cmd in {"q", "quit", "exit"}:
        return False
    if cmd == "":
        return True
    if cmd in {"a", "add"}:
        controller.set_draft(arg)
        await controller.create()
    elif cmd in {"r", "reload"}:
        await controller.load()
    elif cmd in {"h", "health"}:
        await controller.health()
    elif cmd in {"t", "toggle", "d", "delete", "e", "edit"}:
        task = _task_at(controller, arg)
        if task is None:
            return True
        if cmd in {"t", "toggle"}:
            await controller.toggle(task)
        elif cmd in {"d", "delete"}:
            await controller.remove(task)
        elif controller.start_edit(task):
            new_title = await ask(f"New title for {escape(repr(task['title']))} (blank to cancel)")
            if new_title.strip():
                controller.set_edit_draft(new_title)
                await controller.save_edit()
            else:
                controller.cancel_edit()
    else:
        controller.state.error = f"unknown command: {cmd}"
    return True


async def run_client(settings: ClientSettings, console: Optional[Console] = None) -> None:
    console = console or Console()
    ui = TerminalUI(console)
    api = TaskApiClient.from_settings(settings)
    controller = TaskController(api, confirm=ui.confirm, alert=ui.alert)
    try:
        await controller.load()
        while True:
            console.clear()
            console.print(build_screen(controller.state, settings.api_url))
            console.print(HELP, style="dim")
            line = await ui.ask(">")
            if not await handle_command(controller, line, ui.ask):
                break
    finally:
        await api.aclose()


# PUBLIC_INTERFACE
def main() -> None:
    """Console entry point for the terminal client."""
    settings = get_client_settings()
    setup_client_logging(log_dir=settings.log_dir)
    try:
        asyncio.run(run_client(settings))
    except (KeyboardInterrupt, EOFError):
        pass
