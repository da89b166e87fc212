"""Rich renderables for the task screen."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .state import ClientState


def build_tasks_table(state: ClientState) -> Table:
    """One row per task: index, checkbox, title and the row's mode."""

    table = Table(show_header=True, header_style="bold", expand=True, box=None)
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("", width=3, no_wrap=True)
    table.add_column("Title", ratio=1, overflow="ellipsis", no_wrap=True)
    table.add_column("", style="cyan", width=8, no_wrap=True)

    for index, task in enumerate(state.tasks, start=1):
        is_editing = state.editing_id == task["id"]
        check = Text("[x]" if task.get("done") else "[ ]")
        if is_editing:
            title = Text(state.edit_draft, style="bold")
            mode = "editing"
        else:
            title = Text(task["title"], style="strike dim" if task.get("done") else "")
            mode = ""
        table.add_row(str(index), check, title, mode)
    return table


def build_screen(state: ClientState, api_url: str) -> RenderableType:
    """The whole page: header, error line, list (or empty notice) and footer."""

    parts: list[RenderableType] = []
    if state.busy:
        parts.append(Text("working...", style="yellow"))
    if state.error:
        parts.append(Text(state.error, style="red"))
    if state.tasks:
        parts.append(build_tasks_table(state))
    else:
        parts.append(Text("No tasks yet.", style="dim"))
    parts.append(Text.assemble(("API: ", "dim"), (api_url, "dim cyan")))

    return Panel(Group(*parts), title=Text("Tasks", style="bold"), border_style="cyan")


HELP = (
    "a <title>  add      t <n>  toggle done   e <n>  edit\n"
    "d <n>      delete   r      reload        h      health\n"
    "q          quit"
)
