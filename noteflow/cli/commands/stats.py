"""
Statistics Command.
"""

from typing import Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from noteflow.cli.context import SESSION_OPTION, console, handle_errors, open_workspace
from noteflow.services.stats import compute_stats


def _counts_table(title: str, counts: dict[str, int]) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Count", justify="right")
    for key, count in counts.items():
        table.add_row(escape(key), str(count))
    return table


def stats(session: Optional[str] = SESSION_OPTION) -> None:
    """
    Show note statistics, archived notes included.
    """
    with handle_errors():
        workspace = open_workspace(session)
        result = compute_stats(
            workspace.notes.notes,
            workspace.notes.archived_notes,
            workspace.categories.list(),
        )

    console.print(Panel(
        f"[bold]{result.total}[/bold] notes\n"
        f"Todo items: {result.completed_todos}/{result.total_todos} done "
        f"({result.completion_percentage}%)",
        title="Statistics",
    ))
    console.print(_counts_table("By type", result.by_type))
    if result.by_category:
        console.print(_counts_table("By category", result.by_category))
    if result.by_month:
        console.print(_counts_table("By month", result.by_month))
