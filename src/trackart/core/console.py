"""Rich console helpers for CLI output.

One shared Console instance plus a renderer for the two-column count
tables printed after a scan or a reconciliation pass.
"""

from typing import Iterable

from rich.console import Console
from rich.table import Table

_console: Console | None = None


def get_console() -> Console:
    """Get or create the shared Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print using Rich Console with optional styling.

    Args:
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
    """
    get_console().print(message, style=style)


def build_count_table(title: str, rows: Iterable[tuple[str, int]]) -> Table:
    """Build a two-column table of labelled counts.

    Zero counts are rendered dim so the non-trivial rows stand out.
    """
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("label", style="bold")
    table.add_column("count", justify="right")
    for label, count in rows:
        table.add_row(label, str(count), style="dim" if count == 0 else None)
    return table


def print_count_table(title: str, rows: Iterable[tuple[str, int]]) -> None:
    """Print a count table on the shared console."""
    get_console().print(build_count_table(title, rows))
