"""
CLI utility helpers -- consoles and failure reporting.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from tracespine.core.errors import LoadError

console = Console()
err_console = Console(stderr=True)


def print_load_error(error: LoadError) -> None:
    """Print a load failure and each collected ``(path, error)`` pair."""
    err_console.print(f"[bold red]Error[/bold red]: {escape(error.message)}", soft_wrap=True)
    if error.context.path:
        err_console.print(f"  [dim]at[/dim] {escape(error.context.path)}", soft_wrap=True)
    for path, failure in error.failures:
        err_console.print(f"  [red]-[/red] {escape(str(path))}: {escape(str(failure))}", soft_wrap=True)
