"""User-facing console feedback for report runs.

Design principles:
- One styled line per outcome, no spam
- Graceful degradation in non-TTY (CI, pipes): Rich drops the colors
- Structured events stay in the log; these lines are for people

Usage::

    from covreport.core.progress import status

    status("Wrote 3 source files to target/coveralls.json", style="success")
    status("https://coveralls.io/jobs/1", indent=2)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from covreport.core.logging import get_logger

    return get_logger("progress")


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status line to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{escape(message)}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 file" or "3 files"."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"
