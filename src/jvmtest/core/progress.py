"""Terminal output for the jvmtest CLI.

Everything goes to stderr so that ``--json`` output on stdout stays parseable.
While a run is on a spinner, structlog console handlers are muted; when
stderr is not a terminal the spinner degrades to a single line.

Usage::

    from jvmtest.core.progress import status, spinner

    status("Resolving build tool...")
    status("3 passed", style="success")  # ✓ 3 passed

    with spinner("Running pkg.MySpec"):
        await run()
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from jvmtest.testing.coverage import CoverageReport
    from jvmtest.testing.session import RunSession

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

_STATE_STYLES = {
    "enqueued": "dim",
    "started": "cyan",
    "passed": "green",
    "failed": "red",
    "skipped": "yellow",
    "errored": "red",
}

_suppress_console_logs = threading.local()


def is_console_suppressed() -> bool:
    """Check if console logging is currently suppressed."""
    return getattr(_suppress_console_logs, "active", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Suppress structlog console output; file handlers still receive logs."""
    _suppress_console_logs.active = True
    try:
        yield
    finally:
        _suppress_console_logs.active = False


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from jvmtest.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 test" / "3 tests" style counts."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


@contextmanager
def spinner(message: str, *, indent: int = 0) -> Iterator[None]:
    """Spinner with log suppression; plain message when not a TTY."""
    padding = " " * indent
    if _is_tty():
        with (
            suppress_console_logs(),
            _console.status(f"{padding}[cyan]{message}[/cyan]", spinner="dots"),
        ):
            yield
    else:
        _console.print(f"{padding}{message}...")
        yield


def render_session(session: RunSession, *, console: Console | None = None) -> None:
    """Print a per-node result table for a finished run."""
    out = console or _console
    table = Table(title=f"Run {session.run_id}", title_justify="left")
    table.add_column("Test")
    table.add_column("State")
    table.add_column("Duration", justify="right")
    table.add_column("Message", overflow="fold")

    for node_id, record in session.records():
        state = record.state.value
        duration = f"{record.duration_ms} ms" if record.duration_ms is not None else ""
        table.add_row(
            node_id,
            f"[{_STATE_STYLES.get(state, 'none')}]{state}[/]",
            duration,
            (record.message or "").splitlines()[0] if record.message else "",
        )

    out.print(table)


def render_coverage(report: CoverageReport, *, console: Console | None = None) -> None:
    """Print a per-file line/branch coverage table."""
    out = console or _console
    table = Table(title=f"Coverage ({report.source_format})", title_justify="left")
    table.add_column("File", overflow="fold")
    table.add_column("Lines", justify="right")
    table.add_column("Branches", justify="right")

    for path in sorted(report.files):
        fc = report.files[path]
        branches = (
            f"{fc.branches_hit}/{fc.branches_found} ({fc.branch_rate:.0%})"
            if fc.branches_found
            else "-"
        )
        table.add_row(path, f"{fc.lines_hit}/{fc.lines_found} ({fc.line_rate:.0%})", branches)

    out.print(table)
