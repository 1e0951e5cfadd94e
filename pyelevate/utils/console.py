"""
Console output utilities for pyelevate using Rich.

User-facing output for CLI commands goes through this module; diagnostics
go through :mod:`pyelevate.utils.logger`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, Optional, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme
from rich.prompt import Confirm
from rich.console import Console

from pyelevate.models.package import SecurityState, SecurityStatus, VersionStatus
from pyelevate.models.simulation import RiskLevel

PYELEVATE_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
    }
)

_STATUS_COLORS: Dict[VersionStatus, str] = {
    VersionStatus.VULNERABLE: "bold red",
    VersionStatus.ERROR: "red",
    VersionStatus.MAJOR: "red",
    VersionStatus.MINOR: "yellow",
    VersionStatus.PRERELEASE: "magenta",
    VersionStatus.PATCH: "green",
    VersionStatus.UNKNOWN: "dim",
    VersionStatus.UP_TO_DATE: "green",
}

_RISK_COLORS: Dict[RiskLevel, str] = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return the process-wide Rich console, creating it on first use."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=PYELEVATE_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the console so the next use re-reads ``NO_COLOR``/``CI``."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    return _get_console()


# ---------------------------------------------------------------------------
# Status messages
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _get_console().print(f"{prefix} {message}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console().print(f"{prefix} {message}", style="error", markup=False)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console().print(f"{prefix} {message}", style="warning", markup=False)


def print_info(message: str) -> None:
    _get_console().print(message, style="info")


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    rows: Sequence[Sequence[str]],
    *,
    headers: Sequence[str],
    title: Optional[str] = None,
    caption: Optional[str] = None,
) -> None:
    """Render rows of Rich-markup strings as a table.

    Nothing is printed when ``rows`` is empty.
    """
    if not rows:
        return

    table = Table(title=title, caption=caption, header_style="bold")
    for header in headers:
        table.add_column(header, overflow="fold")
    for row in rows:
        table.add_row(*row)

    _get_console().print(table)


def print_report(text: str, *, title: Optional[str] = None) -> None:
    """Print a preformatted text block, boxed when a title is given."""
    if title:
        _get_console().print(Panel(text, title=title, expand=False))
    else:
        _get_console().print(text, markup=False)


def print_stats(stats: Dict[str, Any]) -> None:
    """Print ``label: value`` lines with aligned values."""
    width = max((len(label) for label in stats), default=0)
    for label, value in stats.items():
        _get_console().print(f"{label + ':':<{width + 2}}{value}")


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question; Ctrl+C or EOF answers no."""
    try:
        return Confirm.ask(message, default=default, console=_get_console())
    except (KeyboardInterrupt, EOFError):
        _get_console().print()
        return False


# ---------------------------------------------------------------------------
# Markup helpers
# ---------------------------------------------------------------------------


def colorize_status(status: VersionStatus) -> str:
    """Rich markup for a status label."""
    color = _STATUS_COLORS[status]
    return f"[{color}]{status.label}[/{color}]"


def colorize_risk(risk: RiskLevel) -> str:
    color = _RISK_COLORS[risk]
    return f"[{color}]{risk.value}[/{color}]"


def colorize_security(security: SecurityStatus) -> str:
    if security.is_vulnerable:
        return f"[bold red]{security}[/bold red]"
    if security.state is SecurityState.SAFE:
        return f"[green]{security}[/green]"
    return f"[dim]{security}[/dim]"

