"""
Terminal output for peerbump commands, rendered with Rich.

Only the CLI layer writes here. Engine code reports through
:mod:`peerbump.utils.logger` instead, so analysis stays silent when used
as a library.

Colour is decided once per console: it is off when ``NO_COLOR`` or ``CI``
is set, or when stdout is not a terminal. Call :func:`reconfigure_console`
after changing any of those.
"""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

PEERBUMP_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
    }
)

# Rich colour per label returned by ``version_utils.get_update_type``.
UPDATE_TYPE_COLORS: Dict[str, str] = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
    "new": "cyan",
    "downgrade": "red",
    "update": "yellow",
}

RowStyler = Callable[[Dict[str, Any]], Optional[str]]


def _should_use_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return bool(sys.stdout.isatty())
    except (AttributeError, OSError):
        return False


@lru_cache(maxsize=1)
def _get_console() -> Console:
    color = _should_use_color()
    return Console(theme=PEERBUMP_THEME, no_color=not color, highlight=color)


def reconfigure_console() -> None:
    """Forget the cached console; the next write builds a fresh one."""
    _get_console.cache_clear()


def get_raw_console() -> Console:
    """The shared Rich console, for output the helpers below do not cover."""
    return _get_console()


# ---------------------------------------------------------------------------
# One-line status messages
# ---------------------------------------------------------------------------


def _status(style: str, prefix: str, message: str) -> None:
    _get_console().print(f"{prefix} {message}", style=style)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _status("success", prefix, message)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _status("error", prefix, message)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _status("warning", prefix, message)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _add_column(table: Table, header: str, settings: Dict[str, Any]) -> None:
    table.add_column(
        header,
        style=settings.get("style"),
        justify=settings.get("justify", "default"),
        no_wrap=settings.get("no_wrap", False),
        overflow=settings.get("overflow", "fold"),
    )


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[RowStyler] = None,
) -> None:
    """Print ``data`` as a table, one dictionary per row.

    Args:
        data: Rows to show. An empty list prints nothing.
        headers: Column order; the first row's keys when omitted. Cells
            missing from a row are left blank.
        title: Heading shown above the table.
        caption: Text shown below the table.
        column_styles: Rich ``style``, ``justify``, ``no_wrap`` and
            ``overflow`` per column header.
        row_styler: Called with each row, returns a Rich style or None.
    """
    if not data:
        return

    columns = headers if headers is not None else list(data[0])
    styles = column_styles or {}

    table = Table(show_header=True, header_style="bold")
    for header in columns:
        _add_column(table, header, styles.get(header, {}))

    for row in data:
        table.add_row(
            *(str(row.get(header, "")) for header in columns),
            style=row_styler(row) if row_styler is not None else None,
        )

    # Rich wraps a table title to the table width; print headings unwrapped.
    console = _get_console()
    if title:
        console.print(title, style="bold", soft_wrap=True)
    console.print(table)
    if caption:
        console.print(caption, style="dim", soft_wrap=True)


def colorize_update_type(update_type: str) -> str:
    """Wrap an update label in Rich colour markup; unknown labels pass through."""
    color = UPDATE_TYPE_COLORS.get(update_type.lower())
    if color is None:
        return update_type
    return f"[{color}]{update_type}[/{color}]"
