"""Rich Console factory and theme for mdctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

MD_THEME = Theme(
    {
        "md.ok": "bold green",
        "md.error": "bold red",
        "md.warning": "bold yellow",
        "md.skip": "dim",
        "md.op": "bold cyan",
        "md.key": "dim",
        "md.id": "bold blue",
        "md.path": "dim",
        "md.count": "magenta",
    }
)

_ACTION_STYLES: dict[str, str] = {
    "migrated": "md.ok",
    "updated": "md.ok",
    "would_migrate": "md.op",
    "rolled_back": "md.ok",
    "skipped": "md.skip",
    "failed": "md.error",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=MD_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_action(action: str) -> str:
    """Return the Rich style name for a migration result action."""
    return _ACTION_STYLES.get(action, "")
