"""Rich Console factory and theme for appvalidator output.

Consoles render into a StringIO buffer so formatters keep a plain
``-> str`` contract. Outside a terminal (tests, pipes) Rich drops colors.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

APP_THEME = Theme(
    {
        "av.ok": "bold green",
        "av.error": "bold red",
        "av.warning": "bold yellow",
        "av.op": "bold cyan",
        "av.key": "dim",
        "av.rule": "bold blue",
        "av.present": "green",
        "av.absent": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=APP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
