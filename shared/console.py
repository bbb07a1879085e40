"""
Execview Console Interface
===========================

Rich-powered console abstraction used by the command-line front end:
section rules, severity-coloured messages and table printing with one
consistent theme.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_EXECVIEW_THEME = Theme(
    {
        "execview.section": "bold bright_magenta",
        "execview.error": "bold red",
        "execview.info": "bold bright_blue",
    }
)


class ExecviewConsole:
    """Themed wrapper around :class:`rich.console.Console`.

    Usage::

        con = ExecviewConsole()
        con.section("Segments")
        con.error("Decoding failed")
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        color: bool = True,
        width: int | None = None,
    ) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output.
            record: Keep output for :meth:`export_text`.
            color:  Emit ANSI colour; ``False`` forces plain text.
            width:  Fixed render width, ``None`` to detect the terminal.
        """
        self._console = Console(
            theme=_EXECVIEW_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
            no_color=not color,
            width=width,
        )

    @property
    def rich(self) -> Console:
        """Underlying Rich console."""
        return self._console

    def section(self, title: str) -> None:
        """Print a section rule."""
        self._console.rule(f"  {title}  ", style="execview.section", characters="─")

    def error(self, message: str) -> None:
        self._console.print(f"[execview.error]ERROR:[/execview.error] {escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[execview.info]INFO:[/execview.info] {escape(message)}")

    def table(
        self,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        title: str = "",
        justify_right: Sequence[str] = (),
    ) -> None:
        """Print a simple table.

        Args:
            columns: Column headers.
            rows: Row values, converted with :func:`str`.
            title: Optional table title.
            justify_right: Columns to right-align (numeric data).
        """
        tbl = Table(
            title=title or None,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for col in columns:
            tbl.add_column(col, justify="right" if col in justify_right else "left")
        for row in rows:
            tbl.add_row(*(Text(str(v)) for v in row))
        self._console.print(tbl)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Return recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
