"""weightdrift.console._rich -- Rich-based backend.

Coloured, structured terminal output for interactive runs.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "blue",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "pallet": "bold cyan",
        "dim": "dim",
    }
)


class RichBackend:
    """ConsoleProtocol implementation backed by Rich."""

    def __init__(self) -> None:
        self._con = Console(theme=_THEME, highlight=False)

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        self._con.print(f"  {message}", style="info", markup=False)

    def success(self, message: str) -> None:
        self._con.print(f"  ✓ {message}", style="success", markup=False)

    def warning(self, message: str) -> None:
        self._con.print(f"  ⚠ {message}", style="warning", markup=False)

    def error(self, message: str) -> None:
        self._con.print(f"  ✗ {message}", style="error", markup=False)

    # -- Structured output --------------------------------------------------

    def panel(self, content: str, *, title: str = "", style: str = "") -> None:
        self._con.print(
            Panel(content, title=title or None, border_style=style or "dim"),
        )

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        t = Table(title=title or None, box=box.SIMPLE, show_edge=False, pad_edge=True)
        for h in headers:
            t.add_column(h)
        for r in rows:
            t.add_row(*(escape(c) for c in r))
        self._con.print(t)

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        t = Table(
            title=title or None,
            box=box.SIMPLE,
            show_header=False,
            show_edge=False,
            pad_edge=True,
        )
        t.add_column("Key", style="bold", justify="right")
        t.add_column("Value")
        for k, v in data.items():
            t.add_row(escape(k), escape(v))
        self._con.print(t)

    # -- Run lifecycle ------------------------------------------------------

    def pallet_header(self, pallet: str, attempt: int, max_attempts: int) -> None:
        self._con.print()
        self._con.print(
            Rule(
                f" Benchmarking [pallet]{escape(pallet)}[/] (attempt {attempt}/{max_attempts}) ",
                style="bold",
                align="left",
            ),
        )

    def step_detail(self, message: str) -> None:
        self._con.print(f"    {message}", style="dim", markup=False)

    def stream_line(self, line: str) -> None:
        # Console.out writes raw text without markup processing
        self._con.out(line, highlight=False, style="dim")

    def failure_list(self, failures: list[str]) -> None:
        for failure in failures:
            self._con.print(f"  [error]✗[/] {escape(failure)}", highlight=False)
