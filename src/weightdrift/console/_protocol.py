"""weightdrift.console._protocol -- ConsoleProtocol definition."""

from __future__ import annotations

from typing import Protocol


class ConsoleProtocol(Protocol):
    """Terminal output protocol.

    **General messages**::

        console.info("Building runtime")
        console.success("'drand' within tolerance.")
        console.warning("No modifications applied for 'drand'.")
        console.error("dispatch file missing: pallets/drand/src/lib.rs")

    **Structured output** -- tables, key-value displays, panels::

        console.table(["Extrinsic", "Drift"], [["register", "3.1%"]], title="drand")
        console.kv({"Pallets": "4", "Threshold": "15%"})

    **Run lifecycle** -- used by the scheduler::

        console.pallet_header("drand", 1, 3)
        console.stream_line("Extrinsic: \\"write_pulse\\" ...")
        console.failure_list(["[write_pulse] reads mismatch (code=2, measured=3)"])
    """

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...

    # -- Structured output --------------------------------------------------

    def panel(self, content: str, *, title: str = "", style: str = "") -> None:
        """Display *content* in a bordered panel."""
        ...

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        """Display a table with *headers* and *rows*."""
        ...

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...

    # -- Run lifecycle ------------------------------------------------------

    def pallet_header(self, pallet: str, attempt: int, max_attempts: int) -> None:
        """Display the banner at the start of a benchmark attempt."""
        ...

    def step_detail(self, message: str) -> None:
        """Display an indented detail line."""
        ...

    def stream_line(self, line: str) -> None:
        """Echo one raw line of benchmark output."""
        ...

    def failure_list(self, failures: list[str]) -> None:
        """Display the mismatches of a failed attempt."""
        ...
