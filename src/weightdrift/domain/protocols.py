"""Protocol interfaces for weightdrift components."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

from weightdrift.domain.models import Pallet


class BenchmarkRunner(Protocol):
    """Interface for running the benchmarking tool for one pallet."""

    def run(self, pallet: Pallet) -> Iterator[str]:
        """Launch the tool and yield its output lines as they arrive."""
        ...


class Publisher(Protocol):
    """Interface for committing and pushing patched files."""

    def publish(self, files: list[Path]) -> bool:
        """Stage, commit and push *files*. Return True if a commit was made."""
        ...
