"""Subprocess glue for building the runtime and running benchmarks."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from weightdrift.console import console
from weightdrift.domain.errors import BenchmarkToolError
from weightdrift.domain.models import BenchmarkSettings, Pallet

logger = logging.getLogger("weightdrift.runner")

TAIL_LINES = 20


def build_runtime(command: tuple[str, ...], cwd: Path) -> None:
    """Run the runtime build command once. Raises on non-zero exit."""
    if not command:
        return
    logger.info("Building runtime: %s", " ".join(command))
    try:
        result = subprocess.run(list(command), cwd=cwd, check=False)
    except OSError as exc:
        raise BenchmarkToolError(f"cannot run build command {command[0]!r}: {exc}") from exc
    if result.returncode != 0:
        raise BenchmarkToolError(f"build failed with exit code {result.returncode}")


def benchmark_command(settings: BenchmarkSettings, pallet: Pallet) -> list[str]:
    """Argument vector for benchmarking every extrinsic of *pallet*."""
    return [
        settings.binary,
        "benchmark",
        "pallet",
        "--runtime",
        settings.runtime,
        "--genesis-builder=runtime",
        f"--genesis-builder-preset={settings.genesis_preset}",
        f"--wasm-execution={settings.wasm_execution}",
        "--pallet",
        pallet.benchmark_module,
        "--extrinsic",
        "*",
        "--steps",
        str(settings.steps),
        "--repeat",
        str(settings.repeat),
    ]


class SubprocessBenchmarkRunner:
    """BenchmarkRunner implementation that shells out to the node binary.

    Parameters
    ----------
    settings:
        Fixed benchmark arguments.
    cwd:
        Working directory for the binary (the repository root).
    echo:
        When True every output line is echoed to the console as it arrives.

    """

    def __init__(self, settings: BenchmarkSettings, cwd: Path, *, echo: bool = True) -> None:
        self._settings = settings
        self._cwd = cwd
        self._echo = echo

    def run(self, pallet: Pallet) -> Iterator[str]:
        """Yield output lines while teeing them into a capture file.

        The capture file is deleted on every exit path, including when the
        consumer stops iterating early.

        Raises:
            BenchmarkToolError: The binary cannot be launched or exits non-zero.
        """
        cmd = benchmark_command(self._settings, pallet)
        logger.info("Running %s", " ".join(cmd))
        fd, capture_name = tempfile.mkstemp(prefix=f"bench-{pallet.name}-", suffix=".log")
        capture = Path(capture_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as sink:
                try:
                    proc = subprocess.Popen(
                        cmd,
                        cwd=self._cwd,
                        stdout=subprocess.PIPE,
                        stderr=subprocess.STDOUT,
                        text=True,
                        encoding="utf-8",
                        errors="replace",
                        bufsize=1,
                    )
                except OSError as exc:
                    raise BenchmarkToolError(f"cannot launch {cmd[0]!r}: {exc}") from exc
                assert proc.stdout is not None
                try:
                    for raw in proc.stdout:
                        line = raw.rstrip("\n")
                        sink.write(raw)
                        if self._echo:
                            console.stream_line(line)
                        yield line
                finally:
                    # No cancellation: drain whatever is left and let the tool finish.
                    for raw in proc.stdout:
                        sink.write(raw)
                    proc.stdout.close()
                    proc.wait()
            if proc.returncode != 0:
                tail = _tail(capture)
                raise BenchmarkToolError(
                    f"benchmark for '{pallet.name}' exited with code {proc.returncode}",
                    output_tail=tail,
                )
        finally:
            capture.unlink(missing_ok=True)
            logger.debug("Removed capture file %s", capture)


def _tail(path: Path, count: int = TAIL_LINES) -> str:
    with path.open(encoding="utf-8", errors="replace") as handle:
        return "".join(deque(handle, maxlen=count))
