"""Shared pytest fixtures for weightdrift tests.

Provides a sample dispatch file, a benchmark output builder, and fake
BenchmarkRunner / Publisher implementations.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from weightdrift.domain.models import Pallet, PatchPolicy, RunConfig

DISPATCH_SOURCE = """\
#[pallet::call]
impl<T: Config> Pallet<T> {
    #[pallet::call_index(0)]
    #[pallet::weight((Weight::from_parts(10_000_000, 0)
    .saturating_add(T::DbWeight::get().reads(4104_u64))
    .saturating_add(T::DbWeight::get().writes(2_u64)), DispatchClass::Normal, Pays::No))]
    pub fn set_weights(
        origin: OriginFor<T>,
        netuid: u16,
    ) -> DispatchResult {
        Self::do_set_weights(origin, netuid)
    }

    #[pallet::call_index(1)]
    #[pallet::weight(Weight::from_parts(1_000_000_000, 0).saturating_add(T::DbWeight::get().reads_writes(2, 1)))]
    pub fn do_thing(origin: OriginFor<T>) -> DispatchResult {
        ensure_signed(origin)?;
        Ok(())
    }

    #[pallet::call_index(2)]
    pub fn bare(origin: OriginFor<T>) -> DispatchResult {
        Ok(())
    }
}
"""


def bench_block(
    name: str, time_us: float | None, reads: int | None, writes: int | None
) -> list[str]:
    """Benchmark output lines for one extrinsic, as the node binary prints them."""
    lines = [
        f'Pallet: "pallet_demo", Extrinsic: "{name}", Lowest values: [], '
        "Highest values: [], Steps: 50, Repeat: 5",
        "Raw Storage Info",
        "========",
        "Median Slopes Analysis",
        "========",
        "-- Extrinsic Time --",
        "",
        "Model:",
    ]
    if time_us is not None:
        lines.append(f"Time ~=    {time_us}")
        lines.append("              µs")
    lines.append("")
    if reads is not None:
        lines.append(f"Reads = {reads}")
    if writes is not None:
        lines.append(f"Writes = {writes}")
    lines.append("Recorded proof Size = 0")
    return lines


def bench_output(*blocks: tuple[str, float | None, int | None, int | None]) -> list[str]:
    lines: list[str] = []
    for block in blocks:
        lines.extend(bench_block(*block))
    return lines


class FakeRunner:
    """BenchmarkRunner returning one canned output per call."""

    def __init__(self, outputs: list[list[str]]) -> None:
        self._outputs = list(outputs)
        self.calls: list[str] = []

    def run(self, pallet: Pallet) -> Iterator[str]:
        self.calls.append(pallet.name)
        output = self._outputs.pop(0) if len(self._outputs) > 1 else self._outputs[0]
        yield from output


class FakePublisher:
    """Publisher recording what it was asked to publish."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.published: list[list[Path]] = []

    def publish(self, files: list[Path]) -> bool:
        self.published.append(list(files))
        return self.result


@pytest.fixture()
def dispatch_file(tmp_path: Path) -> Path:
    """A dispatch file containing set_weights, do_thing and bare."""
    path = tmp_path / "pallets" / "demo" / "src" / "lib.rs"
    path.parent.mkdir(parents=True)
    path.write_text(DISPATCH_SOURCE, encoding="utf-8")
    return path


@pytest.fixture()
def make_config(tmp_path: Path, dispatch_file: Path) -> Any:
    """Factory for RunConfig pointing at the sample dispatch file."""

    def _factory(**overrides: Any) -> RunConfig:
        base: dict[str, Any] = {
            "root": tmp_path,
            "pallets": ("demo",),
            "dispatch_paths": {"demo": dispatch_file},
            "threshold": 15,
            "max_retries": 3,
            "auto_commit": False,
            "patch_policy": PatchPolicy.STOP,
        }
        base.update(overrides)
        return RunConfig(**base)

    return _factory


@pytest.fixture()
def make_output() -> Any:
    """Builder for benchmark output: ``make_output(("name", time_us, reads, writes), ...)``."""
    return bench_output


@pytest.fixture()
def make_runner() -> Any:
    """Factory for FakeRunner."""

    def _factory(*outputs: list[str]) -> FakeRunner:
        return FakeRunner(list(outputs))

    return _factory


@pytest.fixture()
def publisher() -> FakePublisher:
    return FakePublisher()
