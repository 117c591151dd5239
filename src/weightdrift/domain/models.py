"""Core data models for weightdrift.

Plain dataclasses and enums only; no imports outside the standard library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Drift reported when the declared weight is zero. Always exceeds any threshold.
SENTINEL_DRIFT = 99999.0

# Microseconds (benchmark output) to picoseconds (weight unit).
US_TO_PS = 1_000_000


class Axis(Enum):
    """Cost dimension compared between code and measurement."""

    READS = "reads"
    WRITES = "writes"
    WEIGHT = "weight"


class PatchPolicy(Enum):
    """What to do with a pallet after its literals have been patched."""

    STOP = "stop"
    REVERIFY = "reverify"


class PalletStatus(Enum):
    """Final status of a pallet within a run."""

    PASSED = "passed"
    PATCHED = "patched"
    UNCHANGED = "unchanged"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Configuration types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pallet:
    """A benchmarked pallet and the file declaring its weights."""

    name: str
    dispatch_path: Path
    module: str = ""

    @property
    def benchmark_module(self) -> str:
        return self.module or f"pallet_{self.name}"


@dataclass(frozen=True)
class BenchmarkSettings:
    """Fixed arguments passed to the benchmarking binary."""

    binary: str = "./target/production/node-subtensor"
    runtime: str = (
        "target/production/wbuild/node-subtensor-runtime/"
        "node_subtensor_runtime.compact.compressed.wasm"
    )
    genesis_preset: str = "benchmark"
    wasm_execution: str = "compiled"
    steps: int = 50
    repeat: int = 5


@dataclass(frozen=True)
class GitSettings:
    """Identity and target used when publishing patched files."""

    remote: str = "origin"
    user_name: str = "github-actions[bot]"
    user_email: str = "github-actions[bot]@users.noreply.github.com"
    commit_message: str = "chore: auto-update benchmark weights"


@dataclass(frozen=True)
class RunConfig:
    """Settings fixed for the whole run."""

    root: Path
    pallets: tuple[str, ...]
    dispatch_paths: dict[str, Path]
    modules: dict[str, str] = field(default_factory=dict)
    threshold: int = 15
    max_retries: int = 3
    auto_commit: bool = False
    patch_policy: PatchPolicy = PatchPolicy.STOP
    benchmark: BenchmarkSettings = field(default_factory=BenchmarkSettings)
    build_command: tuple[str, ...] = ()
    git: GitSettings = field(default_factory=GitSettings)


# ---------------------------------------------------------------------------
# Measurement and evaluation types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExtrinsicRecord:
    """Measurements collected for one extrinsic from benchmark output.

    Fields stay ``None`` until the corresponding output line is seen.
    """

    name: str
    time_us: float | None = None
    reads: int | None = None
    writes: int | None = None

    @property
    def is_complete(self) -> bool:
        return self.time_us is not None and self.reads is not None and self.writes is not None

    @property
    def missing_fields(self) -> tuple[str, ...]:
        missing = []
        if self.time_us is None:
            missing.append("time")
        if self.reads is None:
            missing.append("reads")
        if self.writes is None:
            missing.append("writes")
        return tuple(missing)


@dataclass(frozen=True)
class CodeLiteral:
    """Weight, reads and writes declared in source for one function."""

    weight: int = 0
    reads: int = 0
    writes: int = 0


@dataclass(frozen=True)
class Mismatch:
    """A single axis on which measurement and declaration disagree."""

    extrinsic: str
    axis: Axis
    declared: int
    measured: int
    drift: float | None = None

    @property
    def reason(self) -> str:
        if self.axis is Axis.WEIGHT:
            return (
                f"[{self.extrinsic}] weight drift {self.drift:.1f}% "
                f"(code={self.declared}, measured={self.measured})"
            )
        return (
            f"[{self.extrinsic}] {self.axis.value} mismatch "
            f"(code={self.declared}, measured={self.measured})"
        )


@dataclass(frozen=True)
class Correction:
    """New literal values for one extrinsic. ``None`` leaves an axis alone."""

    declared: CodeLiteral
    weight: int | None = None
    reads: int | None = None
    writes: int | None = None

    @property
    def touches_reads_writes(self) -> bool:
        return self.reads is not None or self.writes is not None


@dataclass(frozen=True)
class Evaluation:
    """Comparison of one extrinsic's measurement against its declaration."""

    name: str
    declared: CodeLiteral
    measured_weight: int
    measured_reads: int
    measured_writes: int
    drift: float
    mismatches: tuple[Mismatch, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.mismatches

    def failing(self, axis: Axis) -> bool:
        return any(m.axis is axis for m in self.mismatches)

    def correction(self) -> Correction | None:
        """Corrective values for the failing axes, or None when passing."""
        if self.passed:
            return None
        return Correction(
            declared=self.declared,
            weight=self.measured_weight if self.failing(Axis.WEIGHT) else None,
            reads=self.measured_reads if self.failing(Axis.READS) else None,
            writes=self.measured_writes if self.failing(Axis.WRITES) else None,
        )


@dataclass
class AttemptResult:
    """Outcome of evaluating one benchmark invocation for a pallet."""

    pallet: str
    attempt: int
    evaluations: list[Evaluation] = field(default_factory=list)
    skipped: list[ExtrinsicRecord] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(e.passed for e in self.evaluations)

    @property
    def failures(self) -> list[str]:
        return [m.reason for e in self.evaluations for m in e.mismatches]

    def patch_set(self) -> dict[str, Correction]:
        """Map each failing extrinsic to the values it should be patched to."""
        patches: dict[str, Correction] = {}
        for evaluation in self.evaluations:
            correction = evaluation.correction()
            if correction is not None:
                patches[evaluation.name] = correction
        return patches


@dataclass(frozen=True)
class PalletOutcome:
    """Final result for one pallet."""

    pallet: str
    status: PalletStatus
    attempts: int
    failures: tuple[str, ...] = ()


@dataclass
class RunReport:
    """Accumulated results of a run across all pallets."""

    outcomes: list[PalletOutcome] = field(default_factory=list)
    patched_files: list[Path] = field(default_factory=list)
    published: bool = False

    def add_patched(self, path: Path) -> None:
        if path not in self.patched_files:
            self.patched_files.append(path)
