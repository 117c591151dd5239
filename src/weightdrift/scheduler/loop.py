"""Benchmark loop: pallet -> attempts -> patch -> publish.

For every configured pallet the benchmark is run up to ``max_retries``
times. A pallet passes as soon as one attempt has no mismatches. When all
attempts fail, the last attempt's corrections are patched into the
dispatch file if auto-commit is enabled; otherwise the run stops.

After a patch the ``PatchPolicy`` decides what happens next:

- ``STOP`` -- the patch is final, move on to the next pallet.
- ``REVERIFY`` -- reset the attempt counter and benchmark again. If that
  round also exhausts its attempts the pallet is marked failed; it is
  never patched a second time.

Patched files are committed and pushed once, after all pallets.
"""

from __future__ import annotations

import logging

from weightdrift.bench.parser import parse_lines
from weightdrift.config import resolve_pallet
from weightdrift.console import console
from weightdrift.domain.errors import RetriesExhausted
from weightdrift.domain.models import (
    AttemptResult,
    Pallet,
    PalletOutcome,
    PalletStatus,
    PatchPolicy,
    RunConfig,
    RunReport,
)
from weightdrift.domain.protocols import BenchmarkRunner, Publisher
from weightdrift.evaluator import evaluate_attempt
from weightdrift.patcher import apply_patch_set
from weightdrift.report import show_attempt, show_outcomes

logger = logging.getLogger("weightdrift.scheduler")


class Scheduler:
    """Drives benchmarking, evaluation and patching for a run."""

    def __init__(
        self,
        config: RunConfig,
        runner: BenchmarkRunner,
        publisher: Publisher,
    ) -> None:
        self._config = config
        self._runner = runner
        self._publisher = publisher
        self._report = RunReport()

    @property
    def report(self) -> RunReport:
        return self._report

    def run(self, pallets: list[str] | None = None) -> RunReport:
        """Process *pallets* (default: all configured) and publish patches.

        Raises:
            ConfigurationError: A pallet has no dispatch mapping or file.
            RetriesExhausted: A pallet kept failing with auto-commit disabled.
            BenchmarkToolError: The benchmarking binary failed.
            PublishFailure: Committing or pushing patched files failed.
        """
        names = list(self._config.pallets) if pallets is None else pallets
        console.info(f"Will benchmark pallets: {' '.join(names)}")

        for name in names:
            pallet = resolve_pallet(self._config, name)
            outcome = self.verify_pallet(pallet)
            self._report.outcomes.append(outcome)

        if self._report.patched_files:
            console.info("Committing patched files …")
            self._report.published = self._publisher.publish(self._report.patched_files)

        show_outcomes(self._report.outcomes)
        return self._report

    def verify_pallet(self, pallet: Pallet) -> PalletOutcome:
        """Run the retry loop for one pallet and return its final status."""
        max_retries = self._config.max_retries
        patched = False
        attempt = 1
        total_attempts = 0

        while True:
            console.pallet_header(pallet.name, attempt, max_retries)
            result = self.run_attempt(pallet, attempt)
            total_attempts += 1
            show_attempt(result)

            if result.passed:
                console.success(f"'{pallet.name}' within tolerance.")
                status = PalletStatus.PATCHED if patched else PalletStatus.PASSED
                return PalletOutcome(pallet.name, status, total_attempts)

            if attempt < max_retries:
                console.info("→ Retrying …")
                attempt += 1
                continue

            failures = tuple(result.failures)
            if patched:
                console.error(f"'{pallet.name}' still failing after patching.")
                logger.error("%s: re-verification failed after patch", pallet.name)
                return PalletOutcome(pallet.name, PalletStatus.FAILED, total_attempts, failures)

            console.error(f"'{pallet.name}' still failing; patching …")
            if not self._config.auto_commit:
                raise RetriesExhausted(pallet.name, list(failures))

            if not apply_patch_set(pallet.dispatch_path, result.patch_set()):
                console.warning(f"No modifications applied for '{pallet.name}'.")
                return PalletOutcome(
                    pallet.name, PalletStatus.UNCHANGED, total_attempts, failures
                )

            self._report.add_patched(pallet.dispatch_path)
            console.success(f"Patched '{pallet.name}' file.")
            logger.info("%s: patched %s", pallet.name, pallet.dispatch_path)

            if self._config.patch_policy is PatchPolicy.STOP:
                return PalletOutcome(pallet.name, PalletStatus.PATCHED, total_attempts, failures)

            console.info(f"Re-verifying '{pallet.name}' against the patched file …")
            patched = True
            attempt = 1

    def run_attempt(self, pallet: Pallet, attempt: int) -> AttemptResult:
        """Benchmark *pallet* once and evaluate the output."""
        source = pallet.dispatch_path.read_text(encoding="utf-8")
        records = parse_lines(self._runner.run(pallet))
        result = evaluate_attempt(pallet.name, attempt, records, source, self._config.threshold)
        logger.info(
            "%s attempt %d: %d evaluated, %d skipped, %s",
            pallet.name,
            attempt,
            len(result.evaluations),
            len(result.skipped),
            "pass" if result.passed else "fail",
        )
        return result
