"""Console reporting for attempts and run outcomes."""

from __future__ import annotations

from weightdrift.console import console
from weightdrift.domain.models import AttemptResult, PalletOutcome, PalletStatus
from weightdrift.evaluator import SUMMARY_HEADERS, summary_row

_STATUS_LABELS = {
    PalletStatus.PASSED: "pass",
    PalletStatus.PATCHED: "patched",
    PalletStatus.UNCHANGED: "unchanged",
    PalletStatus.FAILED: "FAIL",
}


def show_attempt(result: AttemptResult) -> None:
    """Print the summary table, skipped records and failure list of *result*."""
    rows = [summary_row(e) for e in result.evaluations]
    console.table(SUMMARY_HEADERS, rows, title=f"{result.pallet} (attempt {result.attempt})")
    for record in result.skipped:
        console.warning(
            f"[{record.name}] incomplete benchmark output "
            f"(missing {', '.join(record.missing_fields)}); skipped"
        )
    if not result.evaluations and not result.skipped:
        console.warning(f"No extrinsics found in benchmark output for '{result.pallet}'.")
    if not result.passed:
        console.failure_list(result.failures)


def show_outcomes(outcomes: list[PalletOutcome]) -> None:
    """Print the final per-pallet status table."""
    rows = [
        [o.pallet, _STATUS_LABELS[o.status], str(o.attempts), str(len(o.failures))]
        for o in outcomes
    ]
    console.table(["Pallet", "Status", "Attempts", "Failures"], rows, title="Summary")
