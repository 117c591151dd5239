"""Drift evaluator -- compare measured costs against declared literals.

Pure functions. ``evaluate_extrinsic`` classifies a single record along
the reads, writes and weight axes; ``evaluate_attempt`` applies it to a
whole benchmark run and collects skipped (incomplete) records.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from weightdrift.domain.models import (
    SENTINEL_DRIFT,
    US_TO_PS,
    AttemptResult,
    Axis,
    CodeLiteral,
    Evaluation,
    ExtrinsicRecord,
    Mismatch,
)
from weightdrift.literals import extract_literal

logger = logging.getLogger("weightdrift.evaluator")


def to_picoseconds(time_us: float) -> int:
    """Convert a benchmark time in microseconds to the weight unit."""
    return round(time_us * US_TO_PS)


def drift_percent(measured: int, declared: int) -> float:
    """Signed drift of *measured* against *declared*, one decimal place.

    A zero declaration has no meaningful drift and yields ``SENTINEL_DRIFT``.
    """
    if declared == 0:
        return SENTINEL_DRIFT
    return round((measured - declared) / declared * 100, 1)


def exceeds_threshold(drift: float, threshold: int) -> bool:
    """True when the integer part of ``|drift|`` is above *threshold*."""
    return int(abs(drift)) > threshold


def evaluate_extrinsic(
    record: ExtrinsicRecord,
    declared: CodeLiteral,
    threshold: int,
) -> Evaluation:
    """Classify one complete record against its declared literal.

    Args:
        record: A record for which ``is_complete`` holds.
        declared: Literal values extracted from the dispatch file.
        threshold: Allowed weight drift in percent.

    Returns:
        An Evaluation listing a Mismatch for every failing axis.

    Raises:
        ValueError: *record* is missing time, reads or writes.
    """
    if record.time_us is None or record.reads is None or record.writes is None:
        missing = ", ".join(record.missing_fields)
        raise ValueError(f"incomplete record for {record.name!r}: missing {missing}")
    measured_weight = to_picoseconds(record.time_us)
    drift = drift_percent(measured_weight, declared.weight)

    mismatches: list[Mismatch] = []
    if record.reads != declared.reads:
        mismatches.append(Mismatch(record.name, Axis.READS, declared.reads, record.reads))
    if record.writes != declared.writes:
        mismatches.append(Mismatch(record.name, Axis.WRITES, declared.writes, record.writes))
    if declared.weight == 0 or exceeds_threshold(drift, threshold):
        mismatches.append(
            Mismatch(record.name, Axis.WEIGHT, declared.weight, measured_weight, drift)
        )

    return Evaluation(
        name=record.name,
        declared=declared,
        measured_weight=measured_weight,
        measured_reads=record.reads,
        measured_writes=record.writes,
        drift=drift,
        mismatches=tuple(mismatches),
    )


def evaluate_attempt(
    pallet: str,
    attempt: int,
    records: Iterable[ExtrinsicRecord],
    source: str,
    threshold: int,
) -> AttemptResult:
    """Evaluate every record of one benchmark run against *source*."""
    result = AttemptResult(pallet=pallet, attempt=attempt)
    for record in records:
        if not record.is_complete:
            logger.warning(
                "%s: skipping incomplete record %s (missing %s)",
                pallet,
                record.name,
                ", ".join(record.missing_fields),
            )
            result.skipped.append(record)
            continue
        evaluation = evaluate_extrinsic(record, extract_literal(source, record.name), threshold)
        if not evaluation.passed:
            logger.info(
                "%s: %s failing on %d axis(es)", pallet, record.name, len(evaluation.mismatches)
            )
        result.evaluations.append(evaluation)
    return result


def summary_row(evaluation: Evaluation) -> list[str]:
    """Table cells describing *evaluation* (declared -> measured)."""
    declared = evaluation.declared
    return [
        evaluation.name,
        f"{declared.reads} → {evaluation.measured_reads}",
        f"{declared.writes} → {evaluation.measured_writes}",
        f"{declared.weight} → {evaluation.measured_weight}",
        f"{evaluation.drift:.1f}%",
    ]


SUMMARY_HEADERS = ["Extrinsic", "Reads", "Writes", "Weight", "Drift"]
