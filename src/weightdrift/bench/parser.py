"""Benchmark output parser.

Folds the benchmarking tool's text output into one ``ExtrinsicRecord``
per extrinsic. The open record is an explicit accumulator passed through
``feed``; a record is emitted when the next extrinsic header arrives and
once more at end of input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import replace

from weightdrift.domain.models import ExtrinsicRecord

EXTRINSIC_RE = re.compile(r'Extrinsic:\s*"([A-Za-z0-9_]+)"')
TIME_RE = re.compile(r"Time\s*~=\s*([0-9]+(?:\.[0-9]+)?)")
READS_RE = re.compile(r"Reads\s*=\s*([0-9]+)")
WRITES_RE = re.compile(r"Writes\s*=\s*([0-9]+)")


def feed(
    current: ExtrinsicRecord | None, line: str
) -> tuple[ExtrinsicRecord | None, ExtrinsicRecord | None]:
    """Process one line. Returns ``(open_record, flushed_record)``."""
    if m := EXTRINSIC_RE.search(line):
        return ExtrinsicRecord(name=m.group(1)), current
    if current is None:
        return None, None
    if m := TIME_RE.search(line):
        return replace(current, time_us=float(m.group(1))), None
    if m := READS_RE.search(line):
        return replace(current, reads=int(m.group(1))), None
    if m := WRITES_RE.search(line):
        return replace(current, writes=int(m.group(1))), None
    return current, None


def parse_lines(lines: Iterable[str]) -> Iterator[ExtrinsicRecord]:
    """Yield a record per extrinsic, in the order they appear in *lines*.

    Incomplete records are yielded too; callers check ``is_complete``.
    """
    current: ExtrinsicRecord | None = None
    for line in lines:
        current, flushed = feed(current, line)
        if flushed is not None:
            yield flushed
    if current is not None:
        yield current
