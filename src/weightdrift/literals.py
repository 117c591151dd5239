"""Declared weight literals in dispatch source files.

Numeric normalization and the line-oriented extractor that finds the
weight constant and read/write counts declared nearest before a function.
"""

from __future__ import annotations

import logging
import re

from weightdrift.domain.models import CodeLiteral

logger = logging.getLogger("weightdrift.literals")

_TYPE_SUFFIX = re.compile(r"_?(?:u|i)(?:8|16|32|64|128|size)$")
_NON_DIGIT = re.compile(r"[^0-9]")

_CALL_INDEX = re.compile(r"^\s*#\[pallet::call_index")
_FROM_PARTS = re.compile(r"Weight::from_parts\(\s*([0-9A-Za-z_]*)")
_READS_WRITES = re.compile(r"reads_writes\(([^)]*)\)")
_READS = re.compile(r"\.reads\(([^)]*)\)")
_WRITES = re.compile(r"\.writes\(([^)]*)\)")


def fn_declaration(name: str) -> re.Pattern[str]:
    """Pattern matching the declaration line of function *name*."""
    return re.compile(rf"pub\s+fn\s+{re.escape(name)}\s*[(<]")


def to_int(token: str | None) -> int:
    """Convert a numeric source token to an int.

    Separators, whitespace and punctuation are dropped and a trailing
    integer type suffix (``_u64``, ``u32`` ...) is ignored. Tokens without
    digits yield 0.
    """
    if not token:
        return 0
    text = _TYPE_SUFFIX.sub("", token.strip().rstrip(",;)"))
    digits = _NON_DIGIT.sub("", text)
    return int(digits) if digits else 0


def extract_literal(source: str, name: str) -> CodeLiteral:
    """Return the weight, reads and writes declared for function *name*.

    Scans *source* line by line, remembering the last weight constant and
    read/write counts seen. The values current when the first declaration
    of *name* is reached are the result. When *name* is never declared an
    all-zero literal is returned.
    """
    declaration = fn_declaration(name)
    weight = reads = writes = ""

    for line in source.splitlines():
        if _CALL_INDEX.match(line):
            continue
        if m := _FROM_PARTS.search(line):
            weight = m.group(1)
        if m := _READS_WRITES.search(line):
            args = m.group(1).split(",")
            reads = args[0]
            writes = args[1] if len(args) > 1 else ""
        if m := _READS.search(line):
            reads = m.group(1)
        if m := _WRITES.search(line):
            writes = m.group(1)
        if declaration.search(line):
            return CodeLiteral(weight=to_int(weight), reads=to_int(reads), writes=to_int(writes))

    logger.debug("No declaration found for %s", name)
    return CodeLiteral()
