"""Literal patcher -- rewrite declared weights in a dispatch file.

Substitutions are regex based and scoped to the first function with the
given name. Two placements are tried for every construct: inside the
function signature (before its body opens) and in a ``#[pallet::weight]``
attribute directly above the declaration. Patching is best effort: when
no syntax matches, a warning is emitted and the file is left alone.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from weightdrift.console import console
from weightdrift.domain.errors import PatchApplicationFailure
from weightdrift.domain.models import Correction
from weightdrift.literals import fn_declaration, to_int

logger = logging.getLogger("weightdrift.patcher")

_WEIGHT_ARG = re.compile(r"(?P<head>Weight::from_parts\(\s*)(?P<weight>[0-9A-Za-z_]+)")
_RW_ARGS = re.compile(
    r"(?P<head>reads_writes\(\s*)(?P<reads>[^,)]+)(?P<sep>\s*,\s*)(?P<writes>[^)]+)"
)
_READS_ARG = re.compile(r"(?P<head>\.reads\(\s*)(?P<reads>[^)]+)")
_WRITES_ARG = re.compile(r"(?P<head>\.writes\(\s*)(?P<writes>[^)]+)")

_BODY_OPEN = re.compile(r"[{;]")
_WEIGHT_ATTR = re.compile(r"#\s*\[\s*pallet::weight\b")
# Text that cannot sit between a function's attributes and its declaration.
_ITEM_BOUNDARY = re.compile(r"[{};]|\bfn\b")


def _scopes(source: str, name: str) -> list[tuple[int, int]]:
    """Spans owned by the first declaration of *name*.

    The signature span (declaration up to the body) comes first, then the
    ``#[pallet::weight]`` attribute block directly above it, if any.

    Raises:
        PatchApplicationFailure: *name* is not declared in *source*.
    """
    decl = fn_declaration(name).search(source)
    if decl is None:
        raise PatchApplicationFailure(f"no declaration of {name}")
    body = _BODY_OPEN.search(source, decl.end())
    scopes = [(decl.start(), body.start() if body else len(source))]

    attribute = None
    for attribute in _WEIGHT_ATTR.finditer(source, 0, decl.start()):
        pass
    if attribute is not None and not _ITEM_BOUNDARY.search(
        source, attribute.start(), decl.start()
    ):
        scopes.append((attribute.start(), decl.start()))
    return scopes


def _format(group: str, value: int) -> str:
    return f"{value:_}" if group == "weight" else str(value)


def _rewrite(match: re.Match[str], values: dict[str, int]) -> str:
    """Rebuild *match* with the numeric groups named in *values* replaced.

    Tokens whose value already equals the target are kept verbatim.
    """
    parts: list[str] = []
    for group in sorted(match.re.groupindex, key=match.re.groupindex.__getitem__):
        text = match.group(group)
        if group in values and to_int(text) != values[group]:
            text = _format(group, values[group])
        parts.append(text)
    return "".join(parts)


def _substitute(
    source: str, name: str, pattern: re.Pattern[str], values: dict[str, int]
) -> str:
    """Rewrite the first *pattern* match inside the scopes of *name*. Raises if none."""
    for start, end in _scopes(source, name):
        match = pattern.search(source, start, end)
        if match:
            return source[: match.start()] + _rewrite(match, values) + source[match.end() :]
    raise PatchApplicationFailure(f"no literal syntax matched for {sorted(values)}")


def patch_weight(source: str, name: str, weight: int) -> str:
    """Return *source* with the weight constant of *name* set to *weight*."""
    return _substitute(source, name, _WEIGHT_ARG, {"weight": weight})


def patch_reads_writes(source: str, name: str, correction: Correction) -> str:
    """Return *source* with the reads/writes of *name* updated from *correction*.

    The combined ``reads_writes(r, w)`` call is tried first, keeping the
    declared value on whichever axis is not being corrected. Otherwise the
    separate ``.reads(n)`` and ``.writes(n)`` calls are patched individually.
    """
    reads = correction.reads if correction.reads is not None else correction.declared.reads
    writes = correction.writes if correction.writes is not None else correction.declared.writes
    try:
        return _substitute(source, name, _RW_ARGS, {"reads": reads, "writes": writes})
    except PatchApplicationFailure:
        pass

    patched = source
    matched = False
    for pattern, group, value in (
        (_READS_ARG, "reads", correction.reads),
        (_WRITES_ARG, "writes", correction.writes),
    ):
        if value is None:
            continue
        try:
            patched = _substitute(patched, name, pattern, {group: value})
            matched = True
        except PatchApplicationFailure:
            logger.debug("%s: no .%s() call found", name, group)
    if not matched:
        raise PatchApplicationFailure("no reads/writes syntax matched")
    return patched


def patch_source(source: str, name: str, correction: Correction) -> str:
    """Apply every axis of *correction* to *source*, warning on misses."""
    patched = source
    if correction.weight is not None:
        try:
            patched = patch_weight(patched, name, correction.weight)
        except PatchApplicationFailure:
            _warn(f"patch_weight: no substitution for {name}")
    if correction.touches_reads_writes:
        try:
            patched = patch_reads_writes(patched, name, correction)
        except PatchApplicationFailure:
            _warn(f"patch_reads_writes: no substitution for {name}")
    return patched


def patch_extrinsic(path: Path, name: str, correction: Correction) -> bool:
    """Patch *name* in the file at *path*. Returns True if the file changed."""
    before = path.read_text(encoding="utf-8")
    after = patch_source(before, name, correction)
    if after == before:
        return False
    path.write_text(after, encoding="utf-8")
    logger.info("Patched %s in %s", name, path)
    return True


def apply_patch_set(path: Path, patches: dict[str, Correction]) -> bool:
    """Apply every correction in *patches* to *path*. True if anything changed."""
    changed = False
    for name, correction in patches.items():
        if patch_extrinsic(path, name, correction):
            changed = True
    return changed


def _warn(message: str) -> None:
    logger.warning(message)
    console.warning(message)
