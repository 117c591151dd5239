"""Tests for numeric normalization and declared-literal extraction."""

from __future__ import annotations

import pytest

from weightdrift.domain.models import CodeLiteral
from weightdrift.literals import extract_literal, to_int

# ---------------------------------------------------------------------------
# to_int
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "token,expected",
    [
        ("12_000", 12000),
        ("", 0),
        ("abc", 0),
        ("007", 7),
        ("  42 ", 42),
        ("10_000_000,", 10000000),
        ("4104_u64", 4104),
        ("2u32", 2),
        ("1_2a3", 123),
    ],
)
def test_to_int(token: str, expected: int) -> None:
    assert to_int(token) == expected


def test_to_int_none_is_zero() -> None:
    assert to_int(None) == 0


# ---------------------------------------------------------------------------
# extract_literal
# ---------------------------------------------------------------------------


class TestExtractLiteral:
    def test_separate_reads_writes_calls(self, dispatch_file) -> None:
        source = dispatch_file.read_text()
        assert extract_literal(source, "set_weights") == CodeLiteral(
            weight=10_000_000, reads=4104, writes=2
        )

    def test_combined_reads_writes_call(self, dispatch_file) -> None:
        source = dispatch_file.read_text()
        assert extract_literal(source, "do_thing") == CodeLiteral(
            weight=1_000_000_000, reads=2, writes=1
        )

    def test_unknown_function_is_all_zero(self, dispatch_file) -> None:
        assert extract_literal(dispatch_file.read_text(), "missing") == CodeLiteral()

    def test_name_prefix_does_not_match(self) -> None:
        source = (
            "#[pallet::weight(Weight::from_parts(5, 0))]\n"
            "pub fn do_thing_else(origin: OriginFor<T>) {}\n"
        )
        assert extract_literal(source, "do_thing") == CodeLiteral()

    def test_first_declaration_wins(self) -> None:
        source = (
            "#[pallet::weight(Weight::from_parts(100, 0).saturating_add(reads_writes(1, 1)))]\n"
            "pub fn dup(origin: OriginFor<T>) {}\n"
            "#[pallet::weight(Weight::from_parts(900, 0).saturating_add(reads_writes(9, 9)))]\n"
            "pub fn dup(origin: OriginFor<T>) {}\n"
        )
        assert extract_literal(source, "dup") == CodeLiteral(weight=100, reads=1, writes=1)

    def test_call_index_line_does_not_reset(self) -> None:
        source = (
            "#[pallet::weight(Weight::from_parts(7_000, 0)\n"
            "    .saturating_add(T::DbWeight::get().reads(3)))]\n"
            "#[pallet::call_index(4)]\n"
            "pub fn tracked(origin: OriginFor<T>) {}\n"
        )
        assert extract_literal(source, "tracked") == CodeLiteral(weight=7000, reads=3, writes=0)

    def test_generic_function_declaration(self) -> None:
        source = (
            "#[pallet::weight(Weight::from_parts(11, 0))]\n"
            "pub fn generic<I: Into<u64>>(origin: OriginFor<T>, v: I) {}\n"
        )
        assert extract_literal(source, "generic").weight == 11
