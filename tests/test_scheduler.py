"""Tests for the benchmark retry/patch loop."""

from __future__ import annotations

from pathlib import Path

import pytest

from weightdrift.domain.errors import ConfigurationError, RetriesExhausted
from weightdrift.domain.models import PalletStatus, PatchPolicy
from weightdrift.literals import extract_literal
from weightdrift.scheduler.loop import Scheduler

PASSING = (("set_weights", 10.0, 4104, 2), ("do_thing", 1000.0, 2, 1))
FAILING = (("set_weights", 10.0, 4104, 2), ("do_thing", 1.2, 3, 1))
PATCHED_PASSING = (("set_weights", 10.0, 4104, 2), ("do_thing", 1.2, 3, 1))


class TestVerifyPallet:
    def test_passes_first_attempt(self, make_config, make_runner, make_output, publisher) -> None:
        runner = make_runner(make_output(*PASSING))
        report = Scheduler(make_config(), runner, publisher).run()

        assert runner.calls == ["demo"]
        assert report.outcomes[0].status is PalletStatus.PASSED
        assert report.outcomes[0].attempts == 1
        assert report.patched_files == []
        assert publisher.published == []

    def test_retries_then_passes(self, make_config, make_runner, make_output, publisher) -> None:
        runner = make_runner(make_output(*FAILING), make_output(*PASSING))
        report = Scheduler(make_config(), runner, publisher).run()

        assert runner.calls == ["demo", "demo"]
        assert report.outcomes[0].status is PalletStatus.PASSED
        assert report.outcomes[0].attempts == 2

    def test_exhausted_without_auto_commit_raises(
        self, make_config, make_runner, make_output, publisher, dispatch_file: Path
    ) -> None:
        original = dispatch_file.read_text()
        runner = make_runner(make_output(*FAILING))
        with pytest.raises(RetriesExhausted) as exc_info:
            Scheduler(make_config(auto_commit=False), runner, publisher).run()

        assert exc_info.value.pallet == "demo"
        assert "[do_thing] reads mismatch (code=2, measured=3)" in exc_info.value.failures
        assert len(runner.calls) == 3
        assert dispatch_file.read_text() == original
        assert publisher.published == []

    def test_stop_policy_patches_once(
        self, make_config, make_runner, make_output, publisher, dispatch_file: Path
    ) -> None:
        runner = make_runner(make_output(*FAILING))
        config = make_config(auto_commit=True, max_retries=2)
        report = Scheduler(config, runner, publisher).run()

        assert len(runner.calls) == 2
        outcome = report.outcomes[0]
        assert outcome.status is PalletStatus.PATCHED
        assert len(outcome.failures) == 2
        literal = extract_literal(dispatch_file.read_text(), "do_thing")
        assert (literal.weight, literal.reads, literal.writes) == (1_200_000, 3, 1)
        assert publisher.published == [[dispatch_file]]
        assert report.published is True

    def test_reverify_policy_passes_after_patch(
        self, make_config, make_runner, make_output, publisher
    ) -> None:
        runner = make_runner(
            make_output(*FAILING), make_output(*FAILING), make_output(*PATCHED_PASSING)
        )
        config = make_config(auto_commit=True, max_retries=2, patch_policy=PatchPolicy.REVERIFY)
        report = Scheduler(config, runner, publisher).run()

        assert len(runner.calls) == 3
        assert report.outcomes[0].status is PalletStatus.PATCHED
        assert report.outcomes[0].attempts == 3

    def test_reverify_failure_is_not_patched_again(
        self, make_config, make_runner, make_output, publisher, dispatch_file: Path
    ) -> None:
        still_failing = (("set_weights", 10.0, 4104, 2), ("do_thing", 1.2, 9, 1))
        runner = make_runner(
            make_output(*FAILING), make_output(*still_failing), make_output(*still_failing)
        )
        config = make_config(auto_commit=True, max_retries=1, patch_policy=PatchPolicy.REVERIFY)
        report = Scheduler(config, runner, publisher).run()

        assert report.outcomes[0].status is PalletStatus.FAILED
        assert len(runner.calls) == 2
        assert extract_literal(dispatch_file.read_text(), "do_thing").reads == 3
        assert publisher.published == [[dispatch_file]]

    def test_unpatchable_failure_reports_unchanged(
        self, make_config, make_runner, make_output, publisher
    ) -> None:
        bare = make_output(("bare", 5.0, 0, 0))
        config = make_config(auto_commit=True, max_retries=1)
        report = Scheduler(config, make_runner(bare), publisher).run()

        assert report.outcomes[0].status is PalletStatus.UNCHANGED
        assert report.patched_files == []
        assert publisher.published == []

    def test_incomplete_records_do_not_fail(
        self, make_config, make_runner, make_output, publisher
    ) -> None:
        runner = make_runner(make_output(("do_thing", 1.2, None, None)))
        report = Scheduler(make_config(), runner, publisher).run()
        assert report.outcomes[0].status is PalletStatus.PASSED


class TestRunConfiguration:
    def test_missing_mapping_is_fatal(self, make_config, make_runner, publisher) -> None:
        config = make_config(pallets=("demo", "drand"))
        runner = make_runner([])
        with pytest.raises(ConfigurationError, match="drand"):
            Scheduler(config, runner, publisher).run()

    def test_missing_file_is_fatal(self, make_config, make_runner, publisher, tmp_path) -> None:
        config = make_config(dispatch_paths={"demo": tmp_path / "nope.rs"})
        with pytest.raises(ConfigurationError, match="dispatch file missing"):
            Scheduler(config, make_runner([]), publisher).run()

    def test_subset_of_pallets(self, make_config, make_runner, make_output, publisher) -> None:
        config = make_config(pallets=("demo", "drand"))
        runner = make_runner(make_output(*PASSING))
        report = Scheduler(config, runner, publisher).run(["demo"])
        assert [o.pallet for o in report.outcomes] == ["demo"]
