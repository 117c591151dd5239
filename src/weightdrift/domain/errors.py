"""Exception hierarchy for weightdrift."""

from __future__ import annotations


class WeightDriftError(Exception):
    """Base class for fatal weightdrift errors."""


class ConfigurationError(WeightDriftError):
    """Configuration is invalid, a pallet has no dispatch mapping, or its file is missing."""


class BenchmarkToolError(WeightDriftError):
    """The build step or the benchmarking binary failed."""

    def __init__(self, message: str, output_tail: str = "") -> None:
        super().__init__(message)
        self.output_tail = output_tail


class RetriesExhausted(WeightDriftError):
    """A pallet kept failing and auto-patching is not permitted."""

    def __init__(self, pallet: str, failures: list[str]) -> None:
        super().__init__(
            f"'{pallet}' still failing after all retries; AUTO_COMMIT_WEIGHTS disabled."
        )
        self.pallet = pallet
        self.failures = failures


class PatchApplicationFailure(WeightDriftError):
    """No known literal syntax matched for a function. Never fatal."""


class PublishFailure(WeightDriftError):
    """Staging, committing or pushing patched files failed."""

    def __init__(self, message: str, branch: str = "", last_commit: str = "") -> None:
        super().__init__(message)
        self.branch = branch
        self.last_commit = last_commit
