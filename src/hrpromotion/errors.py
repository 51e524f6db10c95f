"""Error taxonomy shared by the schemas, core and harness."""

from __future__ import annotations

from typing import Any


class InvalidRecord(ValueError):
    """Raised when a personnel record cannot be scored.

    Per-record and recoverable: the engine collects these into the rejected
    list of a run instead of aborting the batch.
    """

    def __init__(
        self,
        errors: list[str],
        *,
        personnel_id: str | None = None,
        index: int | None = None,
    ) -> None:
        super().__init__("Invalid personnel record")
        self.errors = list(errors)
        self.personnel_id = personnel_id
        self.index = index

    def __str__(self) -> str:
        label = self.personnel_id or (f"#{self.index}" if self.index is not None else "<unknown>")
        return f"Invalid personnel record {label}: {'; '.join(self.errors)}"


class PolicyMisconfigured(ValueError):
    """Raised when a promotion policy fails its integrity checks.

    Whole-batch and fatal: no individual is scored under a bad policy.
    """

    def __init__(self, constant: str, value: Any, message: str) -> None:
        super().__init__(message)
        self.constant = constant
        self.value = value
        self.message = message

    def __str__(self) -> str:
        return f"Policy misconfigured ({self.constant}={self.value!r}): {self.message}"


class ComparisonHarnessError(RuntimeError):
    """Raised by the comparison harness; never by production scoring."""


__all__ = ["InvalidRecord", "PolicyMisconfigured", "ComparisonHarnessError"]
