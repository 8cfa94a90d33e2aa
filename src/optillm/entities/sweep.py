"""Sweep result entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SweepResult:
    """Outcome of an expiry sweep.

    Attributes:
        removed: Number of records deleted before finishing or failing
        error: Description of the failure, None on success
    """

    removed: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
