"""Success/failure indicator returned by storage and reporting operations."""

from __future__ import annotations

import enum


class Outcome(enum.StrEnum):
    """Result of an operation whose expected failures are reported, not raised."""

    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def is_success(self) -> bool:
        """Return ``True`` for :attr:`SUCCESS`."""
        return self is Outcome.SUCCESS

    @property
    def is_failure(self) -> bool:
        """Return ``True`` for :attr:`FAILURE`."""
        return self is Outcome.FAILURE

    @classmethod
    def of(cls, *, success: bool) -> Outcome:
        """Map a boolean onto an outcome."""
        return cls.SUCCESS if success else cls.FAILURE
