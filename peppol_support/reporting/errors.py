"""Errors specific to the reporting module."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class ReportingError(Exception):
    """Base class for reporting module errors."""


class TimezoneAwareRequiredError(ReportingError, ValueError):
    """Raised when report timestamps lack timezone information."""

    def __init__(self, context: str) -> None:
        """Attach a consistent message for the failing context."""
        super().__init__(f"{context} must be timezone aware")

    @classmethod
    def for_creation_time(cls) -> TimezoneAwareRequiredError:
        """Return an error indicating a naive report creation time."""
        return cls("report creation time")


class UnknownReportTypeError(ReportingError, LookupError):
    """Raised when no document type/process mapping exists for a report type.

    This signals a programming error (a new ``ReportType`` member without a
    matching sender mapping), so it is raised rather than reported.
    """

    def __init__(self, report_type: object) -> None:
        """Record the unsupported report type."""
        self.report_type = report_type
        super().__init__(f"Unsupported Peppol report type {report_type!r}")


class ReportingConfigError(ReportingError):
    """Raised when reporting configuration is missing or invalid."""

    @classmethod
    def missing(cls, name: str, backend: str) -> ReportingConfigError:
        """Return an error for a setting the selected backend requires."""
        return cls(f"{name} is required for the {backend!r} storage backend")

    @classmethod
    def invalid_backend(
        cls, name: str, valid_backends: cabc.Iterable[str]
    ) -> ReportingConfigError:
        """Return an error listing the supported storage backends."""
        valid = ", ".join(f"'{b}'" for b in sorted(valid_backends))
        return cls(
            f"Invalid PEPPOL_REPORT_STORAGE value: {name!r}. Valid options: {valid}"
        )
