"""Immutable records persisted by the report storage backends."""

from __future__ import annotations

import datetime as dt  # noqa: TC003

import msgspec

from peppol_support.reporting.errors import TimezoneAwareRequiredError
from peppol_support.reporting.types import ReportPeriod, ReportType  # noqa: TC001


def _require_aware(value: dt.datetime) -> None:
    if value.tzinfo is None:
        raise TimezoneAwareRequiredError.for_creation_time()


class ReportData(msgspec.Struct, frozen=True, kw_only=True):
    """A serialized report and the outcome of validating it.

    Attributes
    ----------
    report_type
        Kind of report (TSR or EUSR).
    period
        Year and month the report covers.
    created_at
        Aware creation timestamp with millisecond precision.
    payload
        Serialized report markup.  Never empty.
    is_valid
        ``True`` when serialization and rule validation found no errors.

    """

    report_type: ReportType
    period: ReportPeriod
    created_at: dt.datetime
    payload: str
    is_valid: bool

    def __post_init__(self) -> None:
        """Reject empty payloads and naive timestamps."""
        if not self.payload:
            msg = "report payload must not be empty"
            raise ValueError(msg)
        _require_aware(self.created_at)


class SendingReportData(msgspec.Struct, frozen=True, kw_only=True):
    """The receipt produced when a report was handed to the sender.

    Attributes
    ----------
    report_type
        Kind of report that was sent.
    period
        Year and month the sent report covers.
    created_at
        Aware timestamp taken just before sending.
    receipt
        Receipt content returned by the sender, or ``None`` when it
        returned nothing.  Empty strings are stored as ``None``.

    """

    report_type: ReportType
    period: ReportPeriod
    created_at: dt.datetime
    receipt: str | None = None

    def __post_init__(self) -> None:
        """Normalise empty receipts and reject naive timestamps."""
        if self.receipt == "":
            msgspec.structs.force_setattr(self, "receipt", None)
        _require_aware(self.created_at)

    @property
    def has_receipt(self) -> bool:
        """Return ``True`` when receipt content is present."""
        return self.receipt is not None
