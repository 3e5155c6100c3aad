"""Report types and reporting periods for Peppol Reporting."""

from __future__ import annotations

import datetime as dt
import enum

import msgspec

# Report type IDs are stored in a VARCHAR(12) column.
MAX_LEN_ID = 12


class ReportType(enum.StrEnum):
    """Kinds of Peppol Reporting reports; the value is the persisted ID."""

    TSR_V10 = "tsr10"
    EUSR_V11 = "eusr11"

    @property
    def id(self) -> str:
        """Return the short ID stored alongside persisted reports."""
        return self.value

    @property
    def display_name(self) -> str:
        """Return a human-readable name for log and error messages."""
        return _DISPLAY_NAMES[self]

    @property
    def short_name(self) -> str:
        """Return the abbreviation used in validation messages (TSR, EUSR)."""
        return _SHORT_NAMES[self]

    @classmethod
    def from_id(cls, report_type_id: str | None) -> ReportType | None:
        """Return the report type with the given ID, or ``None``."""
        if not report_type_id or len(report_type_id) > MAX_LEN_ID:
            return None
        try:
            return cls(report_type_id)
        except ValueError:
            return None


_DISPLAY_NAMES = {
    ReportType.TSR_V10: "Transaction Statistics Report 1.0",
    ReportType.EUSR_V11: "End User Statistics Report 1.1",
}
_SHORT_NAMES = {
    ReportType.TSR_V10: "TSR",
    ReportType.EUSR_V11: "EUSR",
}


def _check_report_type_ids() -> None:
    for member in ReportType:
        if not member.id or len(member.id) > MAX_LEN_ID:
            msg = (
                f"report type ID {member.id!r} must be 1 to {MAX_LEN_ID} "
                "characters long"
            )
            raise ValueError(msg)


_check_report_type_ids()


class ReportPeriod(msgspec.Struct, frozen=True, order=True):
    """Year and month a report covers."""

    year: int
    month: int

    def __post_init__(self) -> None:
        """Reject months outside 1-12 and years outside the calendar."""
        if not 1 <= self.month <= 12:  # noqa: PLR2004
            msg = f"month must be between 1 and 12, got: {self.month}"
            raise ValueError(msg)
        if not dt.MINYEAR <= self.year <= dt.MAXYEAR:
            msg = f"year must be between {dt.MINYEAR} and {dt.MAXYEAR}, got: {self.year}"
            raise ValueError(msg)

    @classmethod
    def of_date(cls, value: dt.date) -> ReportPeriod:
        """Return the period containing ``value``."""
        return cls(value.year, value.month)

    @classmethod
    def from_report(cls, report: object) -> ReportPeriod:
        """Return the period of a TSR or EUSR object.

        Both report kinds carry ``header.report_period.start_date``; the
        period is the year and month of that date.

        Raises
        ------
        ValueError
            If the object has no such header.

        """
        try:
            start = report.header.report_period.start_date  # type: ignore[attr-defined]
        except AttributeError as exc:
            msg = (
                "cannot derive the report period from "
                f"{type(report).__name__}; pass it explicitly"
            )
            raise ValueError(msg) from exc
        return cls.of_date(start)

    @classmethod
    def parse(cls, text: str) -> ReportPeriod:
        """Parse a ``YYYY-MM`` string."""
        year, sep, month = text.strip().partition("-")
        if not sep:
            msg = f"report period must be in YYYY-MM form, got: {text!r}"
            raise ValueError(msg)
        return cls(int(year), int(month))

    def previous(self) -> ReportPeriod:
        """Return the period one month earlier."""
        if self.month == 1:
            return ReportPeriod(self.year - 1, 12)
        return ReportPeriod(self.year, self.month - 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
