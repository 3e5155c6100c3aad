"""ReportStorage protocol for persisting reports and sending receipts.

This module defines the port (in hexagonal architecture terms) for report
persistence.  Adapters implement it for the filesystem, MongoDB, and SQL
databases; the active adapter is chosen by configuration and injected into
``ReportingService``.

Both operations are insert-only.  Expected operational failures (backend
unreachable or read-only) are returned as ``Outcome.FAILURE``; violations of
the backend contract (unacknowledged write, unexpected row count) raise
:class:`~peppol_support.storage.errors.StorageContractError`.

Usage
-----
>>> from peppol_support.storage import FilesystemReportStorage, ReportStorage
>>> isinstance(FilesystemReportStorage(Path(".")), ReportStorage)
True

"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from peppol_support.common.outcome import Outcome
    from peppol_support.reporting.models import ReportData, SendingReportData


@typ.runtime_checkable
class ReportStorage(typ.Protocol):
    """Protocol for durable, insert-only report persistence."""

    def store_report(self, report: ReportData) -> Outcome:
        """Persist a validated (or invalid) report.

        Parameters
        ----------
        report
            The report record, including its validity flag.

        Returns
        -------
        Outcome
            ``FAILURE`` when the backend could not be reached.

        """
        ...

    def store_sending_report(self, sending_report: SendingReportData) -> Outcome:
        """Persist the receipt of a sent report.

        Parameters
        ----------
        sending_report
            The sending record; its receipt may be ``None``.

        Returns
        -------
        Outcome
            ``FAILURE`` when the backend could not be reached.

        """
        ...
