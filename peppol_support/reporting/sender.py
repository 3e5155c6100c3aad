"""ReportSender callback protocol and the report type routing table.

The sender abstracts the actual Peppol transmission: it may call an AS4
gateway in-process or trigger a remote sending service.  It receives the
document type and process to send with and returns the sending receipt.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from peppol_support.directory.identifiers import (
    EUSR_V11_DOCUMENT_TYPE,
    REPORTING_PROCESS,
    TSR_V10_DOCUMENT_TYPE,
)
from peppol_support.reporting.errors import UnknownReportTypeError
from peppol_support.reporting.types import ReportType

if typ.TYPE_CHECKING:
    from peppol_support.directory.identifiers import (
        DocumentTypeIdentifier,
        ProcessIdentifier,
    )


@typ.runtime_checkable
class ReportSender(typ.Protocol):
    """Callable that transmits a report payload through the Peppol network."""

    def __call__(
        self,
        document_type: DocumentTypeIdentifier,
        process: ProcessIdentifier,
        payload: bytes,
    ) -> bytes | str | None:
        """Send ``payload`` and return the receipt content.

        Errors that happen after the message left should be described in the
        returned receipt; raising means nothing was sent.
        """
        ...


@dc.dataclass(frozen=True, slots=True)
class RoutingIdentifiers:
    """Document type and process a report type is sent with."""

    document_type: DocumentTypeIdentifier
    process: ProcessIdentifier


_ROUTING: dict[ReportType, RoutingIdentifiers] = {
    ReportType.TSR_V10: RoutingIdentifiers(TSR_V10_DOCUMENT_TYPE, REPORTING_PROCESS),
    ReportType.EUSR_V11: RoutingIdentifiers(EUSR_V11_DOCUMENT_TYPE, REPORTING_PROCESS),
}


def routing_for(report_type: ReportType) -> RoutingIdentifiers:
    """Return the identifiers used to send ``report_type``.

    Raises
    ------
    UnknownReportTypeError
        If ``report_type`` has no routing entry.

    """
    try:
        return _ROUTING[report_type]
    except (KeyError, TypeError) as exc:
        raise UnknownReportTypeError(report_type) from exc


def decode_receipt(receipt: bytes | str | None) -> str | None:
    """Return the receipt as text, or ``None`` when it is empty."""
    if receipt is None:
        return None
    if isinstance(receipt, bytes | bytearray):
        receipt = bytes(receipt).decode("utf-8", errors="replace")
    return receipt or None
