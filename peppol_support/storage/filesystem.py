r"""Filesystem adapter for the ReportStorage protocol.

Writes each report and each sending receipt as a small XML document below a
base directory.  The default layout groups files by reporting period::

    {base_dir}/{YYYY}/{MM}/{type_id}-{YYYYMMDD_HHMMSS_fff}-peppol-report.xml
    {base_dir}/{YYYY}/{MM}/{type_id}-{YYYYMMDD_HHMMSS_fff}-sending-report.xml

A report document looks like::

    <PeppolReportData>
      <ReportType>tsr10</ReportType>
      <ReportYear>2024</ReportYear>
      <ReportMonth>3</ReportMonth>
      <ReportCreationDT>2024-04-01T10:00:00.000+00:00</ReportCreationDT>
      <ReportXML valid="true">...</ReportXML>
    </PeppolReportData>

Usage
-----
>>> from pathlib import Path
>>> storage = FilesystemReportStorage(Path("/var/lib/peppol/reports"))
>>> storage.store_report(report_data)
<Outcome.SUCCESS: 'success'>

"""

from __future__ import annotations

import datetime as dt
import typing as typ
import xml.etree.ElementTree as ET  # noqa: N817
from pathlib import Path

from peppol_support.common.outcome import Outcome
from peppol_support.common.time import ensure_aware
from peppol_support.logging import get_logger, log_error, log_info
from peppol_support.reporting.models import ReportData, SendingReportData
from peppol_support.reporting.types import ReportPeriod, ReportType
from peppol_support.storage.errors import ReportFileFormatError

logger = get_logger(__name__)

REPORT_SUFFIX = "peppol-report.xml"
SENDING_REPORT_SUFFIX = "sending-report.xml"

_REPORT_ROOT = "PeppolReportData"
_SENDING_REPORT_ROOT = "SendingReportData"


@typ.runtime_checkable
class FilenameProvider(typ.Protocol):
    """Computes the path of a stored file relative to the base directory."""

    def __call__(
        self,
        report_type: ReportType,
        period: ReportPeriod,
        created_at: dt.datetime,
        suffix: str,
    ) -> str:
        """Return a relative path using ``/`` as separator."""
        ...


def filename_safe_timestamp(value: dt.datetime) -> str:
    """Format ``value`` as ``YYYYMMDD_HHMMSS_fff``."""
    return f"{value:%Y%m%d_%H%M%S}_{value.microsecond // 1000:03d}"


def default_filename_provider(
    report_type: ReportType,
    period: ReportPeriod,
    created_at: dt.datetime,
    suffix: str,
) -> str:
    """Return ``YYYY/MM/{type_id}-{timestamp}-{suffix}``."""
    return (
        f"{period.year:04d}/{period.month:02d}/"
        f"{report_type.id}-{filename_safe_timestamp(created_at)}-{suffix}"
    )


def _append_text(parent: ET.Element, tag: str, text: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = text
    return element


def _header_element(
    root_tag: str,
    report_type: ReportType,
    period: ReportPeriod,
    created_at: dt.datetime,
) -> ET.Element:
    root = ET.Element(root_tag)
    _append_text(root, "ReportType", report_type.id)
    _append_text(root, "ReportYear", str(period.year))
    _append_text(root, "ReportMonth", str(period.month))
    _append_text(
        root, "ReportCreationDT", created_at.isoformat(timespec="milliseconds")
    )
    return root


def _serialize(root: ET.Element) -> bytes:
    # Parsers fold a literal CR into LF; a character reference survives.
    document = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    return document.replace(b"\r", b"&#13;")


def report_to_xml(report: ReportData) -> bytes:
    """Render a report record as a UTF-8 XML document."""
    root = _header_element(
        _REPORT_ROOT, report.report_type, report.period, report.created_at
    )
    payload = _append_text(root, "ReportXML", report.payload)
    payload.set("valid", "true" if report.is_valid else "false")
    return _serialize(root)


def sending_report_to_xml(sending_report: SendingReportData) -> bytes:
    """Render a sending record as a UTF-8 XML document."""
    root = _header_element(
        _SENDING_REPORT_ROOT,
        sending_report.report_type,
        sending_report.period,
        sending_report.created_at,
    )
    if sending_report.receipt is not None:
        _append_text(root, "SendingReport", sending_report.receipt)
    return _serialize(root)


def _required_text(root: ET.Element, tag: str, path: Path) -> str:
    element = root.find(tag)
    if element is None or not element.text:
        raise ReportFileFormatError(path, f"missing <{tag}>")
    return element.text


def _parse_header(
    path: Path, expected_root: str
) -> tuple[ET.Element, ReportType, ReportPeriod, dt.datetime]:
    try:
        root = ET.fromstring(path.read_bytes())  # noqa: S314
    except ET.ParseError as exc:
        raise ReportFileFormatError(path, f"not well-formed XML: {exc}") from exc
    if root.tag != expected_root:
        raise ReportFileFormatError(
            path, f"expected <{expected_root}>, found <{root.tag}>"
        )

    type_id = _required_text(root, "ReportType", path)
    report_type = ReportType.from_id(type_id)
    if report_type is None:
        raise ReportFileFormatError(path, f"unknown report type {type_id!r}")
    try:
        period = ReportPeriod(
            int(_required_text(root, "ReportYear", path)),
            int(_required_text(root, "ReportMonth", path)),
        )
        created_at = ensure_aware(
            dt.datetime.fromisoformat(_required_text(root, "ReportCreationDT", path))
        )
    except ValueError as exc:
        raise ReportFileFormatError(path, str(exc)) from exc
    return root, report_type, period, created_at


class FilesystemReportStorage:
    """Store reports and sending receipts as XML files.

    Parameters
    ----------
    base_dir
        Root directory for stored files.  Subdirectories are created on
        demand.
    filename_provider
        Computes each file's relative path.

    """

    def __init__(
        self,
        base_dir: Path,
        filename_provider: FilenameProvider = default_filename_provider,
    ) -> None:
        """Initialise the storage with a base directory path."""
        self._base_dir = Path(base_dir)
        self._filename_provider = filename_provider

    @property
    def base_dir(self) -> Path:
        """Return the root directory for stored files."""
        return self._base_dir

    def path_for(
        self,
        report_type: ReportType,
        period: ReportPeriod,
        created_at: dt.datetime,
        suffix: str,
    ) -> Path:
        """Return the absolute path a record would be written to."""
        relative = self._filename_provider(report_type, period, created_at, suffix)
        return self._base_dir.joinpath(*relative.split("/"))

    def _write(self, path: Path, document: bytes, what: str) -> Outcome:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(document)
        except OSError as exc:
            log_error(logger, "Failed to write %s to '%s'", what, path, exc_info=exc)
            return Outcome.FAILURE
        log_info(logger, "Successfully wrote %s to '%s'", what, path)
        return Outcome.SUCCESS

    def store_report(self, report: ReportData) -> Outcome:
        """Write ``report`` as a ``PeppolReportData`` document."""
        path = self.path_for(
            report.report_type, report.period, report.created_at, REPORT_SUFFIX
        )
        return self._write(path, report_to_xml(report), "Peppol Report")

    def store_sending_report(self, sending_report: SendingReportData) -> Outcome:
        """Write ``sending_report`` as a ``SendingReportData`` document."""
        path = self.path_for(
            sending_report.report_type,
            sending_report.period,
            sending_report.created_at,
            SENDING_REPORT_SUFFIX,
        )
        return self._write(
            path, sending_report_to_xml(sending_report), "Peppol Sending Report"
        )

    def read_report(self, path: Path) -> ReportData:
        """Load a report record previously written by :meth:`store_report`.

        Raises
        ------
        ReportFileFormatError
            If the file is not a report document.

        """
        root, report_type, period, created_at = _parse_header(path, _REPORT_ROOT)
        payload = root.find("ReportXML")
        if payload is None or not payload.text:
            raise ReportFileFormatError(path, "missing <ReportXML>")
        return ReportData(
            report_type=report_type,
            period=period,
            created_at=created_at,
            payload=payload.text,
            is_valid=payload.get("valid") == "true",
        )

    def read_sending_report(self, path: Path) -> SendingReportData:
        """Load a sending record previously written by :meth:`store_sending_report`.

        Raises
        ------
        ReportFileFormatError
            If the file is not a sending report document.

        """
        root, report_type, period, created_at = _parse_header(
            path, _SENDING_REPORT_ROOT
        )
        receipt = root.find("SendingReport")
        return SendingReportData(
            report_type=report_type,
            period=period,
            created_at=created_at,
            receipt=receipt.text if receipt is not None else None,
        )
