"""Emit structured observability events for the reporting workflow.

``ReportingService`` calls these methods at each stage so operators can
follow a report from validation through storage to sending.

Usage
-----
>>> event_logger = ReportingEventLogger()
>>> event_logger.log_report_stored(
...     report_type=ReportType.TSR_V10,
...     period=ReportPeriod(2024, 3),
...     is_valid=True,
... )

"""

from __future__ import annotations

import enum
import typing as typ

from peppol_support.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    from peppol_support.reporting.types import ReportPeriod, ReportType

logger = get_logger(__name__)


class ReportingEventType(enum.StrEnum):
    """Structured log event types for reporting workflow runs."""

    REPORT_VALIDATED = "reporting.report.validated"
    REPORT_STORED = "reporting.report.stored"
    REPORT_STORE_FAILED = "reporting.report.store_failed"
    REPORT_SENT = "reporting.report.sent"
    REPORT_SEND_FAILED = "reporting.report.send_failed"
    RECEIPT_STORE_FAILED = "reporting.receipt.store_failed"


class ReportingEventLogger:
    """Emit structured reporting events via femtologging."""

    def log_report_validated(
        self,
        *,
        report_type: ReportType,
        period: ReportPeriod,
        is_valid: bool,
        error_count: int,
        warning_count: int,
    ) -> None:
        """Log the outcome of validating one report."""
        log_info(
            logger,
            "[%s] report_type=%s period=%s valid=%s errors=%d warnings=%d",
            ReportingEventType.REPORT_VALIDATED,
            report_type.id,
            period,
            is_valid,
            error_count,
            warning_count,
        )

    def log_report_stored(
        self,
        *,
        report_type: ReportType,
        period: ReportPeriod,
        is_valid: bool,
    ) -> None:
        """Log that a report was persisted."""
        log_info(
            logger,
            "[%s] report_type=%s period=%s valid=%s",
            ReportingEventType.REPORT_STORED,
            report_type.id,
            period,
            is_valid,
        )

    def log_report_store_failed(
        self,
        *,
        report_type: ReportType,
        period: ReportPeriod,
    ) -> None:
        """Log that the storage backend rejected a report."""
        log_error(
            logger,
            "[%s] report_type=%s period=%s",
            ReportingEventType.REPORT_STORE_FAILED,
            report_type.id,
            period,
        )

    def log_report_sent(
        self,
        *,
        report_type: ReportType,
        period: ReportPeriod,
        payload_size: int,
        has_receipt: bool,
    ) -> None:
        """Log a successful hand-off to the sender.

        Parameters
        ----------
        report_type
            Kind of report sent.
        period
            Reporting period of the sent report.
        payload_size
            Size of the sent payload in bytes.
        has_receipt
            Whether the sender returned receipt content.

        """
        log_info(
            logger,
            "[%s] report_type=%s period=%s payload_bytes=%d receipt=%s",
            ReportingEventType.REPORT_SENT,
            report_type.id,
            period,
            payload_size,
            has_receipt,
        )

    def log_report_send_failed(
        self,
        *,
        report_type: ReportType,
        period: ReportPeriod,
        error: BaseException,
    ) -> None:
        """Log a sender exception with error details."""
        log_error(
            logger,
            "[%s] report_type=%s period=%s error_type=%s error_message=%s",
            ReportingEventType.REPORT_SEND_FAILED,
            report_type.id,
            period,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_receipt_store_failed(
        self,
        *,
        report_type: ReportType,
        period: ReportPeriod,
    ) -> None:
        """Log that a sent report's receipt could not be recorded.

        The report did leave; retrying the whole send would transmit it
        twice.
        """
        log_error(
            logger,
            "[%s] report_type=%s period=%s message_transmitted=True",
            ReportingEventType.RECEIPT_STORE_FAILED,
            report_type.id,
            period,
        )
