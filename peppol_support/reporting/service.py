"""Reporting service: validate, store, send, and record Peppol reports.

This module provides the ReportingService class which orchestrates the
reporting workflow: validating a report object, persisting it (valid or
not, for audit), handing the payload to a sender, and persisting the
sending receipt.

Expected failures (validation errors, unreachable storage, sender
exceptions) are reported through :class:`MessageHandlers` and an
``Outcome.FAILURE`` return value.  Only contract violations raise.

Usage
-----
>>> deps = ReportingServiceDependencies(
...     storage=FilesystemReportStorage(Path("/var/lib/peppol/reports")),
...     validators={ReportType.TSR_V10: tsr_validator},
... )
>>> service = ReportingService(deps)
>>> service.validate_and_store(tsr, ReportType.TSR_V10).is_success
True
>>> service.send_and_record(ReportPeriod(2024, 3), ReportType.TSR_V10, payload, sender)
<Outcome.SUCCESS: 'success'>

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from peppol_support.common.outcome import Outcome
from peppol_support.common.time import utcnow_millis
from peppol_support.logging import get_logger, log_error, log_info
from peppol_support.reporting.diagnostics import MessageHandlers
from peppol_support.reporting.errors import UnknownReportTypeError
from peppol_support.reporting.models import ReportData, SendingReportData
from peppol_support.reporting.observability import ReportingEventLogger
from peppol_support.reporting.sender import decode_receipt, routing_for
from peppol_support.reporting.types import ReportPeriod, ReportType

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from peppol_support.reporting.sender import ReportSender
    from peppol_support.reporting.validation import ReportValidator
    from peppol_support.storage.protocol import ReportStorage

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ReportingServiceDependencies:
    """Core dependencies for ReportingService.

    Attributes
    ----------
    storage
        Storage backend receiving reports and sending receipts.
    validators
        Validator per report type the service accepts.

    """

    storage: ReportStorage
    validators: cabc.Mapping[ReportType, ReportValidator]


class ReportingService:
    """Orchestrates Peppol Reporting validation, storage, and sending.

    Parameters
    ----------
    dependencies
        Storage backend and validators.
    handlers
        Sinks for human-readable warnings and errors.  Defaults to logging.
    event_logger
        Structured event logger for workflow stages.
    clock
        Callable returning the aware creation timestamp for new records.

    """

    def __init__(
        self,
        dependencies: ReportingServiceDependencies,
        handlers: MessageHandlers | None = None,
        event_logger: ReportingEventLogger | None = None,
        clock: cabc.Callable[[], dt.datetime] | None = None,
    ) -> None:
        """Configure the service with its collaborators."""
        self._storage = dependencies.storage
        self._handlers = handlers or MessageHandlers()
        self._validators = {
            report_type: validator.with_handlers(self._handlers)
            for report_type, validator in dependencies.validators.items()
        }
        self._event_logger = event_logger or ReportingEventLogger()
        self._clock = clock or utcnow_millis

    @property
    def storage(self) -> ReportStorage:
        """Return the storage backend in use."""
        return self._storage

    def _validator_for(self, report_type: ReportType) -> ReportValidator:
        try:
            return self._validators[report_type]
        except KeyError as exc:
            raise UnknownReportTypeError(report_type) from exc

    def validate_and_store(
        self,
        report: object,
        report_type: ReportType,
        on_serialized: cabc.Callable[[str], None] | None = None,
        *,
        period: ReportPeriod | None = None,
    ) -> Outcome:
        """Validate ``report`` and persist it regardless of validity.

        Parameters
        ----------
        report
            The report domain object.
        report_type
            Kind of report; selects the validator.
        on_serialized
            Receives the serialized markup once, so the caller can reuse it
            (for example to send it) without serializing again.
        period
            Reporting period.  Derived from the report header when omitted.

        Returns
        -------
        Outcome
            ``SUCCESS`` only when the report serialized, had no validation
            errors, and was stored.

        Raises
        ------
        UnknownReportTypeError
            If no validator is registered for ``report_type``.

        """
        validator = self._validator_for(report_type)
        effective_period = period or ReportPeriod.from_report(report)
        created_at = self._clock()

        outcome = validator.validate(report, effective_period, on_serialized)
        self._event_logger.log_report_validated(
            report_type=report_type,
            period=effective_period,
            is_valid=outcome.is_valid,
            error_count=len(outcome.errors),
            warning_count=len(outcome.warnings),
        )
        if outcome.payload is None:
            log_error(
                logger,
                "%s %s serialized to no output - not storing it",
                report_type.short_name,
                effective_period,
            )
            return Outcome.FAILURE

        log_info(
            logger,
            "Now storing %s %s in state %s",
            report_type.short_name,
            effective_period,
            Outcome.of(success=outcome.is_valid),
        )
        data = ReportData(
            report_type=report_type,
            period=effective_period,
            created_at=created_at,
            payload=outcome.payload,
            is_valid=outcome.is_valid,
        )
        if self._storage.store_report(data).is_failure:
            self._event_logger.log_report_store_failed(
                report_type=report_type, period=effective_period
            )
            self._handlers.error(
                f"Error storing {report_type.short_name} {effective_period}", None
            )
            return Outcome.FAILURE

        self._event_logger.log_report_stored(
            report_type=report_type,
            period=effective_period,
            is_valid=outcome.is_valid,
        )
        return Outcome.of(success=outcome.is_valid)

    def validate_and_store_tsr(
        self,
        tsr: object,
        on_serialized: cabc.Callable[[str], None] | None = None,
    ) -> Outcome:
        """Validate and store a Transaction Statistics Report."""
        return self.validate_and_store(tsr, ReportType.TSR_V10, on_serialized)

    def validate_and_store_eusr(
        self,
        eusr: object,
        on_serialized: cabc.Callable[[str], None] | None = None,
    ) -> Outcome:
        """Validate and store an End User Statistics Report."""
        return self.validate_and_store(eusr, ReportType.EUSR_V11, on_serialized)

    def send_and_record(
        self,
        period: ReportPeriod,
        report_type: ReportType,
        payload: bytes,
        sender: ReportSender,
    ) -> Outcome:
        """Send a serialized report and persist the sending receipt.

        A ``FAILURE`` result is ambiguous: it is returned both when sending
        failed and when sending succeeded but the receipt could not be
        stored.  The latter is logged as ``reporting.receipt.store_failed``.

        Parameters
        ----------
        period
            Reporting period of the payload.
        report_type
            Kind of report; selects the document type and process.
        payload
            Serialized report.  Must not be empty.
        sender
            Callback performing the transmission.

        Returns
        -------
        Outcome
            ``SUCCESS`` only when sending and storing the receipt succeeded.

        Raises
        ------
        UnknownReportTypeError
            If ``report_type`` has no document type/process mapping.
        ValueError
            If ``payload`` is empty.

        """
        routing = routing_for(report_type)
        if not payload:
            msg = "report payload must not be empty"
            raise ValueError(msg)

        sent_at = self._clock()
        try:
            log_info(
                logger,
                "Now sending Peppol Report %s for %s via Peppol Network",
                report_type.id,
                period,
            )
            receipt = sender(routing.document_type, routing.process, payload)
        except Exception as exc:  # noqa: BLE001 - reported through the error handler
            self._event_logger.log_report_send_failed(
                report_type=report_type, period=period, error=exc
            )
            self._handlers.error(
                f"Failed to send Peppol Report {report_type.id} for {period} "
                "via the Peppol Network",
                exc,
            )
            return Outcome.FAILURE

        sending_report = SendingReportData(
            report_type=report_type,
            period=period,
            created_at=sent_at,
            receipt=decode_receipt(receipt),
        )
        self._event_logger.log_report_sent(
            report_type=report_type,
            period=period,
            payload_size=len(payload),
            has_receipt=sending_report.has_receipt,
        )

        log_info(
            logger,
            "Now storing sending report of %s for %s",
            report_type.id,
            period,
        )
        if self._storage.store_sending_report(sending_report).is_failure:
            self._event_logger.log_receipt_store_failed(
                report_type=report_type, period=period
            )
            self._handlers.error(
                f"Error storing sending report of {report_type.id} for {period}",
                None,
            )
            return Outcome.FAILURE

        return Outcome.SUCCESS

    def validate_store_and_send(
        self,
        report: object,
        report_type: ReportType,
        sender: ReportSender,
        *,
        period: ReportPeriod | None = None,
    ) -> Outcome:
        """Run the whole workflow; send only when validation and storage passed."""
        effective_period = period or ReportPeriod.from_report(report)
        serialized: list[str] = []
        stored = self.validate_and_store(
            report, report_type, serialized.append, period=effective_period
        )
        if stored.is_failure:
            log_info(
                logger,
                "Not sending %s %s because it was not validated and stored",
                report_type.short_name,
                effective_period,
            )
            return Outcome.FAILURE

        return self.send_and_record(
            effective_period,
            report_type,
            serialized[0].encode("utf-8"),
            sender,
        )
