"""Peppol Reporting workflow: validate, store, send, and record reports.

Public API
----------
ReportType / ReportPeriod
    Report kind (TSR 1.0, EUSR 1.1) and the year and month covered.
ReportData / SendingReportData
    Immutable records handed to a ``ReportStorage`` backend.
ReportValidator
    Serialize-then-rule-check pipeline for one report type.
MessageHandlers
    Sinks for warning and error messages, defaulting to logging.
ReportingService
    Orchestrates validation, storage, sending, and receipt recording.
ReportingServiceDependencies
    Frozen dataclass grouping core dependencies for ``ReportingService``.
ReportingConfig / create_report_storage
    Storage backend selection and the factory opening it.

Example:
>>> from peppol_support.reporting import (
...     ReportingService,
...     ReportingServiceDependencies,
...     ReportType,
...     create_report_storage,
... )
>>> with create_report_storage() as storage:
...     deps = ReportingServiceDependencies(
...         storage=storage,
...         validators={ReportType.TSR_V10: tsr_validator},
...     )
...     ReportingService(deps).validate_store_and_send(
...         tsr, ReportType.TSR_V10, sender
...     )

"""

from peppol_support.reporting.config import (
    ReportingConfig,
    ReportingSettings,
    StorageBackend,
)
from peppol_support.reporting.diagnostics import Diagnostic, MessageHandlers, Severity
from peppol_support.reporting.errors import (
    ReportingConfigError,
    ReportingError,
    TimezoneAwareRequiredError,
    UnknownReportTypeError,
)
from peppol_support.reporting.factory import OpenedReportStorage, create_report_storage
from peppol_support.reporting.models import ReportData, SendingReportData
from peppol_support.reporting.observability import (
    ReportingEventLogger,
    ReportingEventType,
)
from peppol_support.reporting.sender import (
    ReportSender,
    RoutingIdentifiers,
    decode_receipt,
    routing_for,
)
from peppol_support.reporting.service import (
    ReportingService,
    ReportingServiceDependencies,
)
from peppol_support.reporting.types import MAX_LEN_ID, ReportPeriod, ReportType
from peppol_support.reporting.validation import (
    ReportSerializer,
    ReportValidator,
    RuleChecker,
    ValidationOutcome,
)

__all__ = [
    "MAX_LEN_ID",
    "Diagnostic",
    "MessageHandlers",
    "OpenedReportStorage",
    "ReportData",
    "ReportPeriod",
    "ReportSender",
    "ReportSerializer",
    "ReportType",
    "ReportValidator",
    "ReportingConfig",
    "ReportingConfigError",
    "ReportingError",
    "ReportingEventLogger",
    "ReportingEventType",
    "ReportingService",
    "ReportingServiceDependencies",
    "ReportingSettings",
    "RoutingIdentifiers",
    "RuleChecker",
    "SendingReportData",
    "Severity",
    "StorageBackend",
    "TimezoneAwareRequiredError",
    "UnknownReportTypeError",
    "ValidationOutcome",
    "create_report_storage",
    "decode_receipt",
    "routing_for",
]
