"""Behavioural coverage for the validate, store and send workflow."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt

from pytest_bdd import given, parsers, scenario, then, when

from peppol_support.common.outcome import Outcome
from peppol_support.reporting import (
    Diagnostic,
    ReportingService,
    ReportingServiceDependencies,
    ReportType,
    ReportValidator,
)
from tests.helpers.reporting_fakes import (
    TSR_MARKUP,
    FakeRuleChecker,
    FakeSerializer,
    InMemoryReportStorage,
    RecordingHandlers,
    RecordingSender,
    report_object,
)


@dc.dataclass(slots=True)
class ReportingContext:
    """Mutable context shared between steps."""

    storage: InMemoryReportStorage
    recorder: RecordingHandlers = dc.field(default_factory=RecordingHandlers)
    sender: RecordingSender = dc.field(default_factory=RecordingSender)
    outcome: Outcome | None = None


@scenario("../reporting_workflow.feature", "A valid TSR is stored and sent")
def test_valid_report_scenario() -> None:
    """Wrapper for pytest-bdd scenario."""


@scenario("../reporting_workflow.feature", "An invalid TSR is stored but not sent")
def test_invalid_report_scenario() -> None:
    """Wrapper for pytest-bdd scenario."""


@scenario("../reporting_workflow.feature", "A lost receipt makes the workflow fail")
def test_lost_receipt_scenario() -> None:
    """Wrapper for pytest-bdd scenario."""


def _service(context: ReportingContext, checker: FakeRuleChecker) -> ReportingService:
    validators = {
        ReportType.TSR_V10: ReportValidator(
            ReportType.TSR_V10, FakeSerializer(), checker
        )
    }
    return ReportingService(
        ReportingServiceDependencies(storage=context.storage, validators=validators),
        handlers=context.recorder.as_handlers(),
        clock=lambda: dt.datetime(2024, 4, 2, 6, 0, tzinfo=dt.UTC),
    )


@given("a reporting service with in-memory storage", target_fixture="reporting_context")
def given_in_memory_storage() -> ReportingContext:
    """Start with working storage."""
    return ReportingContext(storage=InMemoryReportStorage())


@given(
    "a reporting service whose receipt storage fails",
    target_fixture="reporting_context",
)
def given_failing_receipt_storage() -> ReportingContext:
    """Start with storage that rejects sending records."""
    return ReportingContext(storage=InMemoryReportStorage(fail_sending_reports=True))


def _run(context: ReportingContext, period: str, checker: FakeRuleChecker) -> None:
    year, month = (int(part) for part in period.split("-"))
    service = _service(context, checker)
    context.outcome = service.validate_store_and_send(
        report_object(year, month), ReportType.TSR_V10, context.sender
    )


@when(
    parsers.parse(
        "a TSR for {period} without rule findings is validated, stored and sent"
    )
)
def when_clean_report_processed(reporting_context: ReportingContext, period: str) -> None:
    """Run the workflow for a report passing every rule."""
    _run(reporting_context, period, FakeRuleChecker())


@when(
    parsers.parse(
        'a TSR for {period} with the rule error "{rule}" is validated, stored and sent'
    )
)
def when_failing_report_processed(
    reporting_context: ReportingContext, period: str, rule: str
) -> None:
    """Run the workflow for a report breaking ``rule``."""
    _run(reporting_context, period, FakeRuleChecker(findings=(Diagnostic.error(rule),)))


@then(parsers.parse('the outcome is "{expected}"'))
def then_outcome(reporting_context: ReportingContext, expected: str) -> None:
    """Check the workflow outcome."""
    assert reporting_context.outcome is Outcome(expected)


@then(parsers.parse('{count:d} report is stored with validity "{valid}"'))
def then_report_stored(
    reporting_context: ReportingContext, count: int, valid: str
) -> None:
    """Check the stored audit records."""
    reports = reporting_context.storage.reports
    assert len(reports) == count
    assert all(report.is_valid is (valid == "true") for report in reports)


@then("the sender received the serialized TSR")
def then_sender_received(reporting_context: ReportingContext) -> None:
    """The bytes sent are the markup produced during validation."""
    [(_, _, payload)] = reporting_context.sender.calls
    assert payload == TSR_MARKUP.encode("utf-8")


@then("the sender was not called")
def then_sender_not_called(reporting_context: ReportingContext) -> None:
    """Invalid reports never leave."""
    assert reporting_context.sender.calls == []


@then(parsers.parse("{count:d} sending record is stored"))
def then_sending_record(reporting_context: ReportingContext, count: int) -> None:
    """Check the recorded transmissions."""
    assert len(reporting_context.storage.sending_reports) == count


@then(parsers.parse('the error "{message}" was reported'))
def then_error_reported(reporting_context: ReportingContext, message: str) -> None:
    """Check the messages passed to the error handler."""
    assert message in [text for text, _ in reporting_context.recorder.errors]
