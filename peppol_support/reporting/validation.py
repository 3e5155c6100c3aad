"""Serialize-then-validate pipeline for Peppol Reporting reports.

Validation happens in two stages:

1. The report object is serialized to markup by a :class:`ReportSerializer`,
   which also reports schema diagnostics.  Empty output ends validation.
2. The markup is checked by a :class:`RuleChecker` (the Schematron rules of
   the report type).  Error findings make the report invalid; warnings are
   passed on but never change the outcome.

Every diagnostic is forwarded to :class:`MessageHandlers`, and the markup is
handed to the caller exactly once so it can be reused without serializing
again.

Public API
----------
ReportSerializer
    Protocol for the serialization collaborator.
RuleChecker
    Protocol for the rule-set collaborator.
ValidationOutcome
    Frozen result (payload, validity, diagnostics).
ReportValidator
    Runs both stages for one report type.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from peppol_support.logging import get_logger, log_exception, log_info
from peppol_support.reporting.diagnostics import Diagnostic, MessageHandlers

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from peppol_support.reporting.types import ReportPeriod, ReportType

logger = get_logger(__name__)


@typ.runtime_checkable
class ReportSerializer(typ.Protocol):
    """Converts a report domain object to markup."""

    def serialize(self, report: object, diagnostics: list[Diagnostic]) -> str | None:
        """Return the markup for ``report``, appending findings to ``diagnostics``.

        Returns ``None`` or an empty string when no markup could be produced.
        """
        ...


@typ.runtime_checkable
class RuleChecker(typ.Protocol):
    """Runs an externally defined rule set over serialized markup."""

    def check(self, markup: str) -> cabc.Sequence[Diagnostic]:
        """Return the failed assertions as diagnostics."""
        ...


@dc.dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validating one report.

    Attributes
    ----------
    payload
        The serialized markup, or ``None`` when serialization produced none.
    is_valid
        ``True`` when neither stage produced an error.
    diagnostics
        All serialization and rule findings, in the order they were found.

    """

    payload: str | None
    is_valid: bool
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        """Return only the error diagnostics."""
        return tuple(d for d in self.diagnostics if d.is_error)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        """Return only the warning diagnostics."""
        return tuple(d for d in self.diagnostics if not d.is_error)


class ReportValidator:
    """Serialize and rule-check reports of a single type.

    Parameters
    ----------
    report_type
        The report type this validator handles; used in messages.
    serializer
        Serialization collaborator.
    rule_checker
        Rule-set collaborator.
    handlers
        Sinks for warning and error messages.  Defaults to logging.

    """

    def __init__(
        self,
        report_type: ReportType,
        serializer: ReportSerializer,
        rule_checker: RuleChecker,
        handlers: MessageHandlers | None = None,
    ) -> None:
        """Bind the collaborators for ``report_type``."""
        self._report_type = report_type
        self._serializer = serializer
        self._rule_checker = rule_checker
        self._handlers = handlers or MessageHandlers()

    @property
    def report_type(self) -> ReportType:
        """Return the report type this validator handles."""
        return self._report_type

    def with_handlers(self, handlers: MessageHandlers) -> ReportValidator:
        """Return a copy of this validator reporting to ``handlers``."""
        return ReportValidator(
            self._report_type, self._serializer, self._rule_checker, handlers
        )

    def validate(
        self,
        report: object,
        period: ReportPeriod,
        on_serialized: cabc.Callable[[str], None] | None = None,
    ) -> ValidationOutcome:
        """Serialize ``report`` and check it against the rule set.

        Parameters
        ----------
        report
            The report domain object.
        period
            Reporting period, used in log messages.
        on_serialized
            Called once with the markup when serialization succeeded,
            before rule validation runs.

        Returns
        -------
        ValidationOutcome
            ``payload`` is ``None`` when serialization produced no output.

        """
        name = self._report_type.short_name
        diagnostics: list[Diagnostic] = []

        markup = self._serializer.serialize(report, diagnostics)
        for diagnostic in diagnostics:
            self._handlers.report(f"{name} XSD", diagnostic)
        if not markup:
            return ValidationOutcome(
                payload=None, is_valid=False, diagnostics=tuple(diagnostics)
            )

        if on_serialized is not None:
            on_serialized(markup)

        is_valid = not any(d.is_error for d in diagnostics)
        log_info(logger, "Starting %s %s Schematron validation", name, period)
        try:
            findings = list(self._rule_checker.check(markup))
        except Exception as exc:  # noqa: BLE001 - a broken rule set invalidates the report
            log_exception(
                logger, "Error in %s %s Schematron validation", name, period, exc=exc
            )
            self._handlers.error(f"Error in {name} Schematron validation", exc)
            return ValidationOutcome(
                payload=markup, is_valid=False, diagnostics=tuple(diagnostics)
            )

        for finding in findings:
            self._handlers.report(f"{name} Schematron", finding)
            diagnostics.append(finding)
        if any(f.is_error for f in findings):
            is_valid = False

        return ValidationOutcome(
            payload=markup, is_valid=is_valid, diagnostics=tuple(diagnostics)
        )
