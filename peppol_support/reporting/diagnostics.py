"""Diagnostics produced while serializing and validating reports.

Diagnostics flow to the caller through :class:`MessageHandlers`: a warning
handler taking a message and an error handler taking a message and an
optional exception.  The default handlers log through femtologging.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from peppol_support.logging import get_logger, log_error, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)


class Severity(enum.StrEnum):
    """Severity of a diagnostic.  Only errors make a report invalid."""

    ERROR = "error"
    WARNING = "warning"


@dc.dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single serialization or rule-validation finding.

    Attributes
    ----------
    severity
        Whether the finding is an error or a warning.
    message
        Human-readable description.
    location
        Optional pointer into the markup (XPath, line/column).

    """

    severity: Severity
    message: str
    location: str | None = None

    @classmethod
    def error(cls, message: str, location: str | None = None) -> Diagnostic:
        """Create an error diagnostic."""
        return cls(Severity.ERROR, message, location)

    @classmethod
    def warning(cls, message: str, location: str | None = None) -> Diagnostic:
        """Create a warning diagnostic."""
        return cls(Severity.WARNING, message, location)

    @property
    def is_error(self) -> bool:
        """Return ``True`` for error severity."""
        return self.severity is Severity.ERROR

    def render(self) -> str:
        """Return the message, prefixed with the location when known."""
        if self.location:
            return f"[{self.location}] {self.message}"
        return self.message


def _log_warning(message: str) -> None:
    log_warning(logger, "%s", message)


def _log_error(message: str, exc: BaseException | None) -> None:
    log_error(logger, "%s", message, exc_info=exc)


@dc.dataclass(frozen=True, slots=True)
class MessageHandlers:
    """Sinks for human-readable warnings and errors.

    Attributes
    ----------
    warn
        Called with each warning message.
    error
        Called with each error message and the causing exception, if any.

    """

    warn: cabc.Callable[[str], None] = _log_warning
    error: cabc.Callable[[str, BaseException | None], None] = _log_error

    def report(self, prefix: str, diagnostic: Diagnostic) -> None:
        """Route ``diagnostic`` to the matching handler."""
        label = "error" if diagnostic.is_error else "warning"
        message = f"{prefix} {label}: {diagnostic.render()}"
        if diagnostic.is_error:
            self.error(message, None)
        else:
            self.warn(message)
