"""Peppol identifiers and the predefined document type/process pairs.

Identifiers are ``scheme::value`` pairs.  Participant identifier values are
case-insensitive in the Peppol network, so they are lower-cased on
construction; the URI-encoded form of a participant is the canonical support
cache key.
"""

from __future__ import annotations

import msgspec

from peppol_support.directory.errors import InvalidIdentifierError

PARTICIPANT_SCHEME = "iso6523-actorid-upis"
DOCUMENT_TYPE_SCHEME = "busdox-docid-qns"
PROCESS_SCHEME = "cenbii-procid-ubl"

_URI_SEPARATOR = "::"


def _check_part(kind: str, field: str, text: str) -> None:
    if not text or not text.strip():
        raise InvalidIdentifierError.empty(kind, field)


class _Identifier(msgspec.Struct, frozen=True, kw_only=True):
    scheme: str
    value: str

    @property
    def uri_encoded(self) -> str:
        """Return the ``scheme::value`` representation."""
        return f"{self.scheme}{_URI_SEPARATOR}{self.value}"

    def __str__(self) -> str:
        return self.uri_encoded


class ParticipantIdentifier(_Identifier, frozen=True, kw_only=True):
    """Peppol participant, e.g. ``iso6523-actorid-upis::0088:5798000000001``."""

    def __post_init__(self) -> None:
        """Validate both parts and canonicalise the value to lower case."""
        _check_part("participant", "scheme", self.scheme)
        _check_part("participant", "value", self.value)
        msgspec.structs.force_setattr(self, "value", self.value.strip().lower())

    @classmethod
    def of(cls, value: str, *, scheme: str = PARTICIPANT_SCHEME) -> ParticipantIdentifier:
        """Build a participant identifier in the default ISO 6523 scheme."""
        return cls(scheme=scheme, value=value)

    @classmethod
    def parse(cls, uri: str) -> ParticipantIdentifier:
        """Parse a ``scheme::value`` string.

        Raises
        ------
        InvalidIdentifierError
            If ``uri`` lacks the ``::`` separator or either part is empty.

        """
        scheme, sep, value = uri.partition(_URI_SEPARATOR)
        if not sep:
            raise InvalidIdentifierError.malformed(uri)
        return cls(scheme=scheme, value=value)


class DocumentTypeIdentifier(_Identifier, frozen=True, kw_only=True):
    """Peppol document type identifier."""

    def __post_init__(self) -> None:
        """Reject empty schemes and values."""
        _check_part("document type", "scheme", self.scheme)
        _check_part("document type", "value", self.value)


class ProcessIdentifier(_Identifier, frozen=True, kw_only=True):
    """Peppol process identifier."""

    def __post_init__(self) -> None:
        """Reject empty schemes and values."""
        _check_part("process", "scheme", self.scheme)
        _check_part("process", "value", self.value)


# Message Level Response (Peppol BIS MLR 3)
MLR_DOCUMENT_TYPE = DocumentTypeIdentifier(
    scheme=DOCUMENT_TYPE_SCHEME,
    value=(
        "urn:oasis:names:specification:ubl:schema:xsd:ApplicationResponse-2"
        "::ApplicationResponse##urn:fdc:peppol.eu:poacc:trns:mlr:3::2.1"
    ),
)
MLR_PROCESS = ProcessIdentifier(
    scheme=PROCESS_SCHEME, value="urn:fdc:peppol.eu:poacc:bis:mlr:3"
)

# Message Level Status. Not yet in the official code lists.
MLS_DOCUMENT_TYPE = DocumentTypeIdentifier(
    scheme=DOCUMENT_TYPE_SCHEME,
    value=(
        "urn:oasis:names:specification:ubl:schema:xsd:ApplicationResponse-2"
        "::ApplicationResponse##urn:peppol:edec:mls:1.0::2.1"
    ),
)
MLS_PROCESS = ProcessIdentifier(scheme=PROCESS_SCHEME, value="urn:peppol:edec:mls")

# Peppol Reporting (TSR 1.0 and EUSR 1.1 share one process)
TSR_V10_DOCUMENT_TYPE = DocumentTypeIdentifier(
    scheme=DOCUMENT_TYPE_SCHEME,
    value=(
        "urn:fdc:peppol:transaction-statistics-report:1.0::TransactionStatisticsReport"
        "##urn:fdc:peppol.eu:edec:trns:transaction-statistics-reporting:1.0::1.0"
    ),
)
EUSR_V11_DOCUMENT_TYPE = DocumentTypeIdentifier(
    scheme=DOCUMENT_TYPE_SCHEME,
    value=(
        "urn:fdc:peppol:end-user-statistics-report:1.1::EndUserStatisticsReport"
        "##urn:fdc:peppol.eu:edec:trns:end-user-statistics-report:1.1::1.1"
    ),
)
REPORTING_PROCESS = ProcessIdentifier(
    scheme=PROCESS_SCHEME, value="urn:fdc:peppol.eu:edec:bis:reporting:1.0"
)
