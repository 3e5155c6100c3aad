"""Errors raised by the directory support layer."""

from __future__ import annotations


class DirectoryError(Exception):
    """Base class for directory support errors."""


class InvalidIdentifierError(DirectoryError, ValueError):
    """Raised when a Peppol identifier cannot be constructed."""

    @classmethod
    def empty(cls, kind: str, field: str) -> InvalidIdentifierError:
        """Return an error for an empty identifier part."""
        return cls(f"{kind} identifier {field} must not be empty")

    @classmethod
    def malformed(cls, uri: str) -> InvalidIdentifierError:
        """Return an error for a string lacking the ``scheme::value`` form."""
        return cls(f"identifier {uri!r} is not in 'scheme::value' form")


class DirectoryLookupError(DirectoryError):
    """Raised by resolvers when the directory query itself fails.

    Covers DNS resolution of the SMP host as well as transport and protocol
    errors talking to it.  ``SupportCache`` converts this (and any other
    resolver exception) into a negative cache entry.
    """


class SupportCacheConfigError(DirectoryError, ValueError):
    """Raised when support cache settings are invalid."""

    @classmethod
    def non_positive_duration(cls, value: object) -> SupportCacheConfigError:
        """Return an error for a zero or negative cache duration."""
        return cls(f"cache duration must be positive, got: {value}")

    @classmethod
    def invalid_network(cls, value: str) -> SupportCacheConfigError:
        """Return an error for an unknown Peppol network name."""
        return cls(f"PEPPOL_NETWORK must be 'production' or 'test', got: {value!r}")
