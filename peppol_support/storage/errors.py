"""Errors raised by report storage backends."""

from __future__ import annotations


class StorageError(Exception):
    """Base class for storage backend errors."""


class StorageContractError(StorageError):
    """Raised when a reachable backend breaks its write contract.

    This indicates a misconfigured or broken backend rather than a routine
    failure, so it propagates instead of being reported as ``FAILURE``.
    """

    @classmethod
    def unacknowledged(cls, collection: str) -> StorageContractError:
        """Return an error for a MongoDB insert that was not acknowledged."""
        return cls(f"Failed to insert into MongoDB collection {collection!r}")

    @classmethod
    def unexpected_rowcount(cls, table: str, rowcount: int) -> StorageContractError:
        """Return an error for an INSERT affecting other than one row."""
        return cls(
            f"Failed to create new SQL DB entry in {table!r} ({rowcount} rows affected)"
        )


class UnsupportedDatabaseError(StorageError, ValueError):
    """Raised when the SQL URL names a database that is not supported."""

    def __init__(self, dialect: str, allowed: tuple[str, ...]) -> None:
        """Record the offending dialect and the supported ones."""
        self.dialect = dialect
        options = ", ".join(allowed)
        super().__init__(
            f"The database type must be one of {options} - provided value is {dialect!r}"
        )


class ReportFileFormatError(StorageError, ValueError):
    """Raised when a stored report file cannot be read back."""

    def __init__(self, path: object, reason: str) -> None:
        """Record the unreadable file and the reason."""
        self.path = path
        super().__init__(f"{path}: {reason}")
