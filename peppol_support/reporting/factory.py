"""Factory for opening the configured ReportStorage backend."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from peppol_support.logging import get_logger, log_info
from peppol_support.reporting.config import ReportingConfig, StorageBackend

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from peppol_support.storage.protocol import ReportStorage

logger = get_logger(__name__)


def _no_resources() -> None:
    return None


@dc.dataclass(frozen=True, slots=True)
class OpenedReportStorage:
    """A storage backend and the callback releasing its resources."""

    storage: ReportStorage
    close: cabc.Callable[[], None] = _no_resources

    def __enter__(self) -> ReportStorage:
        """Return the storage for use inside a ``with`` block."""
        return self.storage

    def __exit__(self, *exc_info: object) -> None:
        """Release the backend's client or connection pool."""
        self.close()


def create_report_storage(config: ReportingConfig | None = None) -> OpenedReportStorage:
    """Open the storage backend selected by ``config``.

    When ``config`` is omitted it is read with
    :meth:`ReportingConfig.from_env`.  With ``migrate`` set, the SQL report
    tables are created before the storage is returned.

    Raises
    ------
    ReportingConfigError
        If the configuration read from the environment is invalid.
    UnsupportedDatabaseError
        If the SQL URL names an unsupported database.

    Examples
    --------
    >>> config = ReportingConfig(report_dir=Path("/var/lib/peppol/reports"))
    >>> with create_report_storage(config) as storage:
    ...     storage.store_report(report_data)

    """
    config = config or ReportingConfig.from_env()
    log_info(logger, "Opening %s report storage", config.storage_backend)

    match config.storage_backend:
        case StorageBackend.FILE:
            from peppol_support.storage.filesystem import FilesystemReportStorage

            report_dir = typ.cast("Path", config.report_dir)
            return OpenedReportStorage(FilesystemReportStorage(report_dir))

        case StorageBackend.MONGODB:
            from peppol_support.storage.mongodb import (
                MongoClientHandle,
                MongoReportStorage,
            )

            handle = MongoClientHandle.connect(
                typ.cast("str", config.mongodb_url),
                typ.cast("str", config.mongodb_database),
            )
            return OpenedReportStorage(MongoReportStorage(lambda: handle), handle.close)

        case StorageBackend.SQL:
            from peppol_support.storage.sql import SQLStorageHandle

            sql_handle = SQLStorageHandle.from_url(
                typ.cast("str", config.database_url), config.database_schema
            )
            if config.migrate:
                sql_handle.migrate()
            return OpenedReportStorage(sql_handle.storage, sql_handle.close)
