"""Report storage backends.

Public API
----------
ReportStorage
    Protocol (port) for insert-only report persistence.
FilesystemReportStorage
    XML files below a base directory.
MongoReportStorage / MongoClientHandle
    MongoDB collections, with an owned client handle.
SQLReportStorage / SQLStorageHandle
    Relational tables via SQLAlchemy, with an owned engine handle.
init_report_storage
    Creates the relational report tables.
"""

from __future__ import annotations

from .errors import (
    ReportFileFormatError,
    StorageContractError,
    StorageError,
    UnsupportedDatabaseError,
)
from .filesystem import (
    FilenameProvider,
    FilesystemReportStorage,
    default_filename_provider,
)
from .mongodb import MongoClientHandle, MongoReportStorage
from .protocol import ReportStorage
from .schema import init_report_storage
from .sql import SQLReportStorage, SQLStorageHandle

__all__ = [
    "FilenameProvider",
    "FilesystemReportStorage",
    "MongoClientHandle",
    "MongoReportStorage",
    "ReportFileFormatError",
    "ReportStorage",
    "SQLReportStorage",
    "SQLStorageHandle",
    "StorageContractError",
    "StorageError",
    "UnsupportedDatabaseError",
    "default_filename_provider",
    "init_report_storage",
]
