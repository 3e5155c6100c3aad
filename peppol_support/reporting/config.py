"""Configuration for report storage.

This module provides the ReportingConfig dataclass which selects the storage
backend and carries its connection settings.

Usage
-----
Load from environment variables:

>>> import os
>>> os.environ["PEPPOL_REPORT_STORAGE"] = "file"
>>> os.environ["PEPPOL_REPORT_DIR"] = "/var/lib/peppol/reports"
>>> config = ReportingConfig.from_env()
>>> config.storage_backend
<StorageBackend.FILE: 'file'>

Or from a YAML file::

    storage: sql
    database_url: postgresql+psycopg://peppol@db/peppol
    database_schema: reporting
    migrate: true

>>> config = ReportingConfig.from_yaml("reporting.yaml")

"""

from __future__ import annotations

import dataclasses as dc
import enum
import os
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from peppol_support.reporting.errors import ReportingConfigError

YAML_VERSION = (1, 2)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class StorageBackend(enum.StrEnum):
    """Supported report storage backends."""

    FILE = "file"
    MONGODB = "mongodb"
    SQL = "sql"


class ReportingSettings(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Shape of a reporting YAML file."""

    storage: str = StorageBackend.FILE.value
    report_dir: str | None = None
    mongodb_url: str | None = None
    mongodb_database: str | None = None
    database_url: str | None = None
    database_schema: str | None = None
    migrate: bool = False


@dc.dataclass(frozen=True, slots=True)
class ReportingConfig:
    """Storage backend selection and connection settings.

    Attributes
    ----------
    storage_backend
        Which backend stores reports.  Default is the filesystem.
    report_dir
        Base directory for the filesystem backend.
    mongodb_url
        Connection string for the MongoDB backend.
    mongodb_database
        Database name for the MongoDB backend.
    database_url
        SQLAlchemy URL for the SQL backend (PostgreSQL or MySQL; SQLite for
        local use).
    database_schema
        Optional schema holding the SQL report tables.
    migrate
        Create the SQL report tables when the storage is opened.

    Raises
    ------
    ReportingConfigError
        If a setting required by ``storage_backend`` is missing.

    """

    storage_backend: StorageBackend = StorageBackend.FILE
    report_dir: Path | None = None
    mongodb_url: str | None = None
    mongodb_database: str | None = None
    database_url: str | None = None
    database_schema: str | None = None
    migrate: bool = False

    def __post_init__(self) -> None:
        """Check that the selected backend has the settings it needs."""
        match self.storage_backend:
            case StorageBackend.FILE:
                required = {"PEPPOL_REPORT_DIR": self.report_dir}
            case StorageBackend.MONGODB:
                required = {
                    "PEPPOL_REPORT_MONGODB_URL": self.mongodb_url,
                    "PEPPOL_REPORT_MONGODB_DATABASE": self.mongodb_database,
                }
            case StorageBackend.SQL:
                required = {"PEPPOL_REPORT_DATABASE_URL": self.database_url}
        for name, value in required.items():
            if not value:
                raise ReportingConfigError.missing(name, self.storage_backend.value)

    @staticmethod
    def _parse_backend(raw: str) -> StorageBackend:
        try:
            return StorageBackend(raw.strip().lower())
        except ValueError as exc:
            raise ReportingConfigError.invalid_backend(
                raw, (b.value for b in StorageBackend)
            ) from exc

    @staticmethod
    def _parse_bool(env_var: str) -> bool:
        raw = os.environ.get(env_var, "").strip().lower()
        if not raw or raw in _FALSE_VALUES:
            return False
        if raw in _TRUE_VALUES:
            return True
        msg = f"{env_var} must be a boolean, got: {raw!r}"
        raise ReportingConfigError(msg)

    @classmethod
    def from_env(cls) -> ReportingConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``PEPPOL_REPORT_STORAGE``: ``file`` (default), ``mongodb`` or
          ``sql``.
        - ``PEPPOL_REPORT_DIR``: Base directory for the ``file`` backend.
        - ``PEPPOL_REPORT_MONGODB_URL`` and ``PEPPOL_REPORT_MONGODB_DATABASE``:
          Connection settings for the ``mongodb`` backend.
        - ``PEPPOL_REPORT_DATABASE_URL`` and ``PEPPOL_REPORT_DATABASE_SCHEMA``:
          Connection settings for the ``sql`` backend.
        - ``PEPPOL_REPORT_MIGRATE``: Create SQL tables on open (boolean).

        Returns
        -------
        ReportingConfig
            Configuration populated from environment variables.

        Raises
        ------
        ReportingConfigError
            If the backend is unknown or one of its settings is missing.

        """
        raw_backend = os.environ.get("PEPPOL_REPORT_STORAGE", "")
        backend = (
            cls._parse_backend(raw_backend)
            if raw_backend.strip()
            else StorageBackend.FILE
        )
        raw_dir = os.environ.get("PEPPOL_REPORT_DIR", "").strip()
        return cls(
            storage_backend=backend,
            report_dir=Path(raw_dir) if raw_dir else None,
            mongodb_url=os.environ.get("PEPPOL_REPORT_MONGODB_URL") or None,
            mongodb_database=os.environ.get("PEPPOL_REPORT_MONGODB_DATABASE") or None,
            database_url=os.environ.get("PEPPOL_REPORT_DATABASE_URL") or None,
            database_schema=os.environ.get("PEPPOL_REPORT_DATABASE_SCHEMA") or None,
            migrate=cls._parse_bool("PEPPOL_REPORT_MIGRATE"),
        )

    @classmethod
    def from_settings(cls, settings: ReportingSettings) -> ReportingConfig:
        """Create configuration from parsed YAML settings."""
        return cls(
            storage_backend=cls._parse_backend(settings.storage),
            report_dir=Path(settings.report_dir) if settings.report_dir else None,
            mongodb_url=settings.mongodb_url,
            mongodb_database=settings.mongodb_database,
            database_url=settings.database_url,
            database_schema=settings.database_schema,
            migrate=settings.migrate,
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> ReportingConfig:
        """Load configuration from a YAML 1.2 file.

        Raises
        ------
        ReportingConfigError
            If the file cannot be read, is empty, or does not match
            :class:`ReportingSettings`.

        """
        yaml = _yaml()
        path_obj = Path(path)

        try:
            loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
        except (OSError, YAMLError) as exc:
            msg = f"failed to parse YAML: {exc}"
            raise ReportingConfigError(msg) from exc

        if loaded is None:
            msg = f"reporting configuration file is empty: {path_obj}"
            raise ReportingConfigError(msg)

        try:
            settings = msgspec.convert(loaded, type=ReportingSettings)
        except msgspec.ValidationError as exc:
            msg = f"schema validation failed: {exc}"
            raise ReportingConfigError(msg) from exc

        return cls.from_settings(settings)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
