"""SQL adapter for the ReportStorage protocol.

Each call runs one parameterised INSERT in its own transaction against the
``peppol_report`` or ``peppol_sending_report`` table, optionally inside a
named schema.  Tables are created by :func:`init_report_storage`, which the
application calls once before storing.

Usage
-----
>>> with SQLStorageHandle.from_url("postgresql+psycopg://u:p@db/peppol") as handle:
...     handle.migrate()
...     handle.storage.store_report(report_data)
<Outcome.SUCCESS: 'success'>

"""

from __future__ import annotations

import typing as typ

from sqlalchemy import create_engine, insert, make_url, select
from sqlalchemy.exc import OperationalError

from peppol_support.common.outcome import Outcome
from peppol_support.logging import get_logger, log_error, log_info
from peppol_support.reporting.models import ReportData, SendingReportData
from peppol_support.reporting.types import MAX_LEN_ID, ReportPeriod, ReportType
from peppol_support.storage.errors import StorageContractError, UnsupportedDatabaseError
from peppol_support.storage.schema import (
    PeppolReportRow,
    PeppolSendingReportRow,
    in_schema,
    init_report_storage,
    qualified_table_name,
)

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Engine, Row
    from sqlalchemy.sql import Executable

logger = get_logger(__name__)

ALLOWED_DIALECTS = ("postgresql", "mysql", "sqlite")


def _trimmed(value: str, max_len: int) -> str:
    return value[:max_len]


def _report_type_of(type_id: str) -> ReportType:
    report_type = ReportType.from_id(type_id)
    if report_type is None:
        msg = f"unknown report type in SQL row: {type_id!r}"
        raise ValueError(msg)
    return report_type


class SQLReportStorage:
    """Store reports and sending receipts in relational tables.

    Parameters
    ----------
    engine
        Synchronous SQLAlchemy engine for the report database.
    schema
        Optional schema holding the report tables.

    """

    def __init__(self, engine: Engine, schema: str | None = None) -> None:
        """Bind the storage to ``engine`` and ``schema``."""
        self._engine = engine
        self._schema = schema or None

    @property
    def schema(self) -> str | None:
        """Return the schema holding the report tables."""
        return self._schema

    def _insert_one(self, table_name: str, statement: Executable) -> Outcome:
        table = qualified_table_name(table_name, self._schema)
        try:
            with self._engine.begin() as conn:
                result = in_schema(conn, self._schema).execute(statement)
                if result.rowcount != 1:
                    raise StorageContractError.unexpected_rowcount(
                        table, result.rowcount
                    )
        except OperationalError as exc:
            log_error(
                logger,
                "Failed to insert into SQL table '%s'",
                table,
                exc_info=exc,
            )
            return Outcome.FAILURE
        log_info(logger, "Inserted one row into SQL table '%s'", table)
        return Outcome.SUCCESS

    def store_report(self, report: ReportData) -> Outcome:
        """Insert ``report`` into ``peppol_report``.

        Raises
        ------
        StorageContractError
            If the INSERT did not affect exactly one row.

        """
        statement = insert(PeppolReportRow).values(
            reptype=_trimmed(report.report_type.id, MAX_LEN_ID),
            repyear=report.period.year,
            repmonth=report.period.month,
            repcreatedt=report.created_at,
            report=report.payload,
            repvalid=report.is_valid,
        )
        return self._insert_one(PeppolReportRow.__tablename__, statement)

    def store_sending_report(self, sending_report: SendingReportData) -> Outcome:
        """Insert ``sending_report`` into ``peppol_sending_report``.

        Raises
        ------
        StorageContractError
            If the INSERT did not affect exactly one row.

        """
        statement = insert(PeppolSendingReportRow).values(
            reptype=_trimmed(sending_report.report_type.id, MAX_LEN_ID),
            repyear=sending_report.period.year,
            repmonth=sending_report.period.month,
            repcreatedt=sending_report.created_at,
            sendingreport=sending_report.receipt,
        )
        return self._insert_one(PeppolSendingReportRow.__tablename__, statement)

    def _fetch(self, statement: Executable) -> list[Row[typ.Any]]:
        with self._engine.connect() as conn:
            return list(in_schema(conn, self._schema).execute(statement))

    def fetch_reports(self, period: ReportPeriod | None = None) -> list[ReportData]:
        """Return stored reports, oldest first, optionally for one period."""
        table = PeppolReportRow.__table__
        statement = select(table).order_by(table.c.repcreatedt, table.c.id)
        if period is not None:
            statement = statement.where(
                table.c.repyear == period.year, table.c.repmonth == period.month
            )
        return [
            ReportData(
                report_type=_report_type_of(row.reptype),
                period=ReportPeriod(row.repyear, row.repmonth),
                created_at=row.repcreatedt,
                payload=row.report,
                is_valid=bool(row.repvalid),
            )
            for row in self._fetch(statement)
        ]

    def fetch_sending_reports(
        self, period: ReportPeriod | None = None
    ) -> list[SendingReportData]:
        """Return stored sending reports, oldest first, optionally for one period."""
        table = PeppolSendingReportRow.__table__
        statement = select(table).order_by(table.c.repcreatedt, table.c.id)
        if period is not None:
            statement = statement.where(
                table.c.repyear == period.year, table.c.repmonth == period.month
            )
        return [
            SendingReportData(
                report_type=_report_type_of(row.reptype),
                period=ReportPeriod(row.repyear, row.repmonth),
                created_at=row.repcreatedt,
                receipt=row.sendingreport,
            )
            for row in self._fetch(statement)
        ]


class SQLStorageHandle:
    """Own an engine for a supported database and the storage using it.

    Parameters
    ----------
    engine
        Engine for a PostgreSQL, MySQL or SQLite database.
    schema
        Optional schema holding the report tables.

    Raises
    ------
    UnsupportedDatabaseError
        If the engine's dialect is not supported.

    """

    def __init__(self, engine: Engine, schema: str | None = None) -> None:
        """Validate the engine's dialect and bind the storage."""
        dialect = engine.dialect.name
        if dialect not in ALLOWED_DIALECTS:
            raise UnsupportedDatabaseError(dialect, ALLOWED_DIALECTS)
        self._engine = engine
        self._schema = schema or None
        self._storage = SQLReportStorage(engine, self._schema)

    @classmethod
    def from_url(cls, url: str, schema: str | None = None) -> SQLStorageHandle:
        """Create a handle with a new engine for ``url``.

        The dialect is checked before any driver is loaded.
        """
        backend = make_url(url).get_backend_name()
        if backend not in ALLOWED_DIALECTS:
            raise UnsupportedDatabaseError(backend, ALLOWED_DIALECTS)
        return cls(create_engine(url, pool_pre_ping=True), schema)

    @property
    def engine(self) -> Engine:
        """Return the owned engine."""
        return self._engine

    @property
    def storage(self) -> SQLReportStorage:
        """Return the storage bound to the owned engine."""
        return self._storage

    def migrate(self) -> None:
        """Create the report tables if they are absent."""
        init_report_storage(self._engine, self._schema)

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()

    def __enter__(self) -> SQLStorageHandle:
        """Return the handle for use as a context manager."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Dispose of the engine on context exit."""
        self.close()
