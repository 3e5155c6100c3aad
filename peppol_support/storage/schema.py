"""Relational tables for the SQL report storage."""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from peppol_support.reporting.errors import TimezoneAwareRequiredError
from peppol_support.reporting.types import MAX_LEN_ID

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Dialect, Engine


class Base(DeclarativeBase):
    """Base declarative class for report storage tables."""


class UTCDateTime(TypeDecorator[dt.datetime]):
    """DateTime wrapper that round-trips UTC tzinfo even on SQLite.

    MySQL has no zone-aware type, so values are bound as naive UTC into a
    ``DATETIME(3)`` column that keeps the milliseconds.
    """

    impl = DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=3), "mysql")
    cache_ok = True

    def process_bind_param(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Force bound datetime values to UTC with tzinfo."""
        if value is None:
            return None
        if value.tzinfo is None:
            raise TimezoneAwareRequiredError.for_creation_time()
        value = value.astimezone(dt.UTC)
        if dialect.name == "mysql":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Ensure result datetimes are UTC and timezone aware."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class PeppolReportRow(Base):
    """Insert-only record of a validated (or invalid) report."""

    __tablename__ = "peppol_report"
    __table_args__ = (Index("ix_peppol_report_period", "repyear", "repmonth"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reptype: Mapped[str] = mapped_column(String(MAX_LEN_ID))
    repyear: Mapped[int] = mapped_column(Integer)
    repmonth: Mapped[int] = mapped_column(Integer)
    repcreatedt: Mapped[dt.datetime] = mapped_column(UTCDateTime())
    report: Mapped[str] = mapped_column(Text())
    repvalid: Mapped[bool] = mapped_column(Boolean)


class PeppolSendingReportRow(Base):
    """Insert-only record of a sent report's receipt."""

    __tablename__ = "peppol_sending_report"
    __table_args__ = (
        Index("ix_peppol_sending_report_period", "repyear", "repmonth"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reptype: Mapped[str] = mapped_column(String(MAX_LEN_ID))
    repyear: Mapped[int] = mapped_column(Integer)
    repmonth: Mapped[int] = mapped_column(Integer)
    repcreatedt: Mapped[dt.datetime] = mapped_column(UTCDateTime())
    sendingreport: Mapped[str | None] = mapped_column(Text(), default=None)


def in_schema(connection: Connection, schema: str | None) -> Connection:
    """Return ``connection`` with the report tables mapped into ``schema``."""
    if not schema:
        return connection
    return connection.execution_options(schema_translate_map={None: schema})


def qualified_table_name(table_name: str, schema: str | None) -> str:
    """Return ``schema.table_name``, or the bare name without a schema."""
    return f"{schema}.{table_name}" if schema else table_name


def init_report_storage(engine: Engine, schema: str | None = None) -> None:
    """Create the report tables in ``schema`` if they are absent."""
    with engine.begin() as conn:
        Base.metadata.create_all(in_schema(conn, schema))
