"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest
from sqlalchemy import create_engine

from peppol_support.reporting.models import ReportData, SendingReportData
from peppol_support.reporting.types import ReportPeriod, ReportType
from peppol_support.storage.schema import init_report_storage

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

CREATED_AT = dt.datetime(2024, 4, 1, 10, 30, 15, 123000, tzinfo=dt.UTC)


@pytest.fixture
def report_period() -> ReportPeriod:
    """Return the March 2024 reporting period."""
    return ReportPeriod(2024, 3)


@pytest.fixture
def report_data(report_period: ReportPeriod) -> ReportData:
    """Return a valid TSR record created on 1 April 2024."""
    return ReportData(
        report_type=ReportType.TSR_V10,
        period=report_period,
        created_at=CREATED_AT,
        payload="<TransactionStatisticsReport>ok</TransactionStatisticsReport>",
        is_valid=True,
    )


@pytest.fixture
def sending_report_data(report_period: ReportPeriod) -> SendingReportData:
    """Return a TSR sending record carrying a receipt."""
    return SendingReportData(
        report_type=ReportType.TSR_V10,
        period=report_period,
        created_at=CREATED_AT,
        receipt="<Receipt>delivered</Receipt>",
    )


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> typ.Iterator[Engine]:
    """Yield a file-backed SQLite engine with the report tables created."""
    engine = create_engine(f"sqlite:///{tmp_path / 'reports.db'}")
    init_report_storage(engine)
    try:
        yield engine
    finally:
        engine.dispose()
