"""MongoDB adapter for the ReportStorage protocol.

Reports and sending receipts are inserted as one document each into two
collections.  Report documents have the fields ``reporttype``, ``year``,
``month``, ``creationdt``, ``payload`` and ``payloadvalid``; sending report
documents drop ``payloadvalid`` and carry ``payload`` only when the sender
returned a receipt.

The storage does not own a client.  It asks a supplier for a
:class:`MongoClientHandle` on every call so the connection lifecycle stays
with the application.

Usage
-----
>>> handle = MongoClientHandle.connect("mongodb://localhost:27017", "peppol")
>>> storage = MongoReportStorage(lambda: handle)
>>> storage.store_report(report_data)
<Outcome.SUCCESS: 'success'>
>>> handle.close()

"""

from __future__ import annotations

import typing as typ

import pymongo
from pymongo.errors import ConnectionFailure, PyMongoError

from peppol_support.common.outcome import Outcome
from peppol_support.common.time import ensure_aware
from peppol_support.logging import get_logger, log_error, log_info, log_warning
from peppol_support.reporting.models import ReportData, SendingReportData
from peppol_support.reporting.types import ReportPeriod, ReportType
from peppol_support.storage.errors import StorageContractError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pymongo.collection import Collection
    from pymongo.database import Database

logger = get_logger(__name__)

DEFAULT_REPORTS_COLLECTION = "peppol-reports"
DEFAULT_SENDING_REPORTS_COLLECTION = "peppol-reporting-sending-reports"

FIELD_REPORT_TYPE = "reporttype"
FIELD_YEAR = "year"
FIELD_MONTH = "month"
FIELD_CREATION_DT = "creationdt"
FIELD_PAYLOAD = "payload"
FIELD_PAYLOAD_VALID = "payloadvalid"


class MongoClientHandle:
    """Own a ``MongoClient`` bound to one database.

    Parameters
    ----------
    client
        The client to use; closed by :meth:`close`.
    database_name
        Name of the database holding the report collections.

    """

    def __init__(self, client: pymongo.MongoClient, database_name: str) -> None:
        """Bind ``client`` to ``database_name``."""
        if not database_name:
            msg = "MongoDB database name must not be empty"
            raise ValueError(msg)
        self._client = client
        self._database_name = database_name

    @classmethod
    def connect(cls, url: str, database_name: str) -> MongoClientHandle:
        """Create a handle with a new client for ``url``.

        The client connects lazily, so this does not contact the server.
        """
        if not url:
            msg = "MongoDB connection string must not be empty"
            raise ValueError(msg)
        return cls(pymongo.MongoClient(url, tz_aware=True), database_name)

    @property
    def database(self) -> Database:
        """Return the report database."""
        return self._client[self._database_name]

    def get_collection(self, name: str) -> Collection:
        """Return the collection ``name`` in the report database."""
        return self.database[name]

    def is_writable(self) -> bool:
        """Return ``True`` when the connected server accepts writes."""
        try:
            hello = self._client.admin.command("hello")
        except PyMongoError as exc:
            log_warning(
                logger,
                "MongoDB database '%s' is not reachable",
                self._database_name,
                exc_info=exc,
            )
            return False
        return bool(hello.get("isWritablePrimary", hello.get("ismaster", False)))

    def close(self) -> None:
        """Close the underlying client."""
        self._client.close()

    def __enter__(self) -> MongoClientHandle:
        """Return the handle for use as a context manager."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the handle on context exit."""
        self.close()


class _WritableHandle(typ.Protocol):
    def is_writable(self) -> bool: ...

    def get_collection(self, name: str) -> typ.Any: ...  # noqa: ANN401


def report_to_document(report: ReportData) -> dict[str, object]:
    """Return the MongoDB document for a report."""
    return {
        FIELD_REPORT_TYPE: report.report_type.id,
        FIELD_YEAR: report.period.year,
        FIELD_MONTH: report.period.month,
        FIELD_CREATION_DT: report.created_at,
        FIELD_PAYLOAD: report.payload,
        FIELD_PAYLOAD_VALID: report.is_valid,
    }


def sending_report_to_document(sending_report: SendingReportData) -> dict[str, object]:
    """Return the MongoDB document for a sending report."""
    document: dict[str, object] = {
        FIELD_REPORT_TYPE: sending_report.report_type.id,
        FIELD_YEAR: sending_report.period.year,
        FIELD_MONTH: sending_report.period.month,
        FIELD_CREATION_DT: sending_report.created_at,
    }
    if sending_report.receipt is not None:
        document[FIELD_PAYLOAD] = sending_report.receipt
    return document


def report_from_document(document: cabc.Mapping[str, typ.Any]) -> ReportData:
    """Rebuild a report record from a stored document.

    Raises
    ------
    ValueError
        If the document names an unknown report type.

    """
    report_type = ReportType.from_id(document[FIELD_REPORT_TYPE])
    if report_type is None:
        msg = f"unknown report type in MongoDB document: {document[FIELD_REPORT_TYPE]!r}"
        raise ValueError(msg)
    return ReportData(
        report_type=report_type,
        period=ReportPeriod(document[FIELD_YEAR], document[FIELD_MONTH]),
        created_at=ensure_aware(document[FIELD_CREATION_DT]),
        payload=document[FIELD_PAYLOAD],
        is_valid=bool(document[FIELD_PAYLOAD_VALID]),
    )


class MongoReportStorage:
    """Store reports and sending receipts in MongoDB collections.

    Parameters
    ----------
    client_supplier
        Returns the handle to use for each call, or ``None`` when no client
        is available.

    """

    def __init__(
        self, client_supplier: cabc.Callable[[], _WritableHandle | None]
    ) -> None:
        """Initialise the storage with the default collection names."""
        self._client_supplier = client_supplier
        self._reports_collection = DEFAULT_REPORTS_COLLECTION
        self._sending_reports_collection = DEFAULT_SENDING_REPORTS_COLLECTION

    @property
    def reports_collection(self) -> str:
        """Return the collection name for reports."""
        return self._reports_collection

    @reports_collection.setter
    def reports_collection(self, name: str) -> None:
        if not name:
            msg = "collection name for Peppol Reports must not be empty"
            raise ValueError(msg)
        if name != self._reports_collection:
            log_info(
                logger,
                "Using MongoDB collection name '%s' to store Peppol Reports",
                name,
            )
            self._reports_collection = name

    @property
    def sending_reports_collection(self) -> str:
        """Return the collection name for sending reports."""
        return self._sending_reports_collection

    @sending_reports_collection.setter
    def sending_reports_collection(self, name: str) -> None:
        if not name:
            msg = "collection name for Peppol Reporting Sending Reports must not be empty"
            raise ValueError(msg)
        if name != self._sending_reports_collection:
            log_info(
                logger,
                "Using MongoDB collection name '%s' to store Peppol Reporting "
                "Sending Reports",
                name,
            )
            self._sending_reports_collection = name

    def _writable_handle(self) -> _WritableHandle | None:
        handle = self._client_supplier()
        if handle is None:
            log_error(logger, "No MongoDB client is available")
            return None
        if not handle.is_writable():
            log_error(logger, "MongoDB database is not writable")
            return None
        return handle

    def _insert(self, collection_name: str, document: dict[str, object]) -> Outcome:
        handle = self._writable_handle()
        if handle is None:
            return Outcome.FAILURE
        try:
            result = handle.get_collection(collection_name).insert_one(document)
        except ConnectionFailure as exc:
            log_error(
                logger,
                "Failed to reach MongoDB for collection '%s'",
                collection_name,
                exc_info=exc,
            )
            return Outcome.FAILURE
        if not result.acknowledged:
            raise StorageContractError.unacknowledged(collection_name)
        return Outcome.SUCCESS

    def store_report(self, report: ReportData) -> Outcome:
        """Insert ``report`` into the reports collection.

        Raises
        ------
        StorageContractError
            If the server did not acknowledge the insert.

        """
        return self._insert(self._reports_collection, report_to_document(report))

    def store_sending_report(self, sending_report: SendingReportData) -> Outcome:
        """Insert ``sending_report`` into the sending reports collection.

        Raises
        ------
        StorageContractError
            If the server did not acknowledge the insert.

        """
        return self._insert(
            self._sending_reports_collection,
            sending_report_to_document(sending_report),
        )

    def find_reports(
        self,
        period: ReportPeriod | None = None,
        report_type: ReportType | None = None,
    ) -> list[ReportData]:
        """Return stored reports, oldest first, optionally filtered.

        Returns an empty list when no client is available.
        """
        handle = self._client_supplier()
        if handle is None:
            return []
        query: dict[str, object] = {}
        if period is not None:
            query[FIELD_YEAR] = period.year
            query[FIELD_MONTH] = period.month
        if report_type is not None:
            query[FIELD_REPORT_TYPE] = report_type.id
        cursor = handle.get_collection(self._reports_collection).find(
            query, sort=[(FIELD_CREATION_DT, pymongo.ASCENDING)]
        )
        return [report_from_document(document) for document in cursor]
