"""Capture femtologging output so tests can assert on emitted records."""

from __future__ import annotations

import contextlib
import dataclasses
import threading
import time
import typing as typ

from femtologging import get_logger

# femtologging reports warnings as WARN; tests compare against stdlib names.
_LEVEL_ALIASES = {"WARN": "WARNING"}


def _level_name(level: object) -> str:
    name = str(level).upper()
    return _LEVEL_ALIASES.get(name, name)


@dataclasses.dataclass(slots=True)
class FemtoLogRecord:
    """One captured record."""

    logger: str
    level: str
    message: str
    exc_info: object | None = None


class FemtoLogCapture:
    """Python handler collecting records from the femtologging worker."""

    def __init__(self) -> None:
        """Start with no records."""
        self.records: list[FemtoLogRecord] = []
        self._condition = threading.Condition()

    def handle(self, logger: str, level: str, message: str) -> None:
        """Receive a plain record from the worker thread."""
        self._append(FemtoLogRecord(str(logger), _level_name(level), message))

    def handle_record(self, record: dict[str, object]) -> None:
        """Receive a structured record, keeping any exception details."""
        self._append(
            FemtoLogRecord(
                logger=str(record.get("logger", "")),
                level=_level_name(record.get("level", "")),
                message=str(record.get("message", "")),
                exc_info=record.get("exc_info"),
            )
        )

    def _append(self, record: FemtoLogRecord) -> None:
        with self._condition:
            self.records.append(record)
            self._condition.notify_all()

    @property
    def levels(self) -> list[str]:
        """Return the level of every captured record, in order."""
        return [record.level for record in self.records]

    @property
    def messages(self) -> list[str]:
        """Return the message of every captured record, in order."""
        return [record.message for record in self.records]

    def events(self, event_type: str) -> list[FemtoLogRecord]:
        """Return records for a ``[event.type]``-prefixed reporting event."""
        prefix = f"[{event_type}]"
        return [r for r in self.records if r.message.startswith(prefix)]

    def wait_for_count(self, count: int, timeout: float = 1.0) -> None:
        """Block until ``count`` records arrived or ``timeout`` elapsed.

        The femtologging worker delivers records asynchronously, so
        assertions must wait for it before reading ``records``.
        """
        deadline = time.monotonic() + timeout
        with self._condition:
            while len(self.records) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._condition.wait(timeout=remaining)

        assert len(self.records) >= count, (
            f"Expected {count} records, got {len(self.records)}: {self.messages}"
        )


@contextlib.contextmanager
def capture_femto_logs(
    logger_name: str,
    *,
    level: str = "DEBUG",
) -> typ.Iterator[FemtoLogCapture]:
    """Capture records of ``logger_name`` without propagating them."""
    logger = get_logger(logger_name)
    previous_level = logger.level
    previous_propagate = logger.propagate

    logger.set_level(level)
    logger.set_propagate(False)
    handler = FemtoLogCapture()
    logger.add_handler(handler)
    try:
        yield handler
    finally:
        logger.remove_handler(handler)
        logger.set_level(previous_level)
        logger.set_propagate(previous_propagate)
