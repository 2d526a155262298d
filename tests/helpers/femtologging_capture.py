"""Capture femtologging output from chronodesk modules in tests."""

from __future__ import annotations

import contextlib
import dataclasses
import threading
import time
import typing as typ

from femtologging import get_logger


@dataclasses.dataclass(slots=True)
class CapturedRecord:
    """One femtologging record seen by :class:`LogCapture`."""

    logger: str
    level: str
    message: str
    exc_info: object | None = None


class LogCapture:
    """Python handler collecting records from the femtologging worker thread."""

    def __init__(self) -> None:
        """Start with no records."""
        self.records: list[CapturedRecord] = []
        self._condition = threading.Condition()

    def handle(self, logger: str, level: str, message: str) -> None:
        """Receive a plain record."""
        self._append(
            CapturedRecord(logger=str(logger), level=str(level), message=message)
        )

    def handle_record(self, record: dict[str, object]) -> None:
        """Receive a structured record, including exception information."""
        self._append(
            CapturedRecord(
                logger=str(record.get("logger", "")),
                level=str(record.get("level", "")),
                message=str(record.get("message", "")),
                exc_info=record.get("exc_info"),
            )
        )

    def _append(self, record: CapturedRecord) -> None:
        with self._condition:
            self.records.append(record)
            self._condition.notify_all()

    def wait_for_count(self, count: int, timeout: float = 1.0) -> None:
        """Block until ``count`` records arrived, failing after ``timeout``."""
        deadline = time.monotonic() + timeout
        with self._condition:
            while len(self.records) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._condition.wait(timeout=remaining)
        assert len(self.records) >= count, (
            f"Expected {count} records, got {len(self.records)}"
        )

    def messages(self) -> list[str]:
        """Return the captured messages in arrival order."""
        with self._condition:
            return [record.message for record in self.records]


@contextlib.contextmanager
def capture_logs(
    logger_name: str,
    *,
    level: str = "TRACE",
) -> typ.Iterator[LogCapture]:
    """Attach a :class:`LogCapture` to ``logger_name`` for the block."""
    logger = get_logger(logger_name)
    previous_level = logger.level
    previous_propagate = logger.propagate
    logger.set_level(level)
    logger.set_propagate(False)

    capture = LogCapture()
    logger.add_handler(capture)
    try:
        yield capture
    finally:
        logger.remove_handler(capture)
        logger.set_level(previous_level)
        logger.set_propagate(previous_propagate)
