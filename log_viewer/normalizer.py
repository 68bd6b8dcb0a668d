"""Classify raw websocket frames into log records and apply them to the store."""

import json
import logging
from datetime import datetime
from typing import Any, Callable

from log_viewer.log_store import LogStore
from log_viewer.models import DEFAULT_LEVEL, LogRecord

logger = logging.getLogger(__name__)

HISTORY_TYPE = "HISTORY"
LOG_TYPE = "log"
STRUCTURED_FIELDS = ("timestamp", "level", "message")


def wall_clock() -> str:
    return datetime.now().strftime("%H:%M:%S")


class MessageNormalizer:
    """Turns one frame into zero or more records, in a fixed precedence order.

    1. Frames that are not JSON are kept verbatim as one unstructured record.
    2. ``{"type": "HISTORY", "data": ...}`` replaces the store with a batch.
    3. Objects carrying timestamp, level and message become a structured record.
    4. ``{"type": "log", ...}`` becomes a record with defaults filled in.
    5. Any other object with a ``message`` key is treated like (4).
    6. Everything else is dropped.

    The returned list holds the records produced by the frame. ``last_action``
    tells whether they were appended, replaced the store, or nothing happened.
    """

    def __init__(self, store: LogStore, clock: Callable[[], str] = wall_clock):
        self._store = store
        self._clock = clock
        self.last_action: str | None = None

    def handle(self, frame: str | bytes) -> list[LogRecord]:
        self.last_action = None
        if isinstance(frame, (bytes, bytearray)):
            frame = bytes(frame).decode("utf-8", errors="replace")

        try:
            payload = json.loads(frame)
        except (ValueError, RecursionError):
            # RecursionError: nesting too deep for the decoder
            return self._handle_raw(frame)

        if not isinstance(payload, dict):
            logger.debug("Ignoring non-object frame: %.200s", frame)
            return []

        if payload.get("type") == HISTORY_TYPE and payload.get("data") not in (None, ""):
            return self._handle_history(payload["data"])

        if all(key in payload for key in STRUCTURED_FIELDS):
            return self._append(self._build(payload))

        if payload.get("type") == LOG_TYPE or "message" in payload:
            return self._append(self._build(payload))

        logger.debug("Unrecognized frame dropped: %.200s", frame)
        return []

    def _handle_raw(self, frame: str) -> list[LogRecord]:
        if not frame.strip():
            return []
        logger.debug("Frame is not JSON, keeping it verbatim: %.200s", frame)
        record = LogRecord(
            line_number=self._store.next_line_number(),
            timestamp=self._clock(),
            level=DEFAULT_LEVEL,
            message=frame,
            is_structured=False,
        )
        return self._append(record)

    def _handle_history(self, data: Any) -> list[LogRecord]:
        if isinstance(data, str):
            entries: list[Any] = [line for line in data.split("\n") if line.strip()]
        elif isinstance(data, list):
            entries = data
        else:
            entries = [data]

        start = self._store.next_line_number()
        records = [
            self._build(entry, line_number=start + offset, is_history=True)
            for offset, entry in enumerate(entries)
        ]
        self._store.replace(records)
        self.last_action = "replace"
        logger.info("History batch received: %d lines", len(records))
        return records

    def _append(self, record: LogRecord) -> list[LogRecord]:
        self._store.append(record)
        self.last_action = "append"
        return [record]

    def _build(self, entry: Any, line_number: int | None = None, is_history: bool = False) -> LogRecord:
        if line_number is None:
            line_number = self._store.next_line_number()

        if not isinstance(entry, dict):
            return LogRecord(
                line_number=line_number,
                timestamp=self._clock(),
                level=DEFAULT_LEVEL,
                message=entry if isinstance(entry, str) else _stringify(entry),
                is_history=is_history,
            )

        timestamp = entry.get("timestamp")
        level = entry.get("level")
        # a null message counts as missing
        message = entry.get("message")
        if message is None:
            message = entry
        flag = entry.get("isStructured")
        return LogRecord(
            line_number=line_number,
            timestamp=str(timestamp) if timestamp else self._clock(),
            level=str(level).upper() if level else DEFAULT_LEVEL,
            message=message if isinstance(message, str) else _stringify(message),
            is_structured=flag if isinstance(flag, bool) else True,
            is_history=is_history,
        )


def _stringify(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), default=str)
