"""Ordered in-memory record store with a line-number counter."""

import collections

from log_viewer.models import LogRecord


class LogStore:
    """Insertion-ordered log records plus the counter that numbers them.

    A ``max_records`` of 0 keeps everything; otherwise the oldest records are
    evicted once the store is full. Eviction never touches the counter.
    """

    def __init__(self, max_records: int = 0):
        self._max_records = max_records
        self._records: collections.deque[LogRecord] = collections.deque(
            maxlen=max_records or None
        )
        self._counter = 0

    def append(self, record: LogRecord):
        """Add a live record to the end and advance the counter by one."""
        self._counter += 1
        self._records.append(record)

    def replace(self, records: list[LogRecord]):
        """Swap the whole sequence for an already-numbered batch."""
        self._records.clear()
        self._records.extend(records)
        if records:
            self._counter = max(self._counter, max(r.line_number for r in records))

    def clear(self):
        """Drop every record and restart numbering at 1."""
        self._records.clear()
        self._counter = 0

    def next_line_number(self) -> int:
        return self._counter + 1

    @property
    def counter(self) -> int:
        return self._counter

    @property
    def max_records(self) -> int:
        return self._max_records

    @property
    def records(self) -> tuple[LogRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(tuple(self._records))
