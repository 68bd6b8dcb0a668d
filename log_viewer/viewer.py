"""Presentation-facing facade over the connection, normalizer, store and filter."""

import functools
import logging
from dataclasses import dataclass
from typing import Callable

from log_viewer.config import Config
from log_viewer.connection import ConnectionManager
from log_viewer.events import EventEmitter, Subscription
from log_viewer.filters import ALL_LEVELS, derive_view
from log_viewer.log_store import LogStore
from log_viewer.models import ConnectionState, LogRecord
from log_viewer.normalizer import MessageNormalizer, wall_clock
from log_viewer.transport import WebSocketTransport

logger = logging.getLogger(__name__)

VIEWER_EVENTS = ("append", "replace", "clear", "filter", "status")


@dataclass(frozen=True)
class ViewSnapshot:
    status: str
    state: ConnectionState
    is_connected: bool
    records: tuple[LogRecord, ...]
    levels: tuple[str, ...]
    total_count: int
    displayed_count: int
    selected_level: str


class LogViewer:
    """What a UI reads and the two actions it may take.

    Listeners registered with ``subscribe`` are told about every store change:
    ``append(records)``, ``replace(records)``, ``clear()``, ``filter(level)``
    and ``status(status, state)``.
    """

    def __init__(self, config: Config, transport_factory: Callable | None = None, clock=None):
        self._config = config
        self._store = LogStore(max_records=config.max_records)
        self._normalizer = MessageNormalizer(self._store, clock=clock or wall_clock)
        self._selected_level = (config.level_filter or ALL_LEVELS).strip().upper() or ALL_LEVELS
        self._events = EventEmitter(VIEWER_EVENTS)

        if transport_factory is None:
            transport_factory = functools.partial(
                WebSocketTransport, open_timeout=config.open_timeout
            )
        self._connection = ConnectionManager(
            config.url,
            on_frame=self.handle_frame,
            reconnect_delay=config.reconnect_delay,
            max_reconnect_attempts=config.max_reconnect_attempts,
            transport_factory=transport_factory,
            on_status=self._status_changed,
        )

    @property
    def store(self) -> LogStore:
        return self._store

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def selected_level(self) -> str:
        return self._selected_level

    def start(self):
        self._connection.start()

    def teardown(self):
        self._connection.teardown()

    def subscribe(self, event: str, listener: Callable) -> Subscription:
        return self._events.on(event, listener)

    def handle_frame(self, frame):
        records = self._normalizer.handle(frame)
        action = self._normalizer.last_action
        if action is not None:
            self._events.emit(action, records)

    def clear(self):
        self._store.clear()
        logger.info("Log view cleared")
        self._events.emit("clear")

    def set_filter(self, level: str):
        self._selected_level = level.strip().upper() or ALL_LEVELS
        logger.debug("Level filter set to %s", self._selected_level)
        self._events.emit("filter", self._selected_level)

    def displayed_records(self) -> tuple[LogRecord, ...]:
        return derive_view(self._store, self._selected_level).records

    def snapshot(self) -> ViewSnapshot:
        view = derive_view(self._store, self._selected_level)
        return ViewSnapshot(
            status=self._connection.status,
            state=self._connection.state,
            is_connected=self._connection.is_connected,
            records=view.records,
            levels=view.levels,
            total_count=len(self._store),
            displayed_count=len(view.records),
            selected_level=self._selected_level,
        )

    def _status_changed(self, status: str, state: ConnectionState):
        self._events.emit("status", status, state)
