"""Connection lifecycle state machine with fixed-delay reconnect."""

import asyncio
import logging
from typing import Callable

from log_viewer.models import ConnectionState
from log_viewer.transport import WebSocketTransport

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 3.0

STATUS_DISCONNECTED = "Disconnected"
STATUS_CONNECTING = "Connecting..."
STATUS_CONNECTED = "Connected"
STATUS_RECONNECTING = "Reconnecting..."
STATUS_ERROR = "Error"
STATUS_CLOSED = "Closed"


class ConnectionManager:
    """Owns the active transport and the pending reconnect timer.

    - connect(): closes whatever transport exists, then opens a new one
    - transport open: CONNECTED
    - transport close: DISCONNECTED, then a reconnect after ``reconnect_delay``
    - transport error: status "Error" only; the close that follows reconnects
    - teardown(): CLOSED for good; every later event or request is ignored

    All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        url: str,
        on_frame: Callable,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        max_reconnect_attempts: int = 0,
        transport_factory: Callable | None = None,
        on_status: Callable[[str, ConnectionState], None] | None = None,
    ):
        self._url = url
        self._on_frame = on_frame
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_attempts = max_reconnect_attempts
        self._transport_factory = transport_factory or WebSocketTransport
        self._on_status = on_status

        self._state = ConnectionState.DISCONNECTED
        self._status = STATUS_DISCONNECTED
        self._transport = None
        self._subscriptions: list = []
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._reconnect_attempts = 0
        self._connect_count = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_handle is not None

    @property
    def connect_count(self) -> int:
        """Number of transports opened so far."""
        return self._connect_count

    @property
    def transport(self):
        return self._transport

    def start(self):
        self.connect()

    def connect(self):
        if self._state is ConnectionState.CLOSED:
            logger.debug("Connect ignored, connection manager is closed")
            return

        self._cancel_reconnect()
        self._release_transport()

        if self._state is not ConnectionState.RECONNECTING:
            self._set_state(ConnectionState.CONNECTING, STATUS_CONNECTING)

        transport = self._transport_factory(self._url)
        self._subscriptions = [
            transport.on("open", self._handle_open),
            transport.on("message", self._handle_message),
            transport.on("error", self._handle_error),
            transport.on("close", self._handle_close),
        ]
        self._transport = transport
        self._connect_count += 1
        logger.info("Connecting to %s", self._url)
        transport.open()

    def teardown(self):
        if self._state is ConnectionState.CLOSED:
            return
        self._set_state(ConnectionState.CLOSED, STATUS_CLOSED)
        self._cancel_reconnect()
        self._release_transport()
        logger.info("Connection to %s torn down", self._url)

    def _release_transport(self):
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        if self._transport is not None:
            self._transport.close()
            self._transport = None

    def _cancel_reconnect(self):
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    def _handle_open(self):
        if self._state is ConnectionState.CLOSED:
            return
        self._reconnect_attempts = 0
        self._set_state(ConnectionState.CONNECTED, STATUS_CONNECTED)
        logger.info("Connected to %s", self._url)

    def _handle_message(self, frame):
        if self._state is ConnectionState.CLOSED:
            return
        self._on_frame(frame)

    def _handle_error(self, error):
        if self._state is ConnectionState.CLOSED:
            return
        logger.warning("Transport error: %s", error)
        self._set_status(STATUS_ERROR)

    def _handle_close(self):
        if self._state is ConnectionState.CLOSED:
            return
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self._transport = None
        self._set_state(ConnectionState.DISCONNECTED, STATUS_DISCONNECTED)
        logger.info("Disconnected from %s", self._url)

        if self._max_reconnect_attempts and self._reconnect_attempts >= self._max_reconnect_attempts:
            logger.error(
                "Giving up on %s after %d reconnect attempts",
                self._url, self._reconnect_attempts,
            )
            return

        self._cancel_reconnect()
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(self._reconnect_delay, self._fire_reconnect)
        logger.info("Reconnecting in %.1fs", self._reconnect_delay)

    def _fire_reconnect(self):
        self._reconnect_handle = None
        if self._state is ConnectionState.CLOSED:
            return
        self._reconnect_attempts += 1
        self._set_state(ConnectionState.RECONNECTING, STATUS_RECONNECTING)
        self.connect()

    def _set_state(self, state: ConnectionState, status: str):
        self._state = state
        self._set_status(status)

    def _set_status(self, status: str):
        self._status = status
        if self._on_status is not None:
            self._on_status(status, self._state)
