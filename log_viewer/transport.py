"""Websocket transport that reports its lifecycle as events."""

import asyncio
import logging

from websockets.asyncio.client import connect
from websockets.exceptions import WebSocketException

from log_viewer.events import EventEmitter, Subscription

logger = logging.getLogger(__name__)

TRANSPORT_EVENTS = ("open", "message", "error", "close")


class WebSocketTransport:
    """A single websocket connection.

    ``open()`` starts a reader task on the running loop. Listeners receive
    ``open()``, ``message(frame)``, ``error(exc)`` and finally ``close()``,
    which fires exactly once per opened transport, including one closed
    before its handshake started. Failed handshakes report ``error`` followed
    by ``close``.
    """

    def __init__(self, url: str, open_timeout: float = 10.0):
        self._url = url
        self._open_timeout = open_timeout
        self._events = EventEmitter(TRANSPORT_EVENTS)
        self._task: asyncio.Task | None = None
        self._ws = None
        self._closing = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    def on(self, event: str, callback) -> Subscription:
        return self._events.on(event, callback)

    def open(self):
        if self._task is not None:
            raise RuntimeError("Transport already opened")
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._on_done)

    def close(self):
        """Stop the reader task; the ``close`` event follows asynchronously."""
        if self._closing:
            return
        self._closing = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_closed(self):
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self):
        try:
            async with connect(self._url, open_timeout=self._open_timeout) as ws:
                self._ws = ws
                logger.debug("Websocket open: %s", self._url)
                self._events.emit("open")
                async for frame in ws:
                    self._events.emit("message", frame)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            logger.warning("Websocket error on %s: %s", self._url, e)
            self._events.emit("error", e)

    def _on_done(self, task: asyncio.Task):
        self._ws = None
        if not task.cancelled() and task.exception() is not None:
            logger.error("Websocket reader for %s crashed", self._url, exc_info=task.exception())
        self._events.emit("close")
