import pytest

from log_viewer.config import Config
from log_viewer.events import EventEmitter
from log_viewer.transport import TRANSPORT_EVENTS


class FakeTransport:
    """Stands in for WebSocketTransport; tests fire lifecycle events by hand."""

    def __init__(self, url: str):
        self.url = url
        self.opened = False
        self.closed = False
        self._events = EventEmitter(TRANSPORT_EVENTS)

    def on(self, event, callback):
        return self._events.on(event, callback)

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True

    def fire(self, event, *args):
        self._events.emit(event, *args)

    def listener_count(self) -> int:
        return sum(self._events.listener_count(e) for e in TRANSPORT_EVENTS)


class TransportFactory:
    """Records every transport the connection manager creates."""

    def __init__(self):
        self.created: list[FakeTransport] = []

    def __call__(self, url):
        transport = FakeTransport(url)
        self.created.append(transport)
        return transport

    @property
    def latest(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def transports():
    return TransportFactory()


@pytest.fixture
def config():
    return Config(url="ws://test.invalid:3000", reconnect_delay=0.05)


@pytest.fixture
def clock():
    return lambda: "12:34:56"
