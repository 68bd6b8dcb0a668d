"""Listener registration with cancellable subscription handles."""

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by ``EventEmitter.on``; ``cancel()`` detaches the listener."""

    def __init__(self, emitter: "EventEmitter", event: str, callback: Callable):
        self._emitter = emitter
        self.event = event
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        if not self._active:
            return
        self._active = False
        self._emitter._remove(self)


class EventEmitter:
    """Synchronous fan-out of named events to registered callbacks.

    Listeners run in registration order on the caller's thread. A listener
    that raises is logged and does not stop the others.
    """

    def __init__(self, events: tuple[str, ...]):
        self._listeners: dict[str, list[Subscription]] = {name: [] for name in events}

    def on(self, event: str, callback: Callable) -> Subscription:
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event!r}")
        subscription = Subscription(self, event, callback)
        self._listeners[event].append(subscription)
        return subscription

    def emit(self, event: str, *args):
        for subscription in list(self._listeners[event]):
            if not subscription.active:
                continue
            try:
                subscription.callback(*args)
            except Exception:
                logger.exception("Listener for %r failed", event)

    def listener_count(self, event: str) -> int:
        return len(self._listeners[event])

    def _remove(self, subscription: Subscription):
        listeners = self._listeners.get(subscription.event, [])
        if subscription in listeners:
            listeners.remove(subscription)
