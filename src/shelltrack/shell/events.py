"""Publish/subscribe channels used by sessions and the service."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from shelltrack.logging import get_logger

log = get_logger("events")

T = TypeVar("T")

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]


class EventEmitter(Generic[T]):
    """A single event channel.

    ``subscribe`` returns an unsubscribe function. Listeners run in
    subscription order; one failing listener is logged and does not stop
    delivery to the rest.
    """

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._listeners: list[Listener[T]] = []
        self._disposed = False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener[T]) -> Unsubscribe:
        """Register a listener.

        Args:
            listener: Called with every fired event.

        Returns:
            Unsubscribe function - call it to remove the listener
        """
        if self._disposed:
            return lambda: None

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def fire(self, event: T) -> None:
        if self._disposed:
            return
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Listener for %s failed", self._name or "event")

    def dispose(self) -> None:
        self._listeners.clear()
        self._disposed = True


class DisposableStore:
    """Collects cleanup callables and runs them once, in reverse order."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], None]] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def add(self, callback: Callable[[], None]) -> None:
        if self._disposed:
            callback()
            return
        self._callbacks.append(callback)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        while self._callbacks:
            callback = self._callbacks.pop()
            try:
                callback()
            except Exception:
                log.exception("Cleanup callback failed")
