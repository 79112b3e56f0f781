"""Single-value publication channel (latest value plus listeners)."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _deliver(listener: Callable[[T], None], value: T) -> None:
    try:
        listener(value)
    except Exception:
        logger.warning("StateFlow listener %r failed", listener, exc_info=True)


class StateFlow(Generic[T]):
    """
    Holds the latest published value and pushes changes to listeners.

    subscribe() delivers the current value right away and every later one
    after it (replay-of-one). There is no backlog: a listener only ever sees
    values published while it is attached.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            listeners = list(self._listeners)
        for listener in listeners:
            _deliver(listener, value)

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
            current = self._value
        _deliver(listener, current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
