"""
Observable value container used by controllers to publish state.

Subscribers are called on the thread that sets the value. GUI code must hop
back to its own thread (see ``ui.bridge.ControllerBridge``).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ObservableValue(Generic[T]):
    """Holds the latest value and republishes it to subscribers on change.

    Setting a value equal to the current one is conflated: nobody is notified.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._lock = threading.RLock()
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> bool:
        """Replace the value; returns True when subscribers were notified."""
        with self._lock:
            if value == self._value:
                return False
            self._value = value
            subscribers = list(self._subscribers)
        self._notify(subscribers, value)
        return True

    def subscribe(
        self, callback: Callable[[T], None], emit_current: bool = True
    ) -> Callable[[], None]:
        """Register ``callback``; returns a function that removes it again."""
        with self._lock:
            self._subscribers.append(callback)
            current = self._value
        if emit_current:
            self._notify([callback], current)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    @staticmethod
    def _notify(subscribers: list[Callable[[T], None]], value: T) -> None:
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("Observable subscriber %r failed", callback)
