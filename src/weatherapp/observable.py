"""Observable values for the presentation boundary.

An Observable holds one current value and notifies subscribers each time
the value actually changes. A new subscriber is called once right away
with the current value, so late subscribers always see the latest state.

Example:
    >>> loading = Observable(False)
    >>> unsubscribe = loading.subscribe(lambda value: print(f"loading={value}"))
    loading=False
    >>> loading.set(True)
    loading=True
    >>> loading.set(True)  # unchanged, no notification
    >>> unsubscribe()
"""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    """A value with change notifications.

    Not thread-safe: set() must be called from the thread (event loop)
    that owns the state.

    Args:
        initial: Starting value.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Replace the value and notify subscribers if it changed.

        Returns:
            True if the value changed and subscribers were notified.
        """
        if value == self._value:
            return False
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Observable subscriber raised")
        return True

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` and call it with the current value.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)
        callback(self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"
