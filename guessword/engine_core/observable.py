"""
Observable - Minimal observable value container.

A consumer registers a listener and is called synchronously every time the
value is set, including when the new value equals the old one. The latest
value can be read at any time through `.value`.
"""

from __future__ import annotations
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Listener = Callable[[T], None]


class ObservableValue(Generic[T]):
    """
    Holds one value and notifies listeners on every set.

    Usage:
        score = ObservableValue(0)
        unsubscribe = score.observe(lambda value: print(value))
        score.set(1)     # prints 1
        unsubscribe()
    """

    def __init__(self, initial: T):
        self._value = initial
        self._listeners: list[Listener[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(value)

    def observe(self, listener: Listener[T]) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def map(self, transform: Callable[[T], U]) -> ObservableValue[U]:
        """
        Derive a read-only view that is recomputed whenever this value is set.

        The derived value keeps its own listeners and follows this one for
        as long as this observable lives.
        """
        derived: ObservableValue[U] = ObservableValue(transform(self._value))
        self._listeners.append(lambda value: derived.set(transform(value)))
        return derived

    def __repr__(self) -> str:
        return f"ObservableValue({self._value!r})"
