"""
Events - Buzz types and edge-triggered events.

An edge-triggered event fires once on a transition and stays pending until a
consumer acknowledges it. Firing returns a Ticket; acknowledging through the
ticket only clears that specific firing, so a consumer holding a stale ticket
can never swallow a newer event.

Unacknowledged events are overwritten by the next firing (last write wins).
Nothing is ever queued.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, TypeVar
import logging

from .observable import ObservableValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BuzzType(Enum):
    """
    Haptic cues of the game.

    The pattern is the number of milliseconds each interval of waiting and
    vibrating takes, starting with a wait.
    """
    CORRECT = "correct"
    GAME_OVER = "game_over"
    COUNTDOWN_PANIC = "countdown_panic"
    NO_BUZZ = "no_buzz"

    @property
    def pattern(self) -> tuple[int, ...]:
        return BUZZ_PATTERNS[self]


BUZZ_PATTERNS: dict[BuzzType, tuple[int, ...]] = {
    BuzzType.CORRECT: (100, 100, 100, 100, 100, 100),
    BuzzType.GAME_OVER: (0, 2000),
    BuzzType.COUNTDOWN_PANIC: (0, 200),
    BuzzType.NO_BUZZ: (0,),
}


@dataclass(frozen=True)
class Ticket(Generic[T]):
    """
    One firing (or reset) of an EdgeEvent.

    serial is 0 for the idle state and increases with every firing.
    """
    event: EdgeEvent[T]
    value: T
    serial: int

    @property
    def fired(self) -> bool:
        return self.serial != 0

    @property
    def pending(self) -> bool:
        """True while this firing is the current, unacknowledged one."""
        return self.fired and self.event.current is self

    def acknowledge(self) -> bool:
        return self.event.acknowledge(self)


class EdgeEvent(Generic[T]):
    """
    Edge-triggered event with explicit acknowledgement.

    Usage:
        round_over = EdgeEvent(idle=False, name="round_over")
        round_over.observe(on_round_over)

        ticket = round_over.fire(True)   # listeners get the ticket
        ticket.acknowledge()             # back to idle, listeners notified
    """

    def __init__(self, idle: T, name: str = "event"):
        self.idle = idle
        self.name = name
        self._serial = 0
        self._ticket: ObservableValue[Ticket[T]] = ObservableValue(
            Ticket(event=self, value=idle, serial=0)
        )

    @property
    def current(self) -> Ticket[T]:
        return self._ticket.value

    @property
    def value(self) -> T:
        return self._ticket.value.value

    @property
    def is_pending(self) -> bool:
        return self._ticket.value.fired

    def fire(self, value: T) -> Ticket[T]:
        """Fire the event, replacing any unacknowledged firing."""
        previous = self._ticket.value
        if previous.fired:
            logger.debug(
                "%s: %r overwritten by %r before acknowledgement",
                self.name, previous.value, value,
            )
        self._serial += 1
        ticket = Ticket(event=self, value=value, serial=self._serial)
        self._ticket.set(ticket)
        return ticket

    def acknowledge(self, ticket: Ticket[T] | None = None) -> bool:
        """
        Reset the event to idle.

        Args:
            ticket: If given, only acknowledge when it is still the current
                firing.

        Returns:
            True if a pending firing was cleared.
        """
        current = self._ticket.value
        if not current.fired:
            return False
        if ticket is not None and ticket is not current:
            return False
        self._ticket.set(Ticket(event=self, value=self.idle, serial=0))
        return True

    def observe(self, listener: Callable[[Ticket[T]], None]) -> Callable[[], None]:
        return self._ticket.observe(listener)

    def __repr__(self) -> str:
        return f"EdgeEvent({self.name}={self.value!r}, pending={self.is_pending})"
