"""
Timer - Interval scheduler abstraction driving the countdown.

A scheduler delivers `on_tick(elapsed_ticks)` once per interval, `count`
times, and `on_finish()` right after the last tick. Cancelling is synchronous:
once `cancel()` returns, the handle never delivers again, also when cancel is
called from inside one of its own callbacks.

Implementations:
- ManualScheduler: virtual clock, advanced explicitly (tests, simulations)
- AsyncioScheduler: runs on an asyncio event loop

All callbacks run in the caller's single execution context (the thread that
calls ManualScheduler.advance, or the event loop thread). The engine relies
on this and does no locking.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable
import asyncio
import itertools
import logging

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]
FinishCallback = Callable[[], None]


class TimerState(Enum):
    SCHEDULED = "scheduled"
    FINISHED = "finished"
    CANCELLED = "cancelled"


@dataclass(eq=False)
class TimerHandle:
    """A periodic timer created by a scheduler."""
    timer_id: int
    interval: float
    count: int
    on_tick: TickCallback = field(repr=False)
    on_finish: FinishCallback = field(repr=False)
    started_at: float = 0.0
    ticks_delivered: int = 0
    state: TimerState = TimerState.SCHEDULED

    @property
    def active(self) -> bool:
        return self.state is TimerState.SCHEDULED

    @property
    def next_due(self) -> float:
        """Clock time of the next tick."""
        return self.started_at + (self.ticks_delivered + 1) * self.interval

    def deliver_tick(self) -> None:
        """Deliver one tick, then the finish notification if it was the last."""
        self.ticks_delivered += 1
        self.on_tick(self.ticks_delivered)
        # on_tick may have cancelled us
        if self.active and self.ticks_delivered >= self.count:
            self.state = TimerState.FINISHED
            self.on_finish()


class IntervalScheduler(ABC):
    """Schedules periodic timers with reliable cancellation."""

    def __init__(self):
        self._ids = itertools.count(1)

    @abstractmethod
    def schedule_periodic(
        self,
        interval: float,
        count: int,
        on_tick: TickCallback,
        on_finish: FinishCallback,
    ) -> TimerHandle:
        """
        Start a periodic timer.

        Args:
            interval: Seconds between ticks
            count: Number of ticks before the finish notification
            on_tick: Called with the number of ticks elapsed so far
            on_finish: Called once after the last tick

        Returns:
            Handle to pass to cancel()
        """
        ...

    def cancel(self, handle: TimerHandle) -> None:
        """Stop a timer. Safe to call on finished or cancelled handles."""
        if handle.active:
            handle.state = TimerState.CANCELLED
            logger.debug(
                "timer %d cancelled after %d/%d ticks",
                handle.timer_id, handle.ticks_delivered, handle.count,
            )

    def _new_handle(
        self,
        interval: float,
        count: int,
        on_tick: TickCallback,
        on_finish: FinishCallback,
        started_at: float,
    ) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        return TimerHandle(
            timer_id=next(self._ids),
            interval=interval,
            count=count,
            on_tick=on_tick,
            on_finish=on_finish,
            started_at=started_at,
        )


class ManualScheduler(IntervalScheduler):
    """
    Scheduler on a virtual clock.

    Nothing happens until advance() is called; all due ticks are then
    delivered in clock order on the calling thread.

    Usage:
        scheduler = ManualScheduler()
        engine = RoundEngine(scheduler=scheduler)
        engine.start()
        scheduler.advance(60)   # runs the whole countdown
    """

    def __init__(self):
        super().__init__()
        self.now = 0.0
        self._timers: list[TimerHandle] = []

    def schedule_periodic(
        self,
        interval: float,
        count: int,
        on_tick: TickCallback,
        on_finish: FinishCallback,
    ) -> TimerHandle:
        handle = self._new_handle(interval, count, on_tick, on_finish, started_at=self.now)
        self._timers.append(handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        super().cancel(handle)
        if handle in self._timers:
            self._timers.remove(handle)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, delivering every tick that falls due.

        Returns:
            Number of ticks delivered
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        target = self.now + seconds
        delivered = 0
        while True:
            due = [h for h in self._timers if h.active and h.next_due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.next_due, h.timer_id))
            self.now = handle.next_due
            handle.deliver_tick()
            delivered += 1
        self._timers = [h for h in self._timers if h.active]
        self.now = target
        return delivered

    @property
    def active_timers(self) -> list[TimerHandle]:
        return [h for h in self._timers if h.active]


class AsyncioScheduler(IntervalScheduler):
    """
    Scheduler on an asyncio event loop.

    Ticks are planned with loop.call_at relative to the start time, so a slow
    callback does not shift the following ticks. schedule_periodic() and
    cancel() must be called from the loop thread.

    Args:
        loop: Event loop to use (defaults to the running loop at schedule time)
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        super().__init__()
        self._loop = loop
        self._pending: dict[int, asyncio.TimerHandle] = {}

    def schedule_periodic(
        self,
        interval: float,
        count: int,
        on_tick: TickCallback,
        on_finish: FinishCallback,
    ) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        handle = self._new_handle(interval, count, on_tick, on_finish, started_at=loop.time())
        self._arm(loop, handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        super().cancel(handle)
        pending = self._pending.pop(handle.timer_id, None)
        if pending is not None:
            pending.cancel()

    def _arm(self, loop: asyncio.AbstractEventLoop, handle: TimerHandle) -> None:
        self._pending[handle.timer_id] = loop.call_at(
            handle.next_due, self._fire, loop, handle
        )

    def _fire(self, loop: asyncio.AbstractEventLoop, handle: TimerHandle) -> None:
        self._pending.pop(handle.timer_id, None)
        if not handle.active:
            return
        handle.deliver_tick()
        if handle.active:
            self._arm(loop, handle)

    @property
    def pending_count(self) -> int:
        return len(self._pending)
