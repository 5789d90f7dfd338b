"""Timer scheduling for the health monitor.

All monitor activity runs as timer callbacks on a single event loop. This
module provides the scheduling abstraction plus two implementations:
an asyncio-backed scheduler for live hosts and a manually advanced
scheduler with a virtual clock for tests and scripted simulations.
"""

from abc import ABC, abstractmethod
import asyncio
import heapq
import itertools
import logging
from typing import Any, Callable, List, Optional, Tuple


logger = logging.getLogger(__name__)


class SchedulerError(Exception):
    """Exception raised when a timer cannot be scheduled."""
    pass


class TimerHandle:
    """Handle for a scheduled timer.

    Repeating timers keep the same handle across runs, so cancelling it
    stops all future runs.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.cancelled = False
        self._native: Any = None

    def cancel(self) -> None:
        """Cancel the timer. Safe to call more than once."""
        self.cancelled = True
        if self._native is not None:
            self._native.cancel()
            self._native = None


def _run_callback(handle: TimerHandle, callback: Callable[[], None]) -> None:
    """Run a timer callback, logging any exception it raises."""
    try:
        callback()
    except Exception as e:
        logger.error(f"Timer callback '{handle.name}' failed: {e}", exc_info=True)


class Scheduler(ABC):
    """Abstract one-shot and repeating timer facility."""

    @abstractmethod
    def now(self) -> float:
        """Return the current scheduler time in seconds."""
        pass

    @abstractmethod
    def call_later(
        self,
        delay: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        """Run callback once after delay seconds.

        Args:
            delay: Delay in seconds.
            callback: Zero-argument callable.
            name: Label used in log messages.

        Returns:
            Handle that can cancel the timer.
        """
        pass

    @abstractmethod
    def call_every(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        """Run callback every interval seconds until cancelled.

        The first run happens one interval from now.
        """
        pass

    @abstractmethod
    def run_in_background(self, func: Callable[[], None], name: str = "") -> None:
        """Run a blocking callable without stalling the timer loop.

        Used for slow external calls such as issue tracker requests. The
        callable must not touch monitor state; exceptions it raises are
        logged.
        """
        pass


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop.

    Timers are registered with loop.call_later, so callbacks run on the
    loop thread between other tasks and never block it.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Initialize the scheduler.

        Args:
            loop: Event loop to use. Defaults to the running loop.

        Raises:
            SchedulerError: If no loop is given and none is running.
        """
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise SchedulerError(
                    "AsyncioScheduler requires a running event loop or an explicit loop"
                ) from None
        self.loop = loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(
        self,
        delay: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        if self.loop.is_closed():
            raise SchedulerError(f"Event loop is closed, cannot schedule '{name}'")

        handle = TimerHandle(name)
        handle._native = self.loop.call_later(
            max(delay, 0.0), _run_callback, handle, callback
        )
        return handle

    def call_every(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        if interval <= 0:
            raise SchedulerError(f"Interval must be positive, got {interval}")
        if self.loop.is_closed():
            raise SchedulerError(f"Event loop is closed, cannot schedule '{name}'")

        handle = TimerHandle(name)

        def tick() -> None:
            if handle.cancelled:
                return
            _run_callback(handle, callback)
            if not handle.cancelled:
                handle._native = self.loop.call_later(interval, tick)

        handle._native = self.loop.call_later(interval, tick)
        return handle

    def run_in_background(self, func: Callable[[], None], name: str = "") -> None:
        if self.loop.is_closed():
            raise SchedulerError(f"Event loop is closed, cannot run '{name}'")

        future = self.loop.run_in_executor(None, func)

        def done(fut: "asyncio.Future") -> None:
            if fut.cancelled():
                return
            error = fut.exception()
            if error is not None:
                logger.error(f"Background job '{name}' failed: {error}", exc_info=error)

        future.add_done_callback(done)


class ManualScheduler(Scheduler):
    """Scheduler with a virtual clock that only moves when advanced.

    Used by tests and the simulation CLI. Due timers run in deadline order,
    ties broken by registration order.

    Example:
        scheduler = ManualScheduler()
        scheduler.call_later(0.5, check)
        scheduler.advance(0.5)  # check() runs here
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(
        self,
        delay: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        handle = TimerHandle(name)
        self._push(self._now + max(delay, 0.0), handle, callback)
        return handle

    def call_every(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "",
    ) -> TimerHandle:
        if interval <= 0:
            raise SchedulerError(f"Interval must be positive, got {interval}")

        handle = TimerHandle(name)

        def reschedule_and_run() -> None:
            # Re-arm before running so a failing callback keeps repeating
            if not handle.cancelled:
                self._push(self._now + interval, handle, reschedule_and_run)
            callback()

        self._push(self._now + interval, handle, reschedule_and_run)
        return handle

    def run_in_background(self, func: Callable[[], None], name: str = "") -> None:
        """Run func inline; the virtual clock has no worker threads."""
        _run_callback(TimerHandle(name), func)

    def pending(self) -> int:
        """Number of live timers still queued."""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every timer that falls due.

        Timers scheduled by callbacks during the advance also run if their
        deadline is within the window.

        Args:
            seconds: How far to move the clock.

        Returns:
            Number of callbacks that ran.
        """
        if seconds < 0:
            raise SchedulerError("Cannot move the clock backwards")

        deadline = self._now + seconds
        ran = 0

        while self._queue and self._queue[0][0] <= deadline:
            when, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = when
            _run_callback(handle, callback)
            ran += 1

        self._now = deadline
        return ran

    def run_until_idle(self, limit: float = 3600.0) -> int:
        """Advance until no one-shot timers remain within limit seconds.

        Repeating timers never drain, so the loop stops at the limit.
        """
        ran = 0
        end = self._now + limit
        while self._queue and self._now < end:
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                break
            next_when = min(entry[0] for entry in live)
            if next_when > end:
                break
            ran += self.advance(next_when - self._now)
        return ran

    def _push(self, when: float, handle: TimerHandle, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (when, next(self._seq), handle, callback))


def create_scheduler(kind: str = "asyncio") -> Scheduler:
    """Factory function to create a scheduler.

    Args:
        kind: 'asyncio' or 'manual'. 'asyncio' must be created from code
            running on the event loop.

    Returns:
        A Scheduler instance.

    Raises:
        SchedulerError: If the kind is unknown, or 'asyncio' is requested
            with no running loop.
    """
    if kind == "asyncio":
        return AsyncioScheduler()
    if kind == "manual":
        return ManualScheduler()
    raise SchedulerError(f"Unknown scheduler kind: {kind}")
