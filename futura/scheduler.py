"""Schedulers that deliver future continuations outside the registering call."""
import asyncio
import sys
import traceback
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple


class Scheduler(ABC):
    """Runs callbacks later, in the order they were scheduled."""

    @abstractmethod
    def schedule(self, callback: Callable[..., Any], *args: Any) -> None:
        """Arrange for ``callback(*args)`` to run after the current call stack unwinds."""


class QueueScheduler(Scheduler):
    """A FIFO task queue that runs only when explicitly drained.

    Nothing runs until ``run()`` is called, which makes the delivery order of
    continuations fully deterministic.
    """

    def __init__(self):
        self._tasks: Deque[Tuple[Callable[..., Any], Tuple[Any, ...]]] = deque()
        self._running = False

    @property
    def pending(self) -> int:
        """Number of tasks waiting to run."""
        return len(self._tasks)

    def schedule(self, callback: Callable[..., Any], *args: Any) -> None:
        self._tasks.append((callback, args))

    def run(self, limit: Optional[int] = None) -> int:
        """Drain the queue, including tasks scheduled while draining.

        Returns the number of tasks run. Stops early after ``limit`` tasks.
        Calling ``run`` from inside a task is a no-op returning 0.
        """
        if self._running:
            return 0

        self._running = True
        count = 0
        try:
            while self._tasks and (limit is None or count < limit):
                callback, args = self._tasks.popleft()
                count += 1
                try:
                    callback(*args)
                except Exception as e:
                    print(f"ERROR: Scheduled task failed: {e}", file=sys.stderr)
                    traceback.print_exc()
        finally:
            self._running = False
        return count

    def clear(self) -> None:
        """Drop every queued task without running it."""
        self._tasks.clear()


class AsyncioScheduler(Scheduler):
    """Delivers callbacks through an asyncio event loop's ``call_soon``.

    The loop is fixed at construction: either the one given, or the loop
    running in the calling thread. Settling a future later, from outside that
    loop, still queues its continuations on it.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise RuntimeError("AsyncioScheduler needs a running event loop or an explicit loop") from None
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def schedule(self, callback: Callable[..., Any], *args: Any) -> None:
        self._loop.call_soon(callback, *args)
