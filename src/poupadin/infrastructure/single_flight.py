"""
Single-flight: one in-flight operation, many waiters.

Hey future me - this is the primitive the whole token renewal hangs on. When
five requests hit 401 at the same moment, exactly ONE of them may call
/auth/refresh; the other four wait for that call and get the same result.

    renewal = SingleFlight[RenewalResult]()
    result = await renewal.run(perform_renewal)

How it works:
- The slot holds nothing or one asyncio.Task.
- run() with an empty slot starts the operation as a Task and parks it in the
  slot. run() with a busy slot just awaits the Task that's already there.
- The Task empties the slot itself when the operation finishes (success OR
  failure), so the next 401 after that starts a fresh operation.
- Everybody awaits through asyncio.shield(): if the caller that STARTED the
  operation gets cancelled, the operation keeps running for the others.

No lock needed: there is no await between "slot is empty" and "slot is
filled", and asyncio never switches tasks without an await.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SingleFlight(Generic[T]):
    """Guarded slot holding at most one shared in-flight operation.

    Attributes:
        name: Label used in log lines
        _task: The in-flight operation (None when idle)
        _flights: Number of operations started so far
        _waiters: Callers currently awaiting the operation
    """

    name: str = "single-flight"

    _task: "asyncio.Task[T] | None" = field(default=None, init=False, repr=False)
    _flights: int = field(default=0, init=False)
    _waiters: int = field(default=0, init=False)

    @property
    def in_flight(self) -> bool:
        """True while an operation is running."""
        return self._task is not None

    @property
    def flights(self) -> int:
        """How many operations were actually started (not joined)."""
        return self._flights

    @property
    def waiters(self) -> int:
        """How many callers are awaiting the in-flight operation right now."""
        return self._waiters

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run `operation`, or join the one already running.

        Args:
            operation: Zero-arg coroutine function. Only called when no
                operation is in flight.

        Returns:
            The shared operation's result

        Raises:
            Whatever the shared operation raised - every waiter sees it.
        """
        task = self._task
        if task is None:
            self._flights += 1
            task = asyncio.ensure_future(self._execute(operation))
            task.add_done_callback(_mark_retrieved)
            self._task = task
            logger.debug("%s: started flight #%d", self.name, self._flights)
        else:
            logger.debug("%s: joining flight #%d", self.name, self._flights)

        self._waiters += 1
        try:
            return await asyncio.shield(task)
        finally:
            self._waiters -= 1

    async def _execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        finally:
            self._task = None


def _mark_retrieved(task: "asyncio.Task[object]") -> None:
    # All waiters may have been cancelled; fetch the exception so asyncio doesn't
    # report it as never retrieved.
    if not task.cancelled():
        task.exception()
