"""Debounced, single-slot scheduling of manifest processing passes."""

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from ..utils.logging import get_logger


T = TypeVar("T")

DEFAULT_INTERVAL = 0.3

logger = get_logger("version_lens.scheduler")


class UpdateScheduler(Generic[T]):
    """Collapse bursts of triggers into one pass, never running two at once.

    ``trigger`` restarts a trailing-edge timer. When the timer fires while
    a pass is still running, the trigger is dropped rather than queued and
    the running pass still delivers its result.

    Each started pass takes a new generation; :meth:`cancel` advances the
    generation too. A pass whose generation is no longer current when it
    completes has its result discarded instead of delivered.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None],
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.callback = callback
        self.on_result = on_result
        self.interval = interval
        self.generation = 0
        self.busy = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional["asyncio.Task[None]"] = None
        self._fired: Optional[asyncio.Event] = None

    def trigger(self) -> None:
        """Request a pass. Must be called from within the running loop."""
        loop = asyncio.get_running_loop()

        if self._timer is not None:
            self._timer.cancel()
        if self._fired is None or self._fired.is_set():
            self._fired = asyncio.Event()

        logger.debug("Scheduling version check update")
        self._timer = loop.call_later(self.interval, self._fire)

    def _fire(self) -> None:
        self._timer = None
        fired = self._fired
        try:
            if self.busy:
                logger.debug("Update already in progress, skipping")
                return
            self.busy = True
            self.generation += 1
            self._task = asyncio.ensure_future(self._run(self.generation))
        finally:
            if fired is not None:
                fired.set()

    async def _run(self, generation: int) -> None:
        try:
            result = await self.callback()
        except Exception as e:
            logger.error(f"Error updating version status: {e!r}")
            return
        finally:
            self.busy = False

        if generation != self.generation:
            logger.debug(f"Discarding stale result from generation {generation}")
            return
        self.on_result(result)

    @property
    def pending(self) -> bool:
        return self._timer is not None

    async def wait_idle(self) -> None:
        """Wait for a pending timer to fire and for the running pass to finish."""
        if self._timer is not None and self._fired is not None:
            await self._fired.wait()
        if self._task is not None:
            await self._task

    def cancel(self) -> None:
        """Stop the pending timer and discard the result of a running pass."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._fired is not None:
            self._fired.set()
        self.generation += 1
