from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Dict

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Awaitable[None]]


class TimerManager:
    """Keyed one-shot timers running as asyncio tasks.

    Keys look like ``reset:<room>`` or ``disconnect:<player>``; scheduling a
    key that is already pending replaces the earlier timer unless
    ``replace`` is False.
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, key: str, delay: float, callback: TimerCallback, replace: bool = True) -> bool:
        if self.pending(key):
            if not replace:
                return False
            self.cancel(key)
        task = asyncio.get_running_loop().create_task(self._run(key, delay, callback))
        self._tasks[key] = task
        logger.debug(f"[timer-set] key={key} delay={delay}s")
        return True

    def cancel(self, key: str) -> bool:
        task = self._tasks.pop(key, None)
        if not task:
            return False
        if not task.done():
            task.cancel()
            logger.debug(f"[timer-cancel] key={key}")
        return True

    def pending(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(key)

    async def _run(self, key: str, delay: float, callback: TimerCallback):
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            return
        # Drop the entry before firing so the callback may reschedule the key
        if self._tasks.get(key) is asyncio.current_task():
            del self._tasks[key]
        logger.debug(f"[timer-fire] key={key}")
        try:
            await callback()
        except Exception:
            logger.exception(f"[timer-error] key={key}")
