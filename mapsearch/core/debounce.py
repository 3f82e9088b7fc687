"""Keyed trailing-edge debouncing on the asyncio event loop."""
import asyncio
import functools
import inspect
from typing import Any, Callable, Dict, Optional

from mapsearch.utils.logging import log_error


class Debouncer:
    """
    Coalesce bursts of calls per key and run only the last one after a quiet period.

    Each key owns at most one pending timer and one running task. Scheduling
    again restarts the timer with the new action; when an action starts, a
    still-running task for the same key is cancelled, so invocations never
    overlap or queue.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize debouncer.

        Args:
            loop: Event loop to schedule on (defaults to the running loop at call time)
        """
        self._loop = loop
        self._handles: Dict[str, asyncio.TimerHandle] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def schedule(self, key: str, action: Callable[..., Any], delay_ms: float, *args) -> None:
        """
        Run action(*args) once no further call for key arrives within delay_ms.

        A delay of 0 still defers to the next loop iteration. Coroutine
        functions are run as tasks owned by the debouncer.
        """
        self._cancel_timer(key)
        delay = max(delay_ms, 0) / 1000.0
        self._handles[key] = self._get_loop().call_later(delay, self._fire, key, action, args)

    def cancel(self, key: str) -> bool:
        """
        Discard the pending action for key and stop its running task, if any.

        Returns:
            True if something was cancelled
        """
        cancelled = self._cancel_timer(key)
        task = self._tasks.pop(key, None)
        if task is not None and not task.done():
            task.cancel()
            cancelled = True
        return cancelled

    def cancel_all(self) -> None:
        for key in list(self._handles) + list(self._tasks):
            self.cancel(key)

    close = cancel_all

    def pending(self, key: str) -> bool:
        """Whether an action for key is waiting on its timer."""
        return key in self._handles

    def running(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def join(self) -> None:
        """Wait for every task started so far to finish."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _cancel_timer(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def _fire(self, key: str, action: Callable[..., Any], args: tuple) -> None:
        self._handles.pop(key, None)

        previous = self._tasks.pop(key, None)
        if previous is not None and not previous.done():
            previous.cancel()

        try:
            result = action(*args)
        except Exception as e:
            log_error(e, {"module": "debounce", "function": "_fire", "key": key})
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks[key] = task
            task.add_done_callback(functools.partial(self._task_done, key))

    def _task_done(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log_error(error, {"module": "debounce", "function": "_task_done", "key": key})
