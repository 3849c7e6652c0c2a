"""Cancel-and-restart timers on the asyncio loop."""

import asyncio
import inspect
from typing import Any, Callable, Optional


class Debouncer:
    """Run a callback once events stop arriving for `delay` seconds.

    Every trigger() cancels the pending firing, so a stale call can never
    run after a newer one.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._args: tuple = ()
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        self._args = args
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        result = self.callback(*self._args)
        if inspect.isawaitable(result):
            self._task = asyncio.ensure_future(result)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Fire a pending call immediately instead of waiting for the delay."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        result = self.callback(*self._args)
        if inspect.isawaitable(result):
            await result
