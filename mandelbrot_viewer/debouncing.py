"""Cancellable deferred calls for debouncing bursts of view changes."""

import asyncio
import logging


logger = logging.getLogger(__name__)


class Debouncer:
    """
    Run a callback once a burst of triggers has been quiet for a while.

    Each call replaces the pending deferred call (it never stacks), so
    only the arguments of the last trigger in a burst reach the
    callback. Scheduling uses the running asyncio loop.

    Args:
        callback: Callable to run after the quiet period
        delay_ms: Quiet period in milliseconds
    """

    def __init__(self, callback, *, delay_ms):
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._callback = callback
        self._delay_s = delay_ms / 1000.0
        self._handle = None

    @property
    def pending(self):
        return self._handle is not None

    def __call__(self, *args, **kwargs):
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self._delay_s, self._fire, args, kwargs)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args, kwargs):
        self._handle = None
        try:
            self._callback(*args, **kwargs)
        except Exception:
            logger.exception("Debouncer callback failed")
