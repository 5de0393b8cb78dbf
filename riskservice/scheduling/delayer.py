"""
Function Delayer
================

Debounces recalculation requests: callbacks identified by a key run once
a fixed quiet period has passed since the last request for that key.

With a delay of 3 seconds, ``delay("foo", fn)`` invoked once runs fn
3 seconds later. Invoked again 2 seconds after the first call, fn runs
3 seconds after the second call (5 seconds after the first).

While a key is pending, further ``delay`` calls only reset its timer: the
callback passed on those calls is ignored and the FIRST callback
registered for the key is the one that eventually runs. Once the
callback has fired the key is free again and the next ``delay`` call
registers its own callback.

The delayer belongs to one asyncio event loop and must only be used from
that loop; the key map is never touched from another thread.

Author: Risk Service Team
Version: 1.0.0
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Set, Tuple

logger = logging.getLogger(__name__)


Callback = Callable[[], Awaitable[None]]


class FunctionDelayer:
    """
    Keyed debounce timer for coroutine callbacks.

    Callback errors are the callback's own responsibility: the delayer
    neither catches nor retries them.

    Usage:
        delayer = FunctionDelayer(duration=5.0)
        delayer.delay("123@http://fhir.example.org", recalculate)
        ...
        await delayer.shutdown(grace=10.0)
    """

    def __init__(self, duration: float):
        """
        Args:
            duration: Quiet period in seconds before a callback runs
        """
        self.duration = duration
        self._timers: Dict[str, Tuple[asyncio.TimerHandle, Callback]] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    def delay(self, key: str, fn: Callback) -> None:
        """
        Schedule ``fn`` to run after the delay, or reset a pending key.

        Raises:
            RuntimeError: If the delayer has been shut down
        """
        if self._closed:
            raise RuntimeError("FunctionDelayer is shut down")

        loop = asyncio.get_running_loop()
        entry = self._timers.get(key)
        if entry is not None:
            handle, original = entry
            handle.cancel()
            self._arm(loop, key, original)
            logger.debug(f"Reset delay for {key}")
        else:
            self._arm(loop, key, fn)
            logger.debug(f"Delaying {key} by {self.duration}s")

    def pending_keys(self) -> List[str]:
        """Keys whose callbacks have not fired yet."""
        return list(self._timers)

    def _arm(self, loop: asyncio.AbstractEventLoop, key: str, fn: Callback) -> None:
        handle = loop.call_later(self.duration, self._fire, key)
        self._timers[key] = (handle, fn)

    def _fire(self, key: str) -> None:
        # Free the key before running so a request arriving during the
        # callback schedules a fresh run.
        _, fn = self._timers.pop(key)
        logger.debug(f"Running delayed callback for {key}")
        self._spawn(fn)

    def _spawn(self, fn: Callback) -> None:
        task = asyncio.ensure_future(fn())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def shutdown(self, grace: float = 10.0) -> None:
        """
        Stop accepting keys, run every pending callback now, and wait up
        to ``grace`` seconds for running callbacks to finish.

        Callbacks still running after the grace period are left alone.
        """
        self._closed = True
        pending = list(self._timers.values())
        self._timers.clear()
        for handle, fn in pending:
            handle.cancel()
            self._spawn(fn)
        logger.info(f"Delayer shutting down: flushed {len(pending)} pending callbacks")

        if self._tasks:
            _, still_running = await asyncio.wait(set(self._tasks), timeout=grace)
            if still_running:
                logger.warning(
                    f"{len(still_running)} callbacks still running after {grace}s grace period"
                )
