"""
Single-flight tracking.

Keeps the set of keys whose work is currently in flight and rejects a
second attempt for the same key instead of queueing or merging it. Work
started through `run` is bounded by a timeout and can be cancelled by the
caller; the key is released on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Awaitable, Callable, Hashable, Iterator, Optional, Set, TypeVar

from core.errors import AlreadyInProgressError, ProcessingCancelledError, ProcessingTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlightTracker:
    def __init__(self, *, timeout_seconds: float = 30.0) -> None:
        self._timeout = float(timeout_seconds)
        self._in_flight: Set[Hashable] = set()

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def begin(self, key: Hashable) -> None:
        # Check and insert with no await in between: this is the only
        # thing keeping two tasks from claiming the same key.
        if key in self._in_flight:
            logger.warning("Rejected duplicate processing of %r", key)
            raise AlreadyInProgressError(key)
        self._in_flight.add(key)
        logger.debug("Processing of %r started (%d in flight)", key, len(self._in_flight))

    def end(self, key: Hashable) -> None:
        self._in_flight.discard(key)
        logger.debug("Processing of %r finished (%d in flight)", key, len(self._in_flight))

    def is_in_progress(self, key: Hashable) -> bool:
        return key in self._in_flight

    def count(self) -> int:
        return len(self._in_flight)

    @contextmanager
    def claim(self, key: Hashable) -> Iterator[None]:
        """Hold `key` for the duration of the block; released on any exit."""
        self.begin(key)
        try:
            yield
        finally:
            self.end(key)

    async def run(
        self,
        key: Hashable,
        work: Callable[[], Awaitable[T]],
        *,
        cancel_event: Optional[asyncio.Event] = None,
        timeout_seconds: Optional[float] = None,
    ) -> T:
        """Run `work()` as the single in-flight attempt for `key`.

        The work races a deadline and, when given, `cancel_event`. Whichever
        settles first decides the outcome:
          - work: its result is returned (or its exception re-raised);
          - deadline: ProcessingTimeoutError, the late result is discarded;
          - cancel_event: ProcessingCancelledError.

        Raises AlreadyInProgressError without calling `work` if `key` is
        already tracked.
        """
        timeout = self._timeout if timeout_seconds is None else float(timeout_seconds)

        with self.claim(key):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Processing of %r cancelled before start", key)
                raise ProcessingCancelledError(key)

            task = asyncio.ensure_future(work())
            waiters: Set[asyncio.Future] = {task}
            cancel_waiter: Optional[asyncio.Future] = None
            if cancel_event is not None:
                cancel_waiter = asyncio.ensure_future(cancel_event.wait())
                waiters.add(cancel_waiter)

            try:
                done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
            finally:
                # Losers are abandoned; never leave them running past this call.
                for waiter in waiters:
                    if not waiter.done():
                        waiter.cancel()

            # Work wins ties: a result that is already there is not thrown away.
            if task in done:
                return task.result()

            if cancel_waiter is not None and cancel_waiter in done:
                logger.warning("Processing of %r cancelled by caller", key)
                raise ProcessingCancelledError(key)

            logger.warning("Processing of %r timed out after %.1fs", key, timeout)
            raise ProcessingTimeoutError(key, timeout)
