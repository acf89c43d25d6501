"""Cancellable timed commit for a missed card."""

import asyncio
import logging

from flashdrill.application.session_queue import PendingMiss, SessionQueue

logger = logging.getLogger(__name__)


class DeferredMiss:
    """
    Handle for a miss whose commit waits out the feedback window.

    Whoever holds the handle must cancel it when tearing down; a cancelled
    handle never touches the queue or the scheduler.
    """

    def __init__(
        self,
        queue: SessionQueue,
        pending: PendingMiss,
        delay: float,
        loop: asyncio.AbstractEventLoop,
    ):
        self.pending = pending
        self._queue = queue
        self._done = False
        self._cancelled = False
        self._handle = loop.call_later(delay, self._fire)

    @property
    def done(self) -> bool:
        return self._done

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _fire(self) -> None:
        if self._cancelled or self._done:
            return
        self._done = True
        self._queue.commit_miss(self.pending)

    def cancel(self) -> bool:
        """Cancel the commit. Returns False if it already fired."""
        if self._done or self._cancelled:
            return False
        self._cancelled = True
        self._handle.cancel()
        self._queue.cancel_miss(self.pending)
        return True


def schedule_miss(
    queue: SessionQueue,
    delay: float,
    loop: asyncio.AbstractEventLoop | None = None,
) -> DeferredMiss | None:
    """
    Begin a miss on the current card and commit it after delay seconds.

    Must be called from a running event loop unless loop is given.
    Returns None if there is no card to judge or a miss is already pending.
    """
    pending = queue.begin_miss()
    if pending is None:
        return None

    if loop is None:
        loop = asyncio.get_running_loop()

    logger.debug(f"Miss on card {pending.card_id} commits in {delay}s")
    return DeferredMiss(queue, pending, delay, loop)
