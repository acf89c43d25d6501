"""
Session queue for a single review pass.

Seeds the pass from the cards that are due (or the whole catalog when
nothing is due), removes cards answered correctly, and pushes missed
cards back a few slots so they resurface later in the same pass.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from flashdrill.application.scheduler import Scheduler
from flashdrill.domain.constants import MIN_REQUEUE_OFFSET

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    SUSPENDED = "suspended"  # A miss is waiting to be committed
    COMPLETE = "complete"


@dataclass(frozen=True)
class PendingMiss:
    """
    An incorrect judgment captured at the moment it was made.

    The requeue is computed from this snapshot when the miss is committed,
    whatever happened to the live queue in between.
    """

    card_id: int
    position: int
    snapshot: tuple[int, ...]


def requeue_position(position: int, remaining: int) -> int:
    """
    Index at which a missed card is reinserted.

    Args:
        position: Index the card occupied before removal.
        remaining: Queue length after removing the card.
    """
    ahead = max(MIN_REQUEUE_OFFSET, remaining // 2)
    return min(position + ahead, remaining)


def requeue_after_miss(queue: Sequence[int], position: int) -> list[int]:
    """Return a copy of queue with the card at position moved back."""
    reordered = list(queue)
    card_id = reordered.pop(position)
    reordered.insert(requeue_position(position, len(reordered)), card_id)
    return reordered


class SessionQueue:
    """
    Ordered working set of card ids for the current pass.

    The active card is always at the cursor and the cursor returns to 0
    after every judgment, so the head of the queue is the current card.
    """

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._queue: list[int] = []
        self._cursor = 0
        self._pending: PendingMiss | None = None
        self._state = SessionState.LOADING

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pending(self) -> PendingMiss | None:
        return self._pending

    @property
    def is_complete(self) -> bool:
        return self._state == SessionState.COMPLETE

    @property
    def is_suspended(self) -> bool:
        return self._pending is not None

    def snapshot(self) -> tuple[int, ...]:
        return tuple(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def current(self) -> int | None:
        if not self._queue:
            return None
        return self._queue[self._cursor]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, catalog_ids: Sequence[int], now: int | None = None) -> list[int]:
        """
        Build the queue for a new pass.

        Cards never seen before count as due. If nothing is due, the whole
        catalog is offered so a non-empty catalog never yields an empty pass.
        """
        if self._pending is not None:
            self.cancel_miss(self._pending)

        if now is None:
            now = self._scheduler.now()

        due = [
            cid
            for cid in catalog_ids
            if not self._scheduler.has_stats(cid)
            or self._scheduler.get_stats(cid).next_review_at <= now
        ]
        working = due if due else list(catalog_ids)

        self._queue = self._scheduler.sort_by_priority(working)
        self._cursor = 0
        self._settle()

        logger.info(
            f"Session initialized: {len(self._queue)} cards "
            f"({len(due)} due of {len(catalog_ids)})"
        )
        return list(self._queue)

    def reset(self) -> None:
        if self._pending is not None:
            self.cancel_miss(self._pending)
        self._queue = []
        self._cursor = 0
        self._state = SessionState.LOADING

    def _settle(self) -> None:
        self._cursor = 0
        if self._pending is not None:
            self._state = SessionState.SUSPENDED
        elif self._queue:
            self._state = SessionState.ACTIVE
        else:
            self._state = SessionState.COMPLETE

    # ------------------------------------------------------------------
    # Judgments
    # ------------------------------------------------------------------

    def on_correct(self) -> int | None:
        """
        Record a correct answer for the current card and drop it from the pass.

        Returns the judged card id, or None if there was nothing to judge.
        """
        card_id = self.current()
        if card_id is None or self.is_suspended:
            return None

        self._scheduler.record_correct(card_id)
        del self._queue[self._cursor]
        self._settle()
        return card_id

    def on_incorrect(self) -> int | None:
        """Record a miss for the current card and requeue it immediately."""
        pending = self.begin_miss()
        if pending is None:
            return None
        self.commit_miss(pending)
        return pending.card_id

    def begin_miss(self) -> PendingMiss | None:
        """
        Capture a miss without applying it.

        The session is suspended until the miss is committed or cancelled;
        further judgments are refused meanwhile.
        """
        card_id = self.current()
        if card_id is None or self.is_suspended:
            return None

        self._pending = PendingMiss(
            card_id=card_id,
            position=self._cursor,
            snapshot=tuple(self._queue),
        )
        self._state = SessionState.SUSPENDED
        return self._pending

    def commit_miss(self, pending: PendingMiss) -> bool:
        """
        Apply a captured miss. Has effect at most once per PendingMiss.

        Returns False if the miss is stale (already committed, cancelled,
        or superseded by a reset).
        """
        if pending is not self._pending:
            logger.debug(f"Ignoring stale miss for card {pending.card_id}")
            return False

        self._pending = None
        self._scheduler.record_incorrect(pending.card_id)
        self._queue = requeue_after_miss(pending.snapshot, pending.position)
        self._settle()
        return True

    def cancel_miss(self, pending: PendingMiss) -> bool:
        if pending is not self._pending:
            return False
        self._pending = None
        self._settle()
        logger.debug(f"Cancelled pending miss for card {pending.card_id}")
        return True
