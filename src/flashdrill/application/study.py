"""
Study Session: Application layer orchestrator.

Coordinates the scheduler, the session queue, daily progress and miss
feedback for a front end (CLI or HTTP). Front ends own presentation and
timing; everything stateful goes through here.
"""

import asyncio
import logging
import random

from flashdrill.application.deferred import DeferredMiss, schedule_miss
from flashdrill.application.feedback import MissFeedback, build_miss_feedback
from flashdrill.application.progress import DailyProgress, ProgressSnapshot
from flashdrill.application.scheduler import Scheduler
from flashdrill.application.session_queue import PendingMiss, SessionQueue
from flashdrill.domain.review.models import Card, GlobalStats

logger = logging.getLogger(__name__)


class StudySession:
    """
    One learner working through one catalog.

    Follows Dependency Inversion: receives an already-built Scheduler and
    DailyProgress rather than choosing storage itself.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        progress: DailyProgress,
        cards: list[Card],
        shuffle: bool = False,
        rng: random.Random | None = None,
    ):
        """
        Args:
            scheduler: Owner of per-card review stats.
            progress: Tracker for today's correct answers.
            cards: The catalog, ids unique.
            shuffle: Shuffle the catalog before seeding the queue, which
                varies the order of cards with equal priority.
            rng: Optional random source for shuffling and feedback selection.
        """
        self.scheduler = scheduler
        self.progress = progress
        self.queue = SessionQueue(scheduler)
        self._rng = rng or random.Random()
        self._cards = list(cards)
        if shuffle:
            self._rng.shuffle(self._cards)
        self._by_id = {card.id: card for card in self._cards}
        self._deferred: DeferredMiss | None = None
        self._pending: PendingMiss | None = None

    @property
    def cards(self) -> list[Card]:
        return list(self._cards)

    def card(self, card_id: int) -> Card | None:
        return self._by_id.get(card_id)

    def start(self) -> list[int]:
        """Roll daily progress over if needed and seed a fresh pass."""
        self._cancel_pending()
        self.progress.roll_over()
        return self.queue.initialize([card.id for card in self._cards])

    def current_card(self) -> Card | None:
        card_id = self.queue.current()
        if card_id is None:
            return None
        return self._by_id.get(card_id)

    def answer_correct(self) -> Card | None:
        card_id = self.queue.on_correct()
        if card_id is None:
            return None
        self.progress.mark_correct(card_id)
        return self._by_id.get(card_id)

    def answer_incorrect(self) -> tuple[PendingMiss, MissFeedback] | None:
        """
        Capture a miss on the current card and return feedback to show.

        The caller commits the returned PendingMiss via commit_miss once the
        feedback window is over.
        """
        card = self.current_card()
        if card is None:
            return None
        pending = self.queue.begin_miss()
        if pending is None:
            return None
        self._pending = pending
        return pending, build_miss_feedback(card, self._rng)

    def defer_miss(
        self,
        delay: float,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> tuple[DeferredMiss, MissFeedback] | None:
        """Like answer_incorrect, but commits on its own after delay seconds."""
        card = self.current_card()
        if card is None:
            return None
        deferred = schedule_miss(self.queue, delay, loop)
        if deferred is None:
            return None
        self._deferred = deferred
        return deferred, build_miss_feedback(card, self._rng)

    def commit_miss(self, pending: PendingMiss) -> bool:
        if pending is self._pending:
            self._pending = None
        return self.queue.commit_miss(pending)

    def progress_snapshot(self) -> ProgressSnapshot:
        return self.progress.snapshot(len(self._cards))

    def global_stats(self) -> GlobalStats:
        return self.scheduler.global_stats()

    def reset_all(self) -> None:
        """Forget all review history and today's progress, then reseed."""
        self._cancel_pending()
        self.queue.reset()
        self.scheduler.reset()
        self.progress.clear()
        self.start()

    def close(self) -> None:
        self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            if self.queue.cancel_miss(self._pending):
                logger.info(f"Cancelled pending miss for card {self._pending.card_id}")
            self._pending = None
        self._cancel_deferred()

    def _cancel_deferred(self) -> None:
        if self._deferred is not None:
            if self._deferred.cancel():
                logger.info(f"Cancelled pending miss for card {self._deferred.pending.card_id}")
            self._deferred = None
