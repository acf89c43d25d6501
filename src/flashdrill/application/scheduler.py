"""
Review Scheduler: Application layer owner of per-card review state.

Implements an SM-2 style update driven by a binary correct/incorrect signal
and the priority ordering used to seed a review session.
"""

import json
import logging
import math
import time
from collections.abc import Callable, Iterable

from flashdrill.domain.constants import (
    EASE_BONUS_CORRECT,
    EASE_PENALTY_INCORRECT,
    FIRST_INTERVAL_DAYS,
    MASTERED_MIN_EASE,
    MASTERED_MIN_REPETITIONS,
    MIN_EASE_FACTOR,
    MS_PER_DAY,
    RELEARN_DELAY_MS,
    SECOND_INTERVAL_DAYS,
    STATE_KEY,
)
from flashdrill.domain.review.models import GlobalStats, ReviewStat
from flashdrill.domain.review.ports import StateStore

logger = logging.getLogger(__name__)


def epoch_ms() -> int:
    return int(time.time() * 1000)


def _round_half_up(value: float) -> int:
    # round() in Python rounds half to even; intervals round .5 upwards.
    return int(math.floor(value + 0.5))


class Scheduler:
    """
    Application service owning ReviewStat records.

    Follows Dependency Inversion: depends on the StateStore abstraction,
    not a concrete storage adapter. State is read once on construction and
    written back after every mutation.
    """

    def __init__(self, store: StateStore, clock: Callable[[], int] | None = None):
        """
        Args:
            store: The key-value port persisting the stats table.
            clock: Optional source of "now" in epoch ms; wall clock if not provided.
        """
        self._store = store
        self._clock = clock or epoch_ms
        self._state: dict[int, ReviewStat] = {}
        self._load()

    def now(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        try:
            raw = self._store.get(STATE_KEY)
            if not raw:
                return
            data = json.loads(raw)
            self._state = {
                int(key): ReviewStat.from_dict(value) for key, value in data.items()
            }
            logger.debug(f"Loaded review state for {len(self._state)} cards")
        except Exception as e:
            logger.error(f"Failed to load review state, starting fresh: {e}")
            self._state = {}

    def _save(self) -> None:
        payload = {str(cid): stats.to_dict() for cid, stats in self._state.items()}
        try:
            self._store.set(STATE_KEY, json.dumps(payload))
        except Exception as e:
            logger.error(f"Failed to save review state: {e}")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has_stats(self, card_id: int) -> bool:
        return card_id in self._state

    def get_stats(self, card_id: int) -> ReviewStat:
        """
        Return the stats for a card, creating a default record on first touch.

        A fresh record is due immediately, so an unseen card and a due card
        look the same to due-filtering and priority sorting.
        """
        stats = self._state.get(card_id)
        if stats is None:
            stats = ReviewStat(card_id=card_id, next_review_at=self.now())
            self._state[card_id] = stats
            self._save()
        return stats

    def all_stats(self) -> dict[int, ReviewStat]:
        return dict(self._state)

    # ------------------------------------------------------------------
    # Judgments
    # ------------------------------------------------------------------

    def record_correct(self, card_id: int) -> ReviewStat:
        stats = self.get_stats(card_id)
        now = self.now()

        stats.total_attempts += 1
        stats.correct_attempts += 1
        stats.last_reviewed_at = now

        if stats.repetitions == 0:
            stats.interval_days = FIRST_INTERVAL_DAYS
        elif stats.repetitions == 1:
            stats.interval_days = SECOND_INTERVAL_DAYS
        else:
            stats.interval_days = _round_half_up(stats.interval_days * stats.ease_factor)

        stats.repetitions += 1
        stats.ease_factor = max(MIN_EASE_FACTOR, stats.ease_factor + EASE_BONUS_CORRECT)
        stats.next_review_at = now + stats.interval_days * MS_PER_DAY

        logger.debug(
            f"Card {card_id} correct: interval={stats.interval_days}d "
            f"reps={stats.repetitions} ease={stats.ease_factor:.2f}"
        )
        self._save()
        return stats

    def record_incorrect(self, card_id: int) -> ReviewStat:
        stats = self.get_stats(card_id)
        now = self.now()

        stats.total_attempts += 1
        stats.last_reviewed_at = now
        stats.repetitions = 0
        stats.interval_days = 0
        stats.ease_factor = max(MIN_EASE_FACTOR, stats.ease_factor - EASE_PENALTY_INCORRECT)
        stats.next_review_at = now + RELEARN_DELAY_MS

        logger.debug(f"Card {card_id} missed: ease={stats.ease_factor:.2f}")
        self._save()
        return stats

    # ------------------------------------------------------------------
    # Ordering & aggregates
    # ------------------------------------------------------------------

    def sort_by_priority(self, card_ids: Iterable[int]) -> list[int]:
        """
        Order cards most-urgent first.

        1. Due cards before cards that are not yet due.
        2. Lower ease factor first (harder cards).
        3. Fewer repetitions first (less practiced cards).

        The sort is stable, so remaining ties keep their input order.
        """
        ids = list(card_ids)
        now = self.now()
        stats = {cid: self.get_stats(cid) for cid in ids}

        def priority(cid: int) -> tuple[bool, float, int]:
            s = stats[cid]
            return (not s.is_due(now), s.ease_factor, s.repetitions)

        return sorted(ids, key=priority)

    def global_stats(self) -> GlobalStats:
        now = self.now()
        mastered = 0
        due = 0

        for stats in self._state.values():
            if stats.is_due(now):
                due += 1
            if (
                stats.repetitions >= MASTERED_MIN_REPETITIONS
                and stats.ease_factor >= MASTERED_MIN_EASE
            ):
                mastered += 1

        return GlobalStats(
            total_cards=len(self._state),
            mastered_cards=mastered,
            review_due_count=due,
        )

    def reset(self) -> None:
        """Forget every card and drop the persisted table."""
        self._state = {}
        try:
            self._store.remove(STATE_KEY)
        except Exception as e:
            logger.error(f"Failed to clear review state: {e}")
        logger.info("Review state reset")
