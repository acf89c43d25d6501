"""Per-day progress: which cards were answered correctly today."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from flashdrill.domain.constants import CORRECT_ANSWERS_KEY, LAST_SESSION_DATE_KEY
from flashdrill.domain.review.ports import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    current: int
    total: int

    @property
    def percentage(self) -> float:
        return (self.current / self.total) * 100 if self.total > 0 else 0.0


class DailyProgress:
    """
    Tracks the set of cards answered correctly on the current calendar day.

    The set is cleared the first time it is touched on a new day.
    """

    def __init__(self, store: StateStore, today: Callable[[], date] | None = None):
        self._store = store
        self._today = today or date.today
        self._correct: set[int] = self._load()

    def _load(self) -> set[int]:
        try:
            if self._store.get(LAST_SESSION_DATE_KEY) != self._today().isoformat():
                return set()
            raw = self._store.get(CORRECT_ANSWERS_KEY)
            return {int(cid) for cid in json.loads(raw)} if raw else set()
        except Exception as e:
            logger.warning(f"Ignoring unreadable daily progress: {e}")
            return set()

    @property
    def correct_ids(self) -> frozenset[int]:
        return frozenset(self._correct)

    def roll_over(self) -> bool:
        """Start a new day if the stored date is stale. Returns True if it did."""
        today = self._today().isoformat()
        try:
            if self._store.get(LAST_SESSION_DATE_KEY) == today:
                return False
            self._store.set(LAST_SESSION_DATE_KEY, today)
            self._store.remove(CORRECT_ANSWERS_KEY)
        except Exception as e:
            logger.error(f"Failed to roll over daily progress: {e}")
        self._correct = set()
        logger.info(f"New study day: {today}")
        return True

    def mark_correct(self, card_id: int) -> None:
        self._correct.add(card_id)
        try:
            self._store.set(CORRECT_ANSWERS_KEY, json.dumps(sorted(self._correct)))
            self._store.set(LAST_SESSION_DATE_KEY, self._today().isoformat())
        except Exception as e:
            logger.error(f"Failed to save daily progress: {e}")

    def snapshot(self, total: int) -> ProgressSnapshot:
        return ProgressSnapshot(current=len(self._correct), total=total)

    def clear(self) -> None:
        self._correct = set()
        try:
            self._store.remove(CORRECT_ANSWERS_KEY)
        except Exception as e:
            logger.error(f"Failed to clear daily progress: {e}")
