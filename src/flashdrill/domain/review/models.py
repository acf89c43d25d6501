"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from typing import Any

from flashdrill.domain.constants import INITIAL_EASE_FACTOR


@dataclass(frozen=True)
class Card:
    """
    A single reviewable item.

    Attributes:
        id: Stable identifier, unique within a catalog.
        front: Prompt side (e.g. product name).
        back: Answer side (e.g. numeric code).
    """

    id: int
    front: str
    back: str


@dataclass
class ReviewStat:
    """
    Durable review statistics for one card.

    Times are epoch milliseconds.
    """

    card_id: int
    interval_days: int = 0
    repetitions: int = 0  # Consecutive successes since the last miss
    ease_factor: float = INITIAL_EASE_FACTOR
    next_review_at: int = 0
    total_attempts: int = 0
    correct_attempts: int = 0
    last_reviewed_at: int | None = None

    def is_due(self, now: int) -> bool:
        return self.next_review_at < now

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted (camelCase) field names."""
        return {
            "id": self.card_id,
            "interval": self.interval_days,
            "repetitions": self.repetitions,
            "easeFactor": self.ease_factor,
            "nextReview": self.next_review_at,
            "totalAttempts": self.total_attempts,
            "correctAttempts": self.correct_attempts,
            "lastReviewDate": self.last_reviewed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewStat":
        last = data.get("lastReviewDate")
        return cls(
            card_id=int(data["id"]),
            interval_days=int(data["interval"]),
            repetitions=int(data["repetitions"]),
            ease_factor=float(data["easeFactor"]),
            next_review_at=int(data["nextReview"]),
            total_attempts=int(data.get("totalAttempts", 0)),
            correct_attempts=int(data.get("correctAttempts", 0)),
            last_reviewed_at=int(last) if last is not None else None,
        )


@dataclass(frozen=True)
class GlobalStats:
    """Aggregate counts across every tracked card."""

    total_cards: int
    mastered_cards: int
    review_due_count: int
