"""Encouraging messages shown while a missed card waits to be requeued."""

import random
from dataclasses import dataclass

from flashdrill.domain.review.models import Card

MISS_TEMPLATES: list[tuple[str, str]] = [
    ("Study and memorize!", "Remember: the code for {front} is {back}. Try to keep it for next time!"),
    ("Keep learning!", "The correct code for {front} is {back}. Practice and it will stick!"),
    ("Don't give up!", "The code for {front} is {back}. Review it carefully and you'll get it!"),
    ("Focus on learning!", "Memorize: {front} has the code {back}. You can do this!"),
    ("Try again!", "Note it down: the code for {front} is {back}. Keep practicing!"),
    ("Mistakes are part of it!", "The code for {front} is {back}. Use this moment to learn!"),
    ("Persistence is key!", "Remember well: {front} = code {back}. Keep studying!"),
    ("Every miss teaches!", "The correct code for {front} is {back}. You will memorize it!"),
    ("Focus on the code!", "{front} has the code {back}. Pay attention to this number!"),
    ("Study moment!", "The code for {front} is {back}. Try to picture it and memorize it!"),
]


@dataclass(frozen=True)
class MissFeedback:
    title: str
    message: str
    front: str
    back: str


def build_miss_feedback(card: Card, rng: random.Random | None = None) -> MissFeedback:
    """Pick a random template and fill in the card's front and back."""
    title, template = (rng or random).choice(MISS_TEMPLATES)
    return MissFeedback(
        title=title,
        message=template.format(front=card.front, back=card.back),
        front=card.front,
        back=card.back,
    )
