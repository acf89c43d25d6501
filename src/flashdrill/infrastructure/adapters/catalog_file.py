"""
File Catalog Repository: Infrastructure adapter for YAML/JSON card lists.

Accepts either a top-level list of cards or a mapping with a ``cards`` list:

    cards:
      - {id: 1, front: X-Burger, back: 101}
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from flashdrill.domain.exceptions import CatalogError
from flashdrill.domain.review.models import Card
from flashdrill.domain.review.ports import CatalogRepository

logger = logging.getLogger(__name__)


class CardRecord(BaseModel):
    id: int
    front: str
    back: str

    @field_validator("front", "back", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        # Codes are often written as bare numbers in YAML
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v


class YamlCatalogRepository(CatalogRepository):
    """Loads cards from a YAML file (JSON files parse as YAML too)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_cards(self) -> list[Card]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Cannot read catalog {self.path}: {e}") from e

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML in catalog {self.path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("cards")
        if data is None:
            logger.warning(f"Catalog {self.path} has no cards")
            return []
        if not isinstance(data, list):
            raise CatalogError(f"Catalog {self.path} must be a list of cards")

        cards: list[Card] = []
        seen: set[int] = set()
        for index, raw in enumerate(data):
            try:
                record = CardRecord.model_validate(raw)
            except ValidationError as e:
                raise CatalogError(f"Invalid card #{index + 1} in {self.path}: {e}") from e
            if record.id in seen:
                raise CatalogError(f"Duplicate card id {record.id} in {self.path}")
            seen.add(record.id)
            cards.append(Card(id=record.id, front=record.front, back=record.back))

        logger.info(f"Loaded {len(cards)} cards from {self.path}")
        return cards
