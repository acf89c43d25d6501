import json

import pytest

from flashdrill.domain.exceptions import CatalogError
from flashdrill.domain.review.models import Card
from flashdrill.infrastructure.adapters.catalog_file import YamlCatalogRepository


def _write(tmp_path, text, name="cards.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_load_list_of_cards(tmp_path):
    path = _write(
        tmp_path,
        """
- id: 1
  front: X-Burger
  back: 101
- id: 2
  front: Misto Quente
  back: "007"
""",
    )

    cards = YamlCatalogRepository(path).load_cards()

    assert cards == [
        Card(id=1, front="X-Burger", back="101"),
        Card(id=2, front="Misto Quente", back="007"),
    ]


def test_load_cards_mapping(tmp_path):
    path = _write(tmp_path, "cards:\n  - {id: 5, front: Pastel, back: 310}\n")

    assert YamlCatalogRepository(path).load_cards() == [Card(id=5, front="Pastel", back="310")]


def test_load_json_catalog(tmp_path):
    data = [{"id": 1, "front": "Suco", "back": "401"}]
    path = _write(tmp_path, json.dumps(data), name="cards.json")

    assert YamlCatalogRepository(path).load_cards() == [Card(id=1, front="Suco", back="401")]


def test_empty_file_has_no_cards(tmp_path):
    assert YamlCatalogRepository(_write(tmp_path, "")).load_cards() == []


def test_duplicate_ids_rejected(tmp_path):
    path = _write(
        tmp_path,
        "- {id: 1, front: A, back: 1}\n- {id: 1, front: B, back: 2}\n",
    )

    with pytest.raises(CatalogError, match="Duplicate card id 1"):
        YamlCatalogRepository(path).load_cards()


@pytest.mark.parametrize(
    "text,message",
    [
        ("- {id: 1, front: A}\n", "Invalid card #1"),
        ("- {id: abc, front: A, back: 1}\n", "Invalid card #1"),
        ("cards: {id: 1}\n", "must be a list"),
        ("- [unclosed\n", "Invalid YAML"),
    ],
)
def test_invalid_catalogs(tmp_path, text, message):
    with pytest.raises(CatalogError, match=message):
        YamlCatalogRepository(_write(tmp_path, text)).load_cards()


def test_missing_file(tmp_path):
    with pytest.raises(CatalogError, match="Cannot read catalog"):
        YamlCatalogRepository(tmp_path / "nope.yaml").load_cards()
