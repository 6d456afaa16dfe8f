"""Tests for template catalog loading."""

from pathlib import Path

import pytest

from trippin.content.catalog import CatalogError, load_catalog, parse_catalog

MINIMAL = """
- id: solo
  title: Solo
  author: {name: Ada}
  stops:
    - id: a
      name: A
      coordinates: [1, 2]
"""


def test_bundled_catalog_loads() -> None:
    templates = load_catalog()
    ids = [t.id for t in templates]
    assert "amalfi-coast" in ids
    assert "kyoto-temples" in ids
    amalfi = templates[ids.index("amalfi-coast")]
    assert [s.id for s in amalfi.stops] == ["positano", "amalfi", "ravello"]


def test_parse_list_form() -> None:
    (template,) = parse_catalog(MINIMAL)
    assert template.id == "solo"
    assert template.stops[0].coordinates == (1.0, 2.0)
    assert template.location == ""


def test_load_from_path(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text(MINIMAL)
    assert [t.id for t in load_catalog(path)] == ["solo"]


def test_empty_document() -> None:
    assert parse_catalog("") == ()


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("journeys: 3", "expected a list"),
        ("- just a string", "not a mapping"),
        ("- {id: x}", "journey #0"),
        (MINIMAL + MINIMAL, "duplicate journey id solo"),
        (MINIMAL.replace("id: solo", "id: fork-solo"), "fork prefix"),
        ("- [unclosed", "Invalid catalog"),
    ],
)
def test_invalid_catalogs(text: str, message: str) -> None:
    with pytest.raises(CatalogError, match=message):
        parse_catalog(text, "test")
