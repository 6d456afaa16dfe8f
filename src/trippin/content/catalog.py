"""Template catalog loading.

Templates are authored as YAML and loaded once at startup. The core never
writes them back.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from trippin.models.journey import JourneySource

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = "journeys.yaml"


class CatalogError(Exception):
    """Raised when a catalog document is malformed."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"Invalid catalog {source}: {message}")


def parse_catalog(text: str, source: str = "<string>") -> tuple[JourneySource, ...]:
    """Parse catalog YAML into templates.

    The document is either a list of journeys or a mapping with a
    `journeys` list.
    """
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(source, str(e)) from e

    if data is None:
        return ()
    if isinstance(data, dict):
        data = data.get("journeys", [])
    if not isinstance(data, list):
        raise CatalogError(source, "expected a list of journeys")

    templates: list[JourneySource] = []
    seen: set[str] = set()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CatalogError(source, f"journey #{index} is not a mapping")
        try:
            template = JourneySource.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(source, f"journey #{index}: {e!r}") from e
        if template.id in seen:
            raise CatalogError(source, f"duplicate journey id {template.id}")
        if template.id.startswith("fork-"):
            raise CatalogError(source, f"template id {template.id} uses the fork prefix")
        seen.add(template.id)
        templates.append(template)
    return tuple(templates)


def load_catalog(path: Path | None = None) -> tuple[JourneySource, ...]:
    """Load templates from `path`, or the bundled catalog when omitted."""
    if path is None:
        text = resources.files("trippin.content").joinpath(DEFAULT_CATALOG).read_text(
            encoding="utf-8"
        )
        source = f"bundled {DEFAULT_CATALOG}"
    else:
        text = path.read_text(encoding="utf-8")
        source = str(path)
    templates = parse_catalog(text, source)
    logger.info("Loaded %d templates from %s", len(templates), source)
    return templates
