"""Template content supplied to the journey core."""

from trippin.content.catalog import CatalogError, load_catalog, parse_catalog

__all__ = ["CatalogError", "load_catalog", "parse_catalog"]
