"""
Content Module - Question banks consumed by the practice engine.

Components:
- catalog: CatalogItem, ContentCatalog, bootstrap_profile, sync_catalog
- banks/: bundled JSON question banks
"""

from stepwise.content.catalog import (
    CatalogItem,
    ContentCatalog,
    bootstrap_profile,
    generate_math_tables,
    sync_catalog,
)

__all__ = [
    "CatalogItem",
    "ContentCatalog",
    "bootstrap_profile",
    "generate_math_tables",
    "sync_catalog",
]
