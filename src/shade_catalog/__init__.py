"""
shade_catalog
=============

Does: Root package for the shade catalog builder: hex → HSV color model,
      rule-based multi-label classifier, price bucketer, nested taxonomy with
      merge/backfill, and the orchestrator that builds and publishes a
      category's catalog through a blob store.
Used by: Catalog publishing jobs and "find similar products" services.
"""

from shade_catalog.errors import (
    InvalidHex,
    InvalidRecord,
    LoadFailure,
    ShadeCatalogError,
    UnclassifiableDepth,
)
from shade_catalog.color import HSV, hsv_from_hex
from shade_catalog.classification import Classifier, ClassifierConfig, classify, price_tier
from shade_catalog.taxonomy import ShadeEntry, ShadeRecord, Taxonomy, merge
from shade_catalog.orchestrator import (
    BuildReport,
    add_shades,
    build,
    build_incremental,
    rebuild_category,
)

__all__ = [
    "ShadeCatalogError",
    "InvalidHex",
    "InvalidRecord",
    "LoadFailure",
    "UnclassifiableDepth",
    "HSV",
    "hsv_from_hex",
    "Classifier",
    "ClassifierConfig",
    "classify",
    "price_tier",
    "ShadeEntry",
    "ShadeRecord",
    "Taxonomy",
    "merge",
    "BuildReport",
    "build",
    "build_incremental",
    "rebuild_category",
    "add_shades",
]
__docformat__ = "google"
