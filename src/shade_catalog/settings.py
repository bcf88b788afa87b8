"""
settings.py
===========

Does: Hold runtime defaults for bucketing, backfill, storage keys and the HTTP
      blob store, each overridable through the environment.
Used By: Bucketer, Taxonomy backfill, catalog I/O, source discovery, HttpBlobStore.
"""

from __future__ import annotations

import os

# ── Bucketing & backfill ─────────────────────────────────────────────────────
PRICE_STEP = int(os.getenv("SHADE_CATALOG_PRICE_STEP", "500"))
PRICE_CAP = int(os.getenv("SHADE_CATALOG_PRICE_CAP", "5000"))
MIN_PER_BUCKET = int(os.getenv("SHADE_CATALOG_MIN_PER_BUCKET", "6"))

# ── Storage layout ───────────────────────────────────────────────────────────
CATALOG_KEY_TEMPLATE = os.getenv(
    "SHADE_CATALOG_KEY_TEMPLATE",
    "find_products/product_database/{category}/categorised_LMD.json",
)
BRANDS_PREFIX = os.getenv("SHADE_CATALOG_BRANDS_PREFIX", "brands/")

# ── HTTP blob store ──────────────────────────────────────────────────────────
BLOB_STORE_URL = os.getenv("SHADE_CATALOG_BLOB_STORE_URL", "")
BLOB_STORE_TOKEN = os.getenv("SHADE_CATALOG_BLOB_STORE_TOKEN", "")
BLOB_STORE_TIMEOUT = float(os.getenv("SHADE_CATALOG_BLOB_STORE_TIMEOUT", "10"))  # seconds
BLOB_STORE_RETRIES = int(os.getenv("SHADE_CATALOG_BLOB_STORE_RETRIES", "2"))

__all__ = [
    "PRICE_STEP",
    "PRICE_CAP",
    "MIN_PER_BUCKET",
    "CATALOG_KEY_TEMPLATE",
    "BRANDS_PREFIX",
    "BLOB_STORE_URL",
    "BLOB_STORE_TOKEN",
    "BLOB_STORE_TIMEOUT",
    "BLOB_STORE_RETRIES",
]
