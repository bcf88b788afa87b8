"""
catalog_io.py
=============

Does: Read and write one category's taxonomy document through a BlobStore.
      A missing document loads as an empty Taxonomy; any store error or a
      document that is not a JSON object raises LoadFailure.
Used By: Builder high-level runs (rebuild_category, add_shades).
"""

from __future__ import annotations

import logging

from shade_catalog import settings
from shade_catalog.errors import LoadFailure
from shade_catalog.store.blob_store import BlobStore
from shade_catalog.taxonomy import Taxonomy

__all__ = ["catalog_key", "load_existing", "publish"]

logger = logging.getLogger(__name__)


def catalog_key(category: str, template: str | None = None) -> str:
    """Does: Storage key of a category's taxonomy document."""
    return (template or settings.CATALOG_KEY_TEMPLATE).format(category=category)


def load_existing(store: BlobStore, category: str, *, key: str | None = None) -> Taxonomy:
    """
    Does: Fetch and decode the persisted taxonomy for category.
    Returns: Taxonomy (empty when the document does not exist yet).
    Raises: LoadFailure on store errors or a non-object document.
    """
    key = key or catalog_key(category)
    try:
        document = store.get(key)
    except Exception as e:
        raise LoadFailure(key, f"{type(e).__name__}: {e}") from e

    if document is None:
        logger.info("No existing catalog at %s; starting empty", key)
        return Taxonomy()
    if not isinstance(document, dict):
        raise LoadFailure(key, f"expected a JSON object, got {type(document).__name__}")
    return Taxonomy.from_document(document)


def publish(
    store: BlobStore, category: str, taxonomy: Taxonomy, *, key: str | None = None
) -> str:
    """Does: Write the whole document in one put. Returns the key written."""
    key = key or catalog_key(category)
    store.put(key, taxonomy.to_document())
    logger.info("Published %s (%d entries)", key, taxonomy.entry_count())
    return key
