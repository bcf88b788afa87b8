"""
store
Does: Blob store contract and adapters, catalog document I/O, and product
      discovery over the data-entry storage layout.
"""

from __future__ import annotations

from .blob_store import BlobStore, InMemoryBlobStore, LocalBlobStore
from .catalog_io import catalog_key, load_existing, publish
from .http_store import HttpBlobStore, get_http_store
from .source import (
    ProductRows,
    SourceBatch,
    collect_category_records,
    flatten_nested_shades,
    has_edited_final_shades,
    list_brand_products,
    load_product_rows,
)

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "LocalBlobStore",
    "HttpBlobStore",
    "get_http_store",
    "catalog_key",
    "load_existing",
    "publish",
    "ProductRows",
    "SourceBatch",
    "collect_category_records",
    "flatten_nested_shades",
    "has_edited_final_shades",
    "list_brand_products",
    "load_product_rows",
]
