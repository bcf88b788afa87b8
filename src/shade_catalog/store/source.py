"""
source.py
=========

Does: Discover products and their shade rows in the blob store layout written
      by the data-entry tool:
        brands/<brand>/product_shade_values/<product>/shades.json
                                                     /links.json
                                                     /price.json
                                                     /types.json | type.json
                                                     /meta.json
      with legacy fallbacks brands/<brand>/{links,price,type}/<product>/*.json.
      shades.json comes in three shapes:
        - list:   [{"name", "hex", "skintone"?, "undertone"?, "finish"?}, ...]
        - nested: {skintone: {undertone: {shade_name: hex}}}  (base products)
        - flat:   {shade_name: hex}
Returns: Product lists, merged row dicts, and ShadeRecords for one category.
Used By: rebuild_category.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from shade_catalog import settings
from shade_catalog.color import LIP_CATEGORIES, SKIN_DEPTH_TIERS
from shade_catalog.errors import InvalidRecord
from shade_catalog.store.blob_store import BlobStore
from shade_catalog.taxonomy import ShadeRecord, normalize_skintone

__all__ = [
    "ProductRows",
    "SourceBatch",
    "list_brand_products",
    "flatten_nested_shades",
    "load_product_rows",
    "has_edited_final_shades",
    "collect_category_records",
]

logger = logging.getLogger(__name__)

_PRODUCT_FILES = r"(shades\.json|links\.json|price\.json|types?\.json)"


@dataclass
class ProductRows:
    rows: list[dict[str, Any]] = field(default_factory=list)
    product_type: str = ""


@dataclass
class SourceBatch:
    records: list[ShadeRecord] = field(default_factory=list)
    considered: list[dict[str, Any]] = field(default_factory=list)
    skipped_rows: int = 0
    skipped_products: int = 0


def _product_key_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(
        rf"^{re.escape(prefix)}([^/]+)/product_shade_values/([^/]+)/{_PRODUCT_FILES}$"
    )


def list_brand_products(store: BlobStore, prefix: str | None = None) -> list[tuple[str, str]]:
    """Does: Unique (brand, product) pairs with shade data, sorted by brand then product."""
    prefix = prefix or settings.BRANDS_PREFIX
    pattern = _product_key_pattern(prefix)
    found: set[tuple[str, str]] = set()
    for key in store.list(prefix):
        m = pattern.match(key)
        if m:
            found.add((m.group(1), m.group(2)))
    return sorted(found)


def _is_nested_by_skintone(shades: Mapping[str, Any]) -> bool:
    return any(k in shades for k in SKIN_DEPTH_TIERS)


def flatten_nested_shades(shades: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Does: {skintone: {undertone: {name: hex}}} → [{name, hex, skintone, undertone}]."""
    out: list[dict[str, Any]] = []
    for skintone, undertones in shades.items():
        if not isinstance(undertones, Mapping):
            continue
        for undertone, by_name in undertones.items():
            if not isinstance(by_name, Mapping):
                continue
            for name, hex_color in by_name.items():
                out.append(
                    {"name": str(name), "hex": str(hex_color), "skintone": skintone, "undertone": undertone}
                )
    return out


def _first_document(store: BlobStore, keys: Iterable[str]) -> Any | None:
    for key in keys:
        doc = store.get(key)
        if doc:
            return doc
    return None


def _lookup(mapping: Any, name: str, default: Any) -> Any:
    if isinstance(mapping, Mapping):
        value = mapping.get(name)
        if value is not None:
            return value
    return default


def load_product_rows(
    store: BlobStore, brand: str, product: str, prefix: str | None = None
) -> ProductRows:
    """Does: Merge shades, links, prices, types and meta of one product into rows."""
    prefix = prefix or settings.BRANDS_PREFIX
    base = f"{prefix}{brand}/product_shade_values/{product}"

    shades = store.get(f"{base}/shades.json")
    meta = store.get(f"{base}/meta.json")
    links = _first_document(
        store, (f"{base}/links.json", f"{prefix}{brand}/links/{product}/links.json")
    )
    prices = _first_document(
        store, (f"{base}/price.json", f"{prefix}{brand}/price/{product}/price.json")
    )
    types = _first_document(
        store,
        (
            f"{base}/types.json",
            f"{base}/type.json",
            f"{prefix}{brand}/type/{product}/types.json",
            f"{prefix}{brand}/type/{product}/type.json",
        ),
    )

    if isinstance(shades, list):
        base_rows = [
            {
                "name": s.get("name"),
                "hex": s.get("hex"),
                "skintone": normalize_skintone(s.get("skintone")),
                "undertone": normalize_skintone(s.get("undertone")),
                "finish": s.get("finish") or "",
            }
            for s in shades
            if isinstance(s, Mapping)
        ]
    elif isinstance(shades, Mapping) and _is_nested_by_skintone(shades):
        base_rows = flatten_nested_shades(shades)
    elif isinstance(shades, Mapping):
        base_rows = [
            {"name": name, "hex": hex_color, "skintone": "", "undertone": ""}
            for name, hex_color in shades.items()
        ]
    else:
        base_rows = []

    rows = [
        {
            **row,
            "link": _lookup(links, str(row["name"]), ""),
            "price": _lookup(prices, str(row["name"]), ""),
            "type": _lookup(types, str(row["name"]), ""),
        }
        for row in base_rows
    ]

    product_type = ""
    if isinstance(types, Mapping):
        values = [v for v in types.values() if v]
        if values:
            product_type = str(values[0])
    elif isinstance(types, str):
        product_type = types
    if not product_type:
        product_type = next((str(r["type"]) for r in rows if r["type"]), "")
    if isinstance(meta, Mapping) and meta.get("productType"):
        product_type = str(meta["productType"])

    return ProductRows(rows=rows, product_type=product_type)


def has_edited_final_shades(
    store: BlobStore, brand: str, product: str, prefix: str | None = None
) -> bool:
    """Does: True when brands/<brand>/edited_final_shades/<product>/ or <product>.json exists."""
    prefix = prefix or settings.BRANDS_PREFIX
    folder = f"{prefix}{brand}/edited_final_shades/{product}/"
    if store.list(folder):
        return True
    return bool(store.list(f"{prefix}{brand}/edited_final_shades/{product}.json"))


def collect_category_records(
    store: BlobStore,
    category: str,
    *,
    skip_products: set[tuple[str, str]] | None = None,
    prefix: str | None = None,
) -> SourceBatch:
    """
    Does: Walk every product whose type is category and turn its rows into records.
          Lip categories require edited final shades; products in skip_products
          are left out. Products whose documents cannot be read, and rows
          without a usable identity, are skipped and counted.
    """
    skip_products = skip_products or set()
    batch = SourceBatch()

    for brand, product in list_brand_products(store, prefix):
        try:
            loaded = load_product_rows(store, brand, product, prefix)
            if not loaded.rows or loaded.product_type != category:
                continue
            if category.lower() in LIP_CATEGORIES and not has_edited_final_shades(
                store, brand, product, prefix
            ):
                logger.debug("Skipping %s/%s: no edited final shades", brand, product)
                continue
        except Exception as e:
            # one unreadable product must not sink the whole category
            batch.skipped_products += 1
            logger.warning("Skipping product %s/%s: %s: %s", brand, product, type(e).__name__, e)
            continue
        if (brand, product) in skip_products:
            continue

        batch.considered.append({"brand": brand, "product": product, "count": len(loaded.rows)})
        for row in loaded.rows:
            raw = {
                "brand": brand,
                "product_name": product,
                "shade_name": row.get("name"),
                "shade_hex_code": row.get("hex"),
                "price": row.get("price"),
                "link": row.get("link") or "",
                "type": category,
                "finish": row.get("finish") or "",
                "skintone": row.get("skintone") or "",
            }
            try:
                batch.records.append(ShadeRecord.from_row(raw, category))
            except InvalidRecord as e:
                batch.skipped_rows += 1
                logger.warning("Skipping row of %s/%s: %s", brand, product, e)

    return batch
