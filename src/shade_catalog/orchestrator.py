# orchestrator.py
from __future__ import annotations

"""
orchestrator.py
===============

Does: Build a category's shade catalog end to end.
  - build(records, category, existing) -> Taxonomy
        per record: hex → HSV (skip invalid), classify, price tier, insert;
        then merge into `existing` and backfill each depth tier.
  - build_incremental(records, category, existing) -> Taxonomy
        same, after dropping products (brand + product) already in `existing`.
  - rebuild_category(store, category, ...) -> BuildReport
        load the persisted catalog, discover the category's products in the
        store, build, optionally publish; failures come back as a report.
  - add_shades(store, rows, category) -> BuildReport
        insert rows straight into the persisted catalog and write it back.
Used by: Catalog publishing jobs and admin tooling.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from shade_catalog import settings
from shade_catalog.classification import Classifier, price_tier
from shade_catalog.color import hsv_from_hex
from shade_catalog.errors import InvalidHex, InvalidRecord
from shade_catalog.store import (
    BlobStore,
    catalog_key,
    collect_category_records,
    load_existing,
    publish as publish_catalog,
)
from shade_catalog.taxonomy import ShadeEntry, ShadeRecord, Taxonomy, merge
from shade_catalog.utils import debug

logger = logging.getLogger(__name__)

__all__ = [
    "BuildStats",
    "BuildReport",
    "classify_record",
    "filter_new_products",
    "build",
    "build_incremental",
    "rebuild_category",
    "add_shades",
]

PlacedEntry = tuple[ShadeEntry, str, str, str]  # entry, category label, price tier, depth


# =============================================================================
# Result types
# =============================================================================


@dataclass
class BuildStats:
    records_in: int = 0
    invalid_rows: int = 0
    skipped_products: int = 0
    invalid_hex: int = 0
    wrong_category: int = 0
    unplaced: int = 0
    placements: int = 0
    inserted: int = 0
    backfilled: int = 0

    def as_dict(self) -> dict[str, int]:
        return dict(vars(self))


@dataclass
class BuildReport:
    success: bool
    category: str
    taxonomy: Taxonomy | None = None
    error: str | None = None
    key: str | None = None
    published: bool = False
    considered: list[dict[str, Any]] = field(default_factory=list)
    stats: BuildStats = field(default_factory=BuildStats)

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "products_considered": len(self.considered),
            "total_shades": sum(int(c.get("count", 0)) for c in self.considered),
            "top_level_categories": self.taxonomy.categories() if self.taxonomy else [],
            **self.stats.as_dict(),
        }

    def to_dict(self) -> dict[str, Any]:
        """Does: JSON-ready view for the calling service."""
        if not self.success:
            return {"success": False, "category": self.category, "error": self.error}
        return {
            "success": True,
            "category": self.category,
            "key": self.key,
            "published": self.published,
            "considered": self.considered,
            "summary": self.summary,
            "dict": self.taxonomy.to_document() if self.taxonomy else {},
        }


# =============================================================================
# Per-record step (stateless, safe to run on worker threads)
# =============================================================================


def classify_record(
    record: ShadeRecord,
    category: str,
    classifier: Classifier,
    *,
    step: int = settings.PRICE_STEP,
    cap: int = settings.PRICE_CAP,
) -> list[PlacedEntry]:
    """
    Does: Convert, classify and bucket one record.
    Returns: Every (entry, label, price tier, depth) placement; may be empty.
    Raises: InvalidHex when the record's color is not #rrggbb.
    """
    hsv = hsv_from_hex(record.hex_color)
    entry = record.to_entry(category)
    tier = price_tier(record.price, step, cap)
    placements = classifier.classify(hsv, category, record.hint)
    return [(entry, p.label, tier, p.depth) for p in placements]


def _safe_classify(
    record: ShadeRecord, category: str, classifier: Classifier, step: int, cap: int
) -> list[PlacedEntry] | None:
    try:
        return classify_record(record, category, classifier, step=step, cap=cap)
    except InvalidHex as e:
        logger.warning(
            "Skipping %s / %s / %s: %s",
            record.brand, record.product_name, record.shade_name, e,
        )
        return None


def _same_category(record: ShadeRecord, category: str) -> bool:
    requested = record.requested_category.strip().lower()
    return not requested or requested == category.strip().lower()


# =============================================================================
# Builder
# =============================================================================


def filter_new_products(
    records: Iterable[ShadeRecord], existing: Taxonomy | None
) -> list[ShadeRecord]:
    """Does: Keep only records whose (brand, product_name) is absent from existing."""
    records = list(records)
    if existing is None:
        return records
    known = existing.product_keys()
    return [r for r in records if r.product_key not in known]


def _build(
    records: Sequence[ShadeRecord],
    category: str,
    existing: Taxonomy | None,
    *,
    classifier: Classifier | None,
    minimum: int,
    workers: int | None,
    step: int,
    cap: int,
) -> tuple[Taxonomy, BuildStats]:
    classifier = classifier or Classifier()
    stats = BuildStats(records_in=len(records))

    eligible = []
    for record in records:
        if _same_category(record, category):
            eligible.append(record)
        else:
            stats.wrong_category += 1
            logger.warning(
                "Skipping %s / %s: category %r is not %r",
                record.brand, record.product_name, record.requested_category, category,
            )

    def run(record: ShadeRecord) -> list[PlacedEntry] | None:
        return _safe_classify(record, category, classifier, step, cap)

    if workers and workers > 1 and len(eligible) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(run, eligible))
    else:
        results = [run(r) for r in eligible]

    # single writer, input order
    built = Taxonomy()
    for placed in results:
        if placed is None:
            stats.invalid_hex += 1
            continue
        if not placed:
            stats.unplaced += 1
            continue
        for entry, label, tier, depth in placed:
            stats.placements += 1
            if built.insert(entry, label, tier, depth):
                stats.inserted += 1

    result = merge(existing, built) if existing is not None else built
    stats.backfilled = result.ensure_minimum_per_bucket(minimum)
    debug(f"build {category}: {stats.as_dict()}", topic="build")
    return result, stats


def build(
    records: Iterable[ShadeRecord],
    category: str,
    existing: Taxonomy | None = None,
    *,
    classifier: Classifier | None = None,
    minimum: int = settings.MIN_PER_BUCKET,
    workers: int | None = None,
    step: int = settings.PRICE_STEP,
    cap: int = settings.PRICE_CAP,
) -> Taxonomy:
    """
    Does: Classify records into a fresh taxonomy, merge it after `existing`,
          then backfill every depth tier up to `minimum`.
    Returns: The ready-to-persist Taxonomy. `existing` is not modified.
    """
    taxonomy, _ = _build(
        list(records), category, existing,
        classifier=classifier, minimum=minimum, workers=workers, step=step, cap=cap,
    )
    return taxonomy


def build_incremental(
    records: Iterable[ShadeRecord],
    category: str,
    existing: Taxonomy | None = None,
    **kwargs: Any,
) -> Taxonomy:
    """Does: build() restricted to products not already present in `existing`."""
    return build(filter_new_products(records, existing), category, existing, **kwargs)


# =============================================================================
# Store-backed runs
# =============================================================================


def rebuild_category(
    store: BlobStore,
    category: str,
    *,
    incremental: bool = True,
    publish: bool = False,
    classifier: Classifier | None = None,
    minimum: int = settings.MIN_PER_BUCKET,
    workers: int | None = None,
) -> BuildReport:
    """
    Does: One read-modify-write cycle for a category: load the persisted catalog
          (missing → empty), collect the category's records from the store
          (skipping known products when incremental), build, and optionally publish.
    Returns: BuildReport; success=False with the error message on any failure.
    """
    if not category:
        return BuildReport(success=False, category=category, error="Missing 'category'")

    key = catalog_key(category)
    try:
        existing = load_existing(store, category, key=key)
        skip = existing.product_keys() if incremental else set()
        batch = collect_category_records(store, category, skip_products=skip)
        taxonomy, stats = _build(
            batch.records, category, existing,
            classifier=classifier, minimum=minimum, workers=workers,
            step=settings.PRICE_STEP, cap=settings.PRICE_CAP,
        )
        stats.skipped_products = batch.skipped_products
        stats.invalid_rows = batch.skipped_rows
        if publish:
            publish_catalog(store, category, taxonomy, key=key)
    except Exception as e:
        logger.exception("Catalog rebuild failed for %s", category)
        return BuildReport(success=False, category=category, error=str(e) or type(e).__name__)

    return BuildReport(
        success=True,
        category=category,
        taxonomy=taxonomy,
        key=key,
        published=publish,
        considered=batch.considered,
        stats=stats,
    )


def add_shades(
    store: BlobStore,
    rows: Iterable[Mapping[str, Any]],
    category: str,
    *,
    classifier: Classifier | None = None,
) -> BuildReport:
    """
    Does: Insert raw rows into the persisted catalog for category and write it
          back, without merge-from-scratch or backfill. Bad rows are skipped.
    Returns: BuildReport (success=False when loading or writing fails).
    """
    if not category:
        return BuildReport(success=False, category=category, error="Missing 'category'")

    classifier = classifier or Classifier()
    key = catalog_key(category)
    stats = BuildStats()
    try:
        taxonomy = load_existing(store, category, key=key)
        for row in rows:
            stats.records_in += 1
            try:
                record = ShadeRecord.from_row(row, category)
            except InvalidRecord as e:
                stats.invalid_rows += 1
                logger.warning("Skipping row: %s", e)
                continue
            placed = _safe_classify(
                record, category, classifier, settings.PRICE_STEP, settings.PRICE_CAP
            )
            if placed is None:
                stats.invalid_hex += 1
                continue
            if not placed:
                stats.unplaced += 1
                continue
            for entry, label, tier, depth in placed:
                stats.placements += 1
                if taxonomy.insert(entry, label, tier, depth):
                    stats.inserted += 1
        publish_catalog(store, category, taxonomy, key=key)
    except Exception as e:
        logger.exception("Adding shades failed for %s", category)
        return BuildReport(success=False, category=category, error=str(e) or type(e).__name__)

    return BuildReport(
        success=True, category=category, taxonomy=taxonomy, key=key, published=True, stats=stats
    )
