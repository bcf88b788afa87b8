"""
taxonomy.py
===========

Does: Hold the nested catalog  category → price tier → depth tier (L/M/D) → [ShadeEntry]
      and implement its three structural operations:
        - insert: dedup-safe append (dedup key = brand, product, shade);
        - merge: pure structural union, base entries first;
        - ensure_minimum_per_bucket: copy-borrow from sibling depth tiers of
          the same price tier until each list reaches the minimum.
      Also converts to/from the persisted JSON document.
Used By: Builder, catalog I/O.

Invariants:
- every (category, price tier) group holds exactly the keys L, M, D;
- no dedup key appears twice in one list;
- lists are append-only; backfilled entries land after classified ones.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from shade_catalog import settings
from shade_catalog.color import DEPTH_TIERS
from shade_catalog.taxonomy.entry import EntryKey, ShadeEntry

__all__ = ["Taxonomy", "merge", "BORROW_ORDER"]
__docformat__ = "google"

logger = logging.getLogger(__name__)

# destination tier → donor tiers, tried in order
BORROW_ORDER: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("L", ("M", "D")),
    ("M", ("L", "D")),
    ("D", ("M", "L")),
)

DepthGroup = dict[str, list[ShadeEntry]]


class Taxonomy:
    """Nested, insertion-ordered shade catalog for one product category."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, DepthGroup]] = {}

    # ── Structure ────────────────────────────────────────────────────────────
    def _group(self, category: str, price_tier: str) -> DepthGroup:
        tiers = self._data.setdefault(category, {})
        group = tiers.get(price_tier)
        if group is None:
            group = {depth: [] for depth in DEPTH_TIERS}
            tiers[price_tier] = group
        return group

    def categories(self) -> list[str]:
        return list(self._data)

    def price_tiers(self, category: str) -> list[str]:
        return list(self._data.get(category, {}))

    def bucket(self, category: str, price_tier: str, depth_tier: str) -> list[ShadeEntry]:
        """Does: Return a copy of one list (empty when the path does not exist)."""
        return list(self._data.get(category, {}).get(price_tier, {}).get(depth_tier, []))

    def groups(self) -> Iterator[tuple[str, str, DepthGroup]]:
        for category, tiers in self._data.items():
            for price_tier, group in tiers.items():
                yield category, price_tier, group

    def buckets(self) -> Iterator[tuple[str, str, str, list[ShadeEntry]]]:
        for category, price_tier, group in self.groups():
            for depth in DEPTH_TIERS:
                yield category, price_tier, depth, group[depth]

    def entry_count(self) -> int:
        return sum(len(entries) for *_, entries in self.buckets())

    def is_empty(self) -> bool:
        return not self._data

    def product_keys(self) -> set[tuple[str, str]]:
        """Does: Index every (brand, product_name) present anywhere in the catalog."""
        return {(e.brand, e.product_name) for *_, entries in self.buckets() for e in entries}

    def key_sets(self) -> dict[tuple[str, str, str], frozenset[EntryKey]]:
        """Does: Per (category, price tier, depth) triple, the set of dedup keys."""
        return {(c, p, d): frozenset(e.key for e in entries) for c, p, d, entries in self.buckets()}

    def copy(self) -> Taxonomy:
        out = Taxonomy()
        for category, price_tier, group in self.groups():
            out._data.setdefault(category, {})[price_tier] = {
                depth: list(group[depth]) for depth in DEPTH_TIERS
            }
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Taxonomy):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Taxonomy(categories={self.categories()!r}, entries={self.entry_count()})"

    # ── Operations ───────────────────────────────────────────────────────────
    def insert(
        self,
        entry: ShadeEntry,
        category: str,
        price_tier: str,
        depth_tier: str,
    ) -> bool:
        """
        Does: Append entry under (category, price_tier, depth_tier), creating
              missing levels. Re-inserting an existing dedup key is a no-op.
        Returns: True when appended.
        """
        if depth_tier not in DEPTH_TIERS:
            logger.warning("Ignoring insert with unknown depth tier %r", depth_tier)
            return False
        target = self._group(category, price_tier)[depth_tier]
        key = entry.key
        if any(existing.key == key for existing in target):
            return False
        target.append(entry)
        return True

    def merge(self, incoming: Taxonomy) -> Taxonomy:
        """Does: Return merge(self, incoming); neither input is modified."""
        return merge(self, incoming)

    def ensure_minimum_per_bucket(self, minimum: int = settings.MIN_PER_BUCKET) -> int:
        """
        Does: Top up each short depth list from its siblings in the same price
              tier (L ← M, D; M ← L, D; D ← M, L), copying entries and skipping
              keys already present. Partial fills are left as-is.
        Returns: Number of entries added.
        """
        added = 0
        for _category, _price_tier, group in self.groups():
            for dest, donors in BORROW_ORDER:
                target = group[dest]
                need = minimum - len(target)
                if need <= 0:
                    continue
                seen = {e.key for e in target}
                for donor in donors:
                    for entry in group[donor]:
                        if need <= 0:
                            break
                        if entry.key in seen:
                            continue
                        target.append(entry)
                        seen.add(entry.key)
                        need -= 1
                        added += 1
        return added

    # ── Codec ────────────────────────────────────────────────────────────────
    def to_document(self) -> dict[str, dict[str, dict[str, list[dict[str, Any]]]]]:
        return {
            category: {
                price_tier: {
                    depth: [e.to_document() for e in group[depth]] for depth in DEPTH_TIERS
                }
                for price_tier, group in tiers.items()
            }
            for category, tiers in self._data.items()
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any] | None) -> Taxonomy:
        """
        Does: Rebuild a Taxonomy from its JSON shape. Malformed levels or items
              are skipped with a warning; duplicates collapse through insert().
        """
        out = cls()
        if not isinstance(document, Mapping):
            if document is not None:
                logger.warning("Taxonomy document is %s, not an object", type(document).__name__)
            return out

        skipped = 0
        for category, tiers in document.items():
            if not isinstance(tiers, Mapping):
                skipped += 1
                continue
            for price_tier, group in tiers.items():
                if not isinstance(group, Mapping):
                    skipped += 1
                    continue
                out._group(str(category), str(price_tier))
                for depth in DEPTH_TIERS:
                    items = group.get(depth) or []
                    if not isinstance(items, list):
                        skipped += 1
                        continue
                    for item in items:
                        entry = ShadeEntry.from_document(item)
                        if entry is None:
                            skipped += 1
                            continue
                        out.insert(entry, str(category), str(price_tier), depth)
        if skipped:
            logger.warning("Skipped %d malformed part(s) of taxonomy document", skipped)
        return out


def merge(base: Taxonomy, incoming: Taxonomy) -> Taxonomy:
    """
    Does: Structural union. For every triple present on either side the result
          is the base list followed by incoming entries whose dedup key the base
          list lacks. Inputs are left untouched.
    """
    out = base.copy()
    for category, price_tier, group in incoming.groups():
        out._group(category, price_tier)
        for depth in DEPTH_TIERS:
            for entry in group[depth]:
                out.insert(entry, category, price_tier, depth)
    return out
