"""
taxonomy
Does: Expose the record/entry types and the nested Taxonomy container.
Exports: ShadeRecord, ShadeEntry, EntryKey, normalize_skintone, Taxonomy, merge, BORROW_ORDER.
"""

from __future__ import annotations

from .entry import (
    EntryKey,
    ShadeEntry,
    ShadeRecord,
    normalize_skintone,
)
from .taxonomy import (
    BORROW_ORDER,
    Taxonomy,
    merge,
)

__all__ = [
    "EntryKey",
    "ShadeEntry",
    "ShadeRecord",
    "normalize_skintone",
    "Taxonomy",
    "merge",
    "BORROW_ORDER",
]
