"""
depth.py
========

Does: Resolve L/M/D depth tiers, either from an explicit skin-depth hint
      (base & contour products) or from the rounded HSV value against a rule's bands.
Returns: A tier string; raises UnclassifiableDepth when nothing matches.
"""

from __future__ import annotations

from collections.abc import Mapping

from shade_catalog.classification.rules import ClassificationRule
from shade_catalog.errors import UnclassifiableDepth

__all__ = ["depth_from_skin_hint", "depth_from_value"]


def depth_from_skin_hint(hint: object, table: Mapping[str, str], label: str) -> str:
    """Does: Look up a skin-depth code (F, FM, MD, D1, D2, VD) in the tier table."""
    key = hint.strip() if isinstance(hint, str) else hint
    tier = table.get(key) if isinstance(key, str) else None
    if tier is None:
        raise UnclassifiableDepth(label, hint)
    return tier


def depth_from_value(value: int, rule: ClassificationRule) -> str:
    """Does: Place an integer brightness into the rule's bands (gaps stay unplaced)."""
    tier = rule.depth_for(value)
    if tier is None:
        raise UnclassifiableDepth(rule.label, value)
    return tier
