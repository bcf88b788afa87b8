"""
classifier.py
=============

Does: Map a shade's HSV color and requested product category to taxonomy
      placements (category label, depth tier). Three disjoint policies:
        - base (foundation, concealer, skin-tint): one label = the category,
          depth from the skin-depth hint;
        - contour: one label = the finish, depth from the skin-depth hint;
        - HSV: every rule whose predicate holds, depth from that rule's bands,
          catch-all label last.
Returns: list[(label, tier)] of placeable pairs; unplaceable labels are skipped.
Used By: Builder (orchestrator) per record.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from shade_catalog.classification.depth import depth_from_skin_hint, depth_from_value
from shade_catalog.classification.rules import ClassifierConfig, default_classifier_config
from shade_catalog.color import HSV, rounded_value
from shade_catalog.errors import UnclassifiableDepth
from shade_catalog.utils import debug

__all__ = ["ShadeHint", "Placement", "Classifier", "classify"]
__docformat__ = "google"

logger = logging.getLogger(__name__)

POLICY_BASE = "base"
POLICY_CONTOUR = "contour"
POLICY_HSV = "hsv"


class ShadeHint(NamedTuple):
    skin_depth_hint: str | None = None
    coverage: str | None = None
    finish: str | None = None


class Placement(NamedTuple):
    label: str
    depth: str


class Classifier:
    """Does: Apply one immutable ClassifierConfig to shades."""

    def __init__(self, config: ClassifierConfig | None = None):
        self.config = config or default_classifier_config()

    def policy_for(self, requested_category: str) -> str:
        key = (requested_category or "").strip().lower()
        if key in self.config.base_categories:
            return POLICY_BASE
        if key in self.config.contour_categories:
            return POLICY_CONTOUR
        return POLICY_HSV

    def classify(
        self,
        hsv: HSV | None,
        requested_category: str,
        hint: ShadeHint | None = None,
    ) -> list[Placement]:
        """
        Does: Produce every placement for one shade.
        Returns: Possibly empty list; never raises for a valid HSV.
        """
        hint = hint or ShadeHint()
        policy = self.policy_for(requested_category)

        if policy == POLICY_HSV:
            if hsv is None:
                return []
            return self._classify_hsv(hsv)

        if policy == POLICY_BASE:
            label = requested_category.strip().lower()
        else:
            label = (hint.finish or "").strip() or self.config.contour_fallback_label

        try:
            tier = depth_from_skin_hint(hint.skin_depth_hint, self.config.skin_depth_tiers, label)
        except UnclassifiableDepth as e:
            logger.debug("Dropping %s shade: %s", policy, e)
            return []
        return [Placement(label, tier)]

    def _classify_hsv(self, hsv: HSV) -> list[Placement]:
        value = rounded_value(hsv)
        out: list[Placement] = []
        for rule in self.config.rules:
            if not rule.matches(hsv):
                continue
            try:
                tier = depth_from_value(value, rule)
            except UnclassifiableDepth as e:
                # band gaps are intentional: the shade is simply not filed under this label
                debug(f"skip {rule.label}: {e}", topic="classify")
                continue
            out.append(Placement(rule.label, tier))
        debug(f"{hsv} → {out}", topic="classify")
        return out


def classify(
    hsv: HSV | None,
    requested_category: str,
    hint: ShadeHint | None = None,
    config: ClassifierConfig | None = None,
) -> list[Placement]:
    """Does: Functional shortcut for Classifier(config).classify(...)."""
    return Classifier(config).classify(hsv, requested_category, hint)
