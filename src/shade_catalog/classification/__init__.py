"""
classification
Does: Expose the rule table, the classifier and the price bucketer.
Exports: Classifier, classify, ShadeHint, Placement, ClassifierConfig builders, price_tier.
"""

from __future__ import annotations

# ── Public API re-exports ─────────────────────────────────────────────────────
from .classifier import (
    Classifier,
    Placement,
    ShadeHint,
    classify,
)
from .depth import (
    depth_from_skin_hint,
    depth_from_value,
)
from .pricing import (
    coerce_price,
    price_tier,
)
from .rules import (
    ClassificationRule,
    ClassifierConfig,
    Condition,
    DepthBand,
    build_classifier_config,
    default_classifier_config,
    load_classifier_config,
)

__all__ = [
    "Classifier",
    "Placement",
    "ShadeHint",
    "classify",
    "depth_from_skin_hint",
    "depth_from_value",
    "coerce_price",
    "price_tier",
    "ClassificationRule",
    "ClassifierConfig",
    "Condition",
    "DepthBand",
    "build_classifier_config",
    "default_classifier_config",
    "load_classifier_config",
]
