"""
color.
=====

Does: Aggregate the color model (hex → HSV) and the color-domain constants
      shared by classification, record parsing and the taxonomy codec.
Returns: Pure functions and data structures; no side effects.
"""

# ── Constants ────────────────────────────────────────────────────────────────
from .constants import (
    BASE_CATEGORIES,
    CATCH_ALL_LABEL,
    CONTOUR_CATEGORIES,
    CONTOUR_FALLBACK_LABEL,
    DEFAULT_RULES,
    DEPTH_TIERS,
    HSV_LABELS,
    LIP_CATEGORIES,
    SKIN_DEPTH_TIERS,
)

# ── Color model ──────────────────────────────────────────────────────────────
from .hsv import (
    HSV,
    hsv_from_hex,
    normalize_hex,
    rounded_value,
)

__all__ = [
    # constants
    "DEPTH_TIERS",
    "SKIN_DEPTH_TIERS",
    "BASE_CATEGORIES",
    "CONTOUR_CATEGORIES",
    "LIP_CATEGORIES",
    "CATCH_ALL_LABEL",
    "CONTOUR_FALLBACK_LABEL",
    "DEFAULT_RULES",
    "HSV_LABELS",
    # color model
    "HSV",
    "hsv_from_hex",
    "normalize_hex",
    "rounded_value",
]
