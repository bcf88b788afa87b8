# constants.py
# ============

"""
constants.
=========

Does: Define immutable color-domain constants for classification and storage
      (category labels, depth tiers, skin-depth table, default rule table).
Used By: Classifier rule loading, record parsing, catalog source discovery,
         taxonomy codec.
Returns: Pure data structures only (no side effects).

Notes:
- DEFAULT_RULES is written in the same shape as a JSON rules file so the
  loader has a single parsing path for both.
"""

from types import MappingProxyType

# ── 1) Depth tiers ───────────────────────────────────────────────────────────
DEPTH_TIERS: tuple[str, ...] = ("L", "M", "D")

# Skin-depth hint → depth tier (base & contour categories)
SKIN_DEPTH_TIERS = MappingProxyType(
    {
        "F": "L",
        "FM": "L",
        "MD": "M",
        "D1": "M",
        "D2": "D",
        "VD": "D",
    }
)


# ── 2) Category families ─────────────────────────────────────────────────────
BASE_CATEGORIES = frozenset({"foundation", "concealer", "skin-tint"})
CONTOUR_CATEGORIES = frozenset({"contour"})

# Lip products only enter the catalog once their shades were hand-edited
LIP_CATEGORIES = frozenset(
    {
        "matte-lipstick",
        "satin-lipstick",
        "lip-gloss",
        "lip-tint",
        "lip-balm",
        "lip-oil",
    }
)

CATCH_ALL_LABEL = "random"
CONTOUR_FALLBACK_LABEL = "any"


# ── 3) HSV rule table ────────────────────────────────────────────────────────
# Each rule: label, threshold group, predicate, bands.
# predicate = list of alternative clauses (OR); a clause maps channel → bounds (AND).
# An empty clause always matches. Bands are inclusive [min, max, tier]; first hit wins.
DEFAULT_RULES: tuple[dict, ...] = (
    {
        "label": "daily-neutrals",
        "group": "neutrals",
        "when": [{"saturation": {"gt": 40, "lt": 65}, "value": {"gt": 35, "lt": 70}}],
        "bands": [[40, 59, "D"], [60, 74, "M"], [75, 100, "L"]],
    },
    {
        "label": "perfect-pinks",
        "group": "pinks",
        "when": [
            {"hue": {"le": 8}, "saturation": {"ge": 25, "le": 75}, "value": {"ge": 40}},
            {"hue": {"ge": 350}, "saturation": {"ge": 25, "le": 75}, "value": {"ge": 40}},
            {"hue": {"ge": 325, "lt": 350}, "saturation": {"ge": 40}, "value": {"ge": 50}},
        ],
        "bands": [[40, 59, "D"], [60, 74, "M"], [75, 100, "L"]],
    },
    {
        "label": "bold-and-deep",
        "group": "bold",
        "when": [{"saturation": {"gt": 55}, "value": {"lt": 50}}],
        "bands": [[0, 25, "D"], [26, 35, "M"], [36, 50, "L"]],
    },
    {
        "label": "bright-and-fun",
        "group": "bright",
        "when": [{"saturation": {"gt": 75}, "value": {"gt": 75}}],
        "bands": [[75, 80, "D"], [81, 90, "M"], [91, 100, "L"]],
    },
    {
        "label": "reds-and-browns",
        "group": "reds_browns",
        "when": [{"hue": {"ge": 0, "le": 15}, "saturation": {"gt": 70}, "value": {"lt": 70}}],
        "bands": [[0, 55, "D"], [56, 65, "M"], [66, 80, "L"]],
    },
    {
        "label": CATCH_ALL_LABEL,
        "group": "random",
        "when": [{}],
        "bands": [[0, 50, "D"], [50, 70, "M"], [70, 100, "L"]],
    },
)

HSV_LABELS: tuple[str, ...] = tuple(rule["label"] for rule in DEFAULT_RULES)
