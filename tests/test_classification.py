"""
Tests for classification/ (rules.py, depth.py, classifier.py)

Covers:
- HSV policy: multi-label firing, per-label depth bands, band gaps, catch-all last
- base policy: category label + skin-depth table
- contour policy: finish label + skin-depth table
- rule table building/validation
"""

from __future__ import annotations

import importlib

import pytest

clf = importlib.import_module("shade_catalog.classification.classifier")
rules = importlib.import_module("shade_catalog.classification.rules")
depth = importlib.import_module("shade_catalog.classification.depth")
color = importlib.import_module("shade_catalog.color")
errors = importlib.import_module("shade_catalog.errors")


def _classify(hex_color, category="lip-gloss", hint=None):
    return clf.classify(color.hsv_from_hex(hex_color), category, hint)


# ──────────────────────────────────────────────────────────────────────────────
# HSV policy
# ──────────────────────────────────────────────────────────────────────────────
def test_pale_pink_gets_pink_label_light():
    assert _classify("#ffb6c1") == [("perfect-pinks", "L"), ("random", "L")]


def test_dark_red_gets_reds_label_dark():
    assert _classify("#8b0000") == [("reds-and-browns", "D"), ("random", "M")]


def test_mid_green_is_a_daily_neutral():
    assert _classify("#4d994d") == [("daily-neutrals", "M"), ("random", "M")]


def test_vivid_pink_fires_several_labels_in_table_order():
    assert _classify("#ff1493") == [
        ("perfect-pinks", "L"),
        ("bright-and-fun", "L"),
        ("random", "L"),
    ]


def test_bold_and_deep_uses_its_own_scale():
    # same value (38) is "L" on the bold scale and "D" on the catch-all scale
    assert _classify("#300060") == [("bold-and-deep", "L"), ("random", "D")]


def test_band_gap_drops_label_but_keeps_catch_all():
    # value ≈ 37 satisfies the neutrals predicate but falls before its first band
    assert _classify("#5e2f2f") == [("random", "D")]


@pytest.mark.parametrize("hex_color", ["#000000", "#ffffff", "#123456", "#ffb6c1", "#8b0000"])
def test_catch_all_is_always_last(hex_color):
    out = _classify(hex_color)
    assert out[-1].label == "random"
    assert [p.label for p in out].count("random") == 1


def test_hsv_policy_without_color_places_nothing():
    assert clf.Classifier().classify(None, "lip-gloss") == []


# ──────────────────────────────────────────────────────────────────────────────
# Base & contour policies
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "hint,tier",
    [("F", "L"), ("FM", "L"), ("MD", "M"), ("D1", "M"), ("D2", "D"), ("VD", "D"), (" D1 ", "M")],
)
def test_foundation_depth_from_skin_hint(hint, tier):
    out = _classify("#c68642", "foundation", clf.ShadeHint(skin_depth_hint=hint))
    assert out == [("foundation", tier)]


@pytest.mark.parametrize("hint", [None, "", "XX", "vd", "F,FM"])
def test_base_with_unknown_hint_is_dropped(hint):
    assert _classify("#c68642", "concealer", clf.ShadeHint(skin_depth_hint=hint)) == []


def test_base_policy_ignores_hsv():
    # a color that would fire several HSV labels
    out = _classify("#ff1493", "skin-tint", clf.ShadeHint(skin_depth_hint="VD"))
    assert out == [("skin-tint", "D")]


def test_contour_label_is_the_finish():
    out = _classify("#8d5524", "contour", clf.ShadeHint(skin_depth_hint="FM", finish="cream"))
    assert out == [("cream", "L")]


def test_contour_without_finish_falls_back_to_any():
    out = _classify("#8d5524", "contour", clf.ShadeHint(skin_depth_hint="D2"))
    assert out == [("any", "D")]


def test_policy_choice_is_case_insensitive():
    c = clf.Classifier()
    assert c.policy_for("Foundation") == clf.POLICY_BASE
    assert c.policy_for("CONTOUR") == clf.POLICY_CONTOUR
    assert c.policy_for("lip-gloss") == clf.POLICY_HSV


# ──────────────────────────────────────────────────────────────────────────────
# Depth helpers
# ──────────────────────────────────────────────────────────────────────────────
def test_depth_from_skin_hint_raises_for_unknown():
    with pytest.raises(errors.UnclassifiableDepth):
        depth.depth_from_skin_hint("ZZ", color.SKIN_DEPTH_TIERS, "foundation")


def test_depth_from_value_first_band_wins_on_shared_edge():
    random_rule = rules.default_classifier_config().rules[-1]
    assert depth.depth_from_value(50, random_rule) == "D"
    assert depth.depth_from_value(70, random_rule) == "M"
    assert depth.depth_from_value(71, random_rule) == "L"


def test_depth_from_value_gap_raises():
    neutrals = rules.default_classifier_config().rules[0]
    with pytest.raises(errors.UnclassifiableDepth):
        depth.depth_from_value(39, neutrals)


# ──────────────────────────────────────────────────────────────────────────────
# Rule table
# ──────────────────────────────────────────────────────────────────────────────
def test_default_config_labels_and_caching():
    cfg = rules.default_classifier_config()
    assert cfg is rules.default_classifier_config()
    assert cfg.labels == (
        "daily-neutrals",
        "perfect-pinks",
        "bold-and-deep",
        "bright-and-fun",
        "reds-and-browns",
        "random",
    )


def test_custom_rule_table_is_a_data_change():
    cfg = rules.build_classifier_config(
        {"rules": [{"label": "everything", "when": [{}], "bands": [[0, 100, "M"]]}]}
    )
    hsv = color.hsv_from_hex("#123456")
    assert clf.classify(hsv, "eyeshadow", config=cfg) == [("everything", "M")]


def test_custom_base_categories():
    cfg = rules.build_classifier_config({"base_categories": ["bronzer"]})
    out = clf.Classifier(cfg).classify(None, "bronzer", clf.ShadeHint(skin_depth_hint="MD"))
    assert out == [("bronzer", "M")]


@pytest.mark.parametrize(
    "raw",
    [
        {"rules": [{"label": "x", "when": [{"chroma": {"gt": 1}}], "bands": []}]},
        {"rules": [{"label": "x", "when": [{"value": {"between": 1}}], "bands": []}]},
        {"rules": [{"label": "x", "bands": [[0, 10, "Q"]]}]},
        {"rules": [{"label": "x", "bands": [[50, 10, "L"]]}]},
        {"rules": [{"label": "x"}, {"label": "x"}]},
        {"rules": [{"when": [{}]}]},
        {"skin_depth_tiers": {"F": "light"}},
    ],
)
def test_bad_rule_tables_raise(raw):
    with pytest.raises(ValueError):
        rules.build_classifier_config(raw)


def test_condition_and_rule_matching():
    rule = rules.ClassificationRule(
        label="warm",
        group="warm",
        clauses=(
            (rules.Condition("hue", "le", 30.0),),
            (rules.Condition("hue", "ge", 330.0),),
        ),
        bands=(rules.DepthBand(0, 100, "M"),),
    )
    assert rule.matches(color.HSV(10.0, 50.0, 50.0))
    assert rule.matches(color.HSV(340.0, 50.0, 50.0))
    assert not rule.matches(color.HSV(180.0, 50.0, 50.0))


def test_base_label_uses_normalized_category():
    out = _classify("#c68642", " Foundation ", clf.ShadeHint(skin_depth_hint="VD"))
    assert out == [("foundation", "D")]
