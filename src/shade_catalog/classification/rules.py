"""
rules.py
========

Does: Turn rule-table data (Python defaults or a JSON rules file) into one
      immutable ClassifierConfig: ordered HSV rules with their predicates and
      depth bands, plus the base/contour category families and the skin-depth table.
Used By: Classifier construction and the builder.
Returns: Frozen dataclasses; build/load functions raise ValueError/ConfigParseError
         on malformed rule data.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable

from shade_catalog.color import (
    BASE_CATEGORIES,
    CONTOUR_CATEGORIES,
    CONTOUR_FALLBACK_LABEL,
    DEFAULT_RULES,
    DEPTH_TIERS,
    HSV,
    SKIN_DEPTH_TIERS,
)
from shade_catalog.utils import load_config

__all__ = [
    "Condition",
    "DepthBand",
    "ClassificationRule",
    "ClassifierConfig",
    "build_classifier_config",
    "default_classifier_config",
    "load_classifier_config",
]
__docformat__ = "google"

log = logging.getLogger(__name__)

CHANNELS = ("hue", "saturation", "value")
_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "gt": operator.gt,
    "ge": operator.ge,
    "lt": operator.lt,
    "le": operator.le,
}


# ── Rule pieces ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Condition:
    channel: str
    op: str
    limit: float

    def test(self, hsv: HSV) -> bool:
        return _OPERATORS[self.op](getattr(hsv, self.channel), self.limit)


@dataclass(frozen=True)
class DepthBand:
    minimum: int
    maximum: int
    tier: str

    def contains(self, value: int) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass(frozen=True)
class ClassificationRule:
    """
    One HSV label: fires when any clause holds (a clause holds when all of its
    conditions hold), then places the shade by the first band containing the
    rounded value.
    """

    label: str
    group: str
    clauses: tuple[tuple[Condition, ...], ...]
    bands: tuple[DepthBand, ...]

    def matches(self, hsv: HSV) -> bool:
        return any(all(c.test(hsv) for c in clause) for clause in self.clauses)

    def depth_for(self, value: int) -> str | None:
        for band in self.bands:
            if band.contains(value):
                return band.tier
        return None


@dataclass(frozen=True)
class ClassifierConfig:
    rules: tuple[ClassificationRule, ...]
    base_categories: frozenset[str] = BASE_CATEGORIES
    contour_categories: frozenset[str] = CONTOUR_CATEGORIES
    skin_depth_tiers: Mapping[str, str] = field(default_factory=lambda: SKIN_DEPTH_TIERS)
    contour_fallback_label: str = CONTOUR_FALLBACK_LABEL

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(rule.label for rule in self.rules)


# ── Parsing helpers (private) ────────────────────────────────────────────────
def _parse_clause(raw: Mapping[str, Any], label: str) -> tuple[Condition, ...]:
    if not isinstance(raw, Mapping):
        raise ValueError(f"{label}: clause must be an object, got {type(raw).__name__}")
    conditions: list[Condition] = []
    for channel, bounds in raw.items():
        if channel not in CHANNELS:
            raise ValueError(f"{label}: unknown channel {channel!r}")
        if not isinstance(bounds, Mapping):
            raise ValueError(f"{label}: bounds for {channel!r} must be an object")
        for op, limit in bounds.items():
            if op not in _OPERATORS:
                raise ValueError(f"{label}: unknown operator {op!r}")
            conditions.append(Condition(channel, op, float(limit)))
    return tuple(conditions)


def _parse_bands(raw: Iterable[Any], label: str) -> tuple[DepthBand, ...]:
    bands: list[DepthBand] = []
    for item in raw:
        try:
            lo, hi, tier = item
        except (TypeError, ValueError) as e:
            raise ValueError(f"{label}: band must be [min, max, tier], got {item!r}") from e
        if tier not in DEPTH_TIERS:
            raise ValueError(f"{label}: unknown depth tier {tier!r}")
        if int(lo) > int(hi):
            raise ValueError(f"{label}: band min {lo} above max {hi}")
        bands.append(DepthBand(int(lo), int(hi), tier))
    return tuple(bands)


def _parse_rule(raw: Mapping[str, Any]) -> ClassificationRule:
    label = raw.get("label")
    if not isinstance(label, str) or not label:
        raise ValueError(f"rule without a label: {raw!r}")
    clauses = tuple(_parse_clause(c, label) for c in raw.get("when") or [{}])
    return ClassificationRule(
        label=label,
        group=str(raw.get("group") or label),
        clauses=clauses,
        bands=_parse_bands(raw.get("bands") or [], label),
    )


# ── Public builders ──────────────────────────────────────────────────────────
def build_classifier_config(raw: Mapping[str, Any] | None = None) -> ClassifierConfig:
    """
    Does: Build a ClassifierConfig from a rules document; missing keys fall back
          to the built-in defaults.
    Returns: Immutable ClassifierConfig.
    Raises: ValueError on malformed rules, bands or skin-depth tiers.
    """
    raw = raw or {}
    rules = tuple(_parse_rule(r) for r in raw.get("rules", DEFAULT_RULES))
    labels = [r.label for r in rules]
    if len(set(labels)) != len(labels):
        raise ValueError(f"duplicate rule labels: {labels}")

    skin = dict(raw.get("skin_depth_tiers", SKIN_DEPTH_TIERS))
    bad = {k: v for k, v in skin.items() if v not in DEPTH_TIERS}
    if bad:
        raise ValueError(f"unknown depth tiers in skin_depth_tiers: {bad}")

    return ClassifierConfig(
        rules=rules,
        base_categories=frozenset(raw.get("base_categories", BASE_CATEGORIES)),
        contour_categories=frozenset(raw.get("contour_categories", CONTOUR_CATEGORIES)),
        skin_depth_tiers=MappingProxyType(skin),
        contour_fallback_label=str(raw.get("contour_fallback_label", CONTOUR_FALLBACK_LABEL)),
    )


@lru_cache(maxsize=1)
def default_classifier_config() -> ClassifierConfig:
    """Does: Return the cached built-in configuration."""
    return build_classifier_config()


def load_classifier_config(
    file: str = "classification_rules",
    *,
    base_dir: Path | None = None,
    allow_comments: bool = False,
) -> ClassifierConfig:
    """
    Does: Load <data>/<file>.json through load_config, with build_classifier_config
          as the validator (so the built config is what gets cached).
    Raises: ConfigFileNotFound / DataDirNotFound when missing, ConfigParseError when invalid.
    """
    config = load_config(
        file, base_dir=base_dir, validator=build_classifier_config, allow_comments=allow_comments
    )
    log.debug("Loaded %d classification rules from %s", len(config.rules), file)
    return config
