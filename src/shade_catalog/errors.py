"""
errors.py
=========

Does: Define the exception hierarchy shared by the color, classification,
      taxonomy and store layers.
Used By: ColorModel (InvalidHex), Classifier (UnclassifiableDepth), record
         parsing (InvalidRecord), catalog loading (LoadFailure).
"""

from __future__ import annotations

__all__ = [
    "ShadeCatalogError",
    "InvalidHex",
    "InvalidRecord",
    "UnclassifiableDepth",
    "LoadFailure",
]


class ShadeCatalogError(Exception):
    """Base class for every error raised by shade_catalog."""


class InvalidHex(ShadeCatalogError, ValueError):
    """Raise when a color is not a strict 6-digit hex string."""

    def __init__(self, value: object):
        super().__init__(f"Invalid hex color: {value!r}")
        self.value = value


class InvalidRecord(ShadeCatalogError, ValueError):
    """Raise when a raw input row cannot be turned into a ShadeRecord."""


class UnclassifiableDepth(ShadeCatalogError, ValueError):
    """Raise when a skin-depth hint or brightness value maps to no depth tier."""

    def __init__(self, label: str, observed: object):
        super().__init__(f"No depth tier for {observed!r} under {label!r}")
        self.label = label
        self.observed = observed


class LoadFailure(ShadeCatalogError, RuntimeError):
    """Raise when the persisted taxonomy cannot be fetched or is not a taxonomy."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Cannot load {key}: {reason}")
        self.key = key
        self.reason = reason
