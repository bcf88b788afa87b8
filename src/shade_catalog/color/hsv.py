"""
hsv.py
======

Does: Validate strict 6-digit hex colors and convert them to HSV with hue in
      degrees and saturation/value in percent.
Used By: Classifier (HSV policy) and the builder's per-record step.
Returns: HSV named tuples; raises InvalidHex for anything that is not #rrggbb.
"""

from __future__ import annotations

import colorsys
import math
import re
from typing import NamedTuple

from webcolors import hex_to_rgb

from shade_catalog.errors import InvalidHex

__all__ = ["HSV", "hsv_from_hex", "normalize_hex", "rounded_value"]
__docformat__ = "google"

_HEX6 = re.compile(r"[0-9a-fA-F]{6}")


class HSV(NamedTuple):
    hue: float  # degrees, [0, 360)
    saturation: float  # percent, [0, 100]
    value: float  # percent, [0, 100]


def normalize_hex(color: object) -> str:
    """
    Does: Strip one optional leading '#' and check for exactly six hex digits.
    Returns: The six digits as given (case preserved), without '#'.
    Raises: InvalidHex for shorthand, alpha channels, non-strings or junk.
    """
    if not isinstance(color, str):
        raise InvalidHex(color)
    digits = color[1:] if color.startswith("#") else color
    if not _HEX6.fullmatch(digits):
        raise InvalidHex(color)
    return digits


def hsv_from_hex(color: object) -> HSV:
    """Does: Convert '#rrggbb' / 'rrggbb' to HSV (achromatic → hue 0, saturation 0)."""
    digits = normalize_hex(color)
    rgb = hex_to_rgb(f"#{digits}")
    h, s, v = colorsys.rgb_to_hsv(rgb.red / 255.0, rgb.green / 255.0, rgb.blue / 255.0)
    return HSV(hue=h * 360.0, saturation=s * 100.0, value=v * 100.0)


def rounded_value(hsv: HSV) -> int:
    """Does: Round the value channel half-up to the integer used by depth bands."""
    return int(math.floor(hsv.value + 0.5))
