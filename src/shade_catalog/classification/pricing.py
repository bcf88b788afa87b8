"""
pricing.py
==========

Does: Bucket a price into its tier key: floor to the step, collapse above the cap.
Returns: String tier keys such as "0", "1000", "5000".
"""

from __future__ import annotations

import math

from shade_catalog import settings

__all__ = ["price_tier", "coerce_price"]


def coerce_price(price: object) -> float:
    """Does: Read a price as a finite, non-negative float; anything else counts as 0."""
    if price is None or isinstance(price, bool):
        return 0.0
    try:
        p = float(price)  # accepts numeric strings like "1299"
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(p) or p < 0:
        return 0.0
    return p


def price_tier(
    price: object,
    step: int = settings.PRICE_STEP,
    cap: int = settings.PRICE_CAP,
) -> str:
    """
    Does: price > cap → str(cap); otherwise str(floor(price / step) * step).
    Raises: ValueError when step is not positive or cap is negative.
    """
    if step <= 0:
        raise ValueError(f"price step must be positive, got {step}")
    if cap < 0:
        raise ValueError(f"price cap must not be negative, got {cap}")
    p = coerce_price(price)
    if p > cap:
        return str(cap)
    return str(int(p // step) * step)
