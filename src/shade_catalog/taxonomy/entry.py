"""
entry.py
========

Does: Define the immutable input record (ShadeRecord) and the stored catalog
      entry (ShadeEntry), plus their conversions:
        - raw flat row → ShadeRecord (field mapping, skintone/price coercion);
        - ShadeRecord → ShadeEntry;
        - ShadeEntry ↔ single-key JSON object {"#hex": {...}}.
Used By: Builder, Taxonomy codec, catalog source discovery.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from shade_catalog.classification import ShadeHint, coerce_price
from shade_catalog.color import normalize_hex
from shade_catalog.errors import InvalidHex, InvalidRecord

__all__ = ["EntryKey", "ShadeRecord", "ShadeEntry", "normalize_skintone"]
__docformat__ = "google"

logger = logging.getLogger(__name__)

EntryKey = tuple[str, str, str]  # (brand, product_name, shade_name)

_ENTRY_FIELDS = ("brand", "product_name", "shade_name", "shade_hex_code", "price", "link", "type")


def _opt_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_skintone(value: object) -> str:
    """
    Does: Collapse a skintone field into a plain code.
          Mappings of flags ({"F": true, "FM": false}) become their truthy keys
          joined by ','; when none are truthy, all keys are joined.
    """
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        keys = [str(k) for k, flag in value.items() if flag]
        return ",".join(keys or [str(k) for k in value])
    return str(value)


def _price_from_row(value: object) -> float | int | None:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    p = coerce_price(value)
    return int(p) if p.is_integer() else p


# ── Input record ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ShadeRecord:
    brand: str
    product_name: str
    shade_name: str
    hex_color: str
    price: float | int | None = None
    link: str = ""
    requested_category: str = ""
    skin_depth_hint: str | None = None
    coverage: str | None = None
    finish: str | None = None

    @property
    def hint(self) -> ShadeHint:
        return ShadeHint(self.skin_depth_hint, self.coverage, self.finish)

    @property
    def product_key(self) -> tuple[str, str]:
        return (self.brand, self.product_name)

    def to_entry(self, category: str | None = None) -> ShadeEntry:
        """Raises InvalidHex when the color is not a strict 6-digit hex."""
        digits = normalize_hex(self.hex_color)
        return ShadeEntry(
            brand=self.brand,
            product_name=self.product_name,
            shade_name=self.shade_name,
            shade_hex_code=f"#{digits}",
            price=self.price,
            link=self.link or "",
            type=category or self.requested_category,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any], category: str | None = None) -> ShadeRecord:
        """
        Does: Map a flat input row (brand, product_name, shade_name, shade_hex_code,
              price, link, type, coverage, finish, skintone) to a record.
        Raises: InvalidRecord when the row is not a mapping or lacks an identity field.
        """
        if not isinstance(row, Mapping):
            raise InvalidRecord(f"row must be a mapping, got {type(row).__name__}")

        identity = {}
        for name in ("brand", "product_name", "shade_name"):
            value = row.get(name)
            if not isinstance(value, str) or not value:
                raise InvalidRecord(f"row is missing {name!r}: {dict(row)!r}")
            identity[name] = value

        hex_color = row.get("shade_hex_code")
        if not isinstance(hex_color, str):
            raise InvalidRecord(f"row has no shade_hex_code: {dict(row)!r}")

        return cls(
            hex_color=hex_color,
            price=_price_from_row(row.get("price")),
            link=str(row.get("link") or ""),
            requested_category=str(category or row.get("type") or ""),
            skin_depth_hint=_opt_str(normalize_skintone(row.get("skintone"))),
            coverage=_opt_str(row.get("coverage")),
            finish=_opt_str(row.get("finish")),
            **identity,
        )


# ── Stored entry ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ShadeEntry:
    brand: str
    product_name: str
    shade_name: str
    shade_hex_code: str
    price: Any = None
    link: str = ""
    type: str = ""

    @property
    def key(self) -> EntryKey:
        return (self.brand, self.product_name, self.shade_name)

    def to_document(self) -> dict[str, dict[str, Any]]:
        hex_key = self.shade_hex_code if self.shade_hex_code.startswith("#") else f"#{self.shade_hex_code}"
        return {hex_key: {name: getattr(self, name) for name in _ENTRY_FIELDS}}

    @classmethod
    def from_document(cls, obj: object) -> ShadeEntry | None:
        """
        Does: Parse one persisted list item {"#hex": {...}}.
        Returns: ShadeEntry, or None when the item is malformed.
        """
        if not isinstance(obj, Mapping) or len(obj) != 1:
            return None
        hex_key, inner = next(iter(obj.items()))
        if not isinstance(inner, Mapping):
            return None
        brand = inner.get("brand")
        product = inner.get("product_name")
        shade = inner.get("shade_name")
        if not all(isinstance(v, str) and v for v in (brand, product, shade)):
            return None
        shade_hex = inner.get("shade_hex_code") or hex_key
        try:
            shade_hex = f"#{normalize_hex(shade_hex)}"
        except InvalidHex:
            # legacy documents kept the raw value; keep it rather than drop the shade
            shade_hex = str(shade_hex)
        return cls(
            brand=brand,
            product_name=product,
            shade_name=shade,
            shade_hex_code=shade_hex,
            price=inner.get("price"),
            link=str(inner.get("link") or ""),
            type=str(inner.get("type") or ""),
        )
