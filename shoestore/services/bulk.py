"""Bulk admin actions over a selection of product ids."""

from __future__ import annotations

import math
from typing import Iterable, Literal

from shoestore.schemas.inventory import EU_SIZES, MAX_STOCK, Product
from shoestore.services.catalog import CatalogError, stock_status
from shoestore.utils.numbers import clamp_num, parse_num

PriceField = Literal["original", "sale", "cost"]
PriceMethod = Literal["set", "inc_pct", "dec_pct", "inc_num", "dec_num"]
RestockScope = Literal["all", "low", "out", "size"]

PRICE_FIELDS = ("original", "sale", "cost")
PRICE_METHODS = ("set", "inc_pct", "dec_pct", "inc_num", "dec_num")
RESTOCK_SCOPES = ("all", "low", "out", "size")


def _selected(products: list[Product], ids: Iterable[str]) -> list[Product]:
    wanted = set(ids or ())
    if not wanted:
        raise CatalogError("Select products first")
    return [p for p in products if p.id in wanted]


def _next_price(current: float, method: str, value: float) -> float:
    if method == "set":
        nxt = value
    elif method == "inc_pct":
        nxt = current * (1 + value / 100)
    elif method == "dec_pct":
        nxt = current * (1 - value / 100)
    elif method == "inc_num":
        nxt = current + value
    else:
        nxt = current - value
    return max(0.0, round(nxt, 2))


def bulk_price(products: list[Product], ids: Iterable[str], field: PriceField, method: PriceMethod, value) -> int:
    """Reprice one pricing field of every selected product from its own current value."""
    selected = _selected(products, ids)
    if field not in PRICE_FIELDS:
        raise CatalogError("Choose a field")
    if method not in PRICE_METHODS:
        raise CatalogError("Choose a method")
    value = parse_num(value, None)
    if value is None:
        raise CatalogError("Enter a value")
    if method in ("inc_pct", "dec_pct") and value < 0:
        raise CatalogError("Percent must be non-negative")
    if method in ("inc_num", "dec_num") and value < 0:
        raise CatalogError("Amount must be non-negative")
    for p in selected:
        current = getattr(p.pricing, field)
        setattr(p.pricing, field, _next_price(current, method, float(value)))
    return len(selected)


def bulk_restock(
    products: list[Product],
    ids: Iterable[str],
    quantity,
    scope: RestockScope,
    threshold: int,
    size: int | None = None,
) -> int:
    """Add ``quantity`` to every matching size of the selected products."""
    selected = _selected(products, ids)
    qty = parse_num(quantity, None)
    if qty is None or qty < 0:
        raise CatalogError("Enter a non-negative quantity")
    qty = math.floor(clamp_num(qty, 0, MAX_STOCK))
    if scope not in RESTOCK_SCOPES:
        raise CatalogError("Choose a scope")
    if scope == "size":
        if size is None:
            raise CatalogError("Enter a size (EU 35-45)")
        if size not in EU_SIZES:
            raise CatalogError("Size must be between 35 and 45 EU")
    for p in selected:
        for c in p.colors:
            for s in c.sizes:
                status = stock_status(s.stock, threshold)
                if (
                    scope == "all"
                    or (scope == "low" and status == "low")
                    or (scope == "out" and status == "out")
                    or (scope == "size" and s.eu == size)
                ):
                    s.stock = int(clamp_num(s.stock + qty, 0, MAX_STOCK))
    return len(selected)


def bulk_set_status(products: list[Product], ids: Iterable[str], status: str) -> int:
    """Archive or unarchive; products already in ``status`` are left as they are."""
    if status not in ("active", "archived"):
        raise CatalogError("Unknown status")
    selected = _selected(products, ids)
    for p in selected:
        p.status = status
    return len(selected)
