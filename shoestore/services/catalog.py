"""Inventory catalog: products, color variants and per-size stock."""

from __future__ import annotations

import random
import re
import string
from typing import Iterable, Literal

from shoestore.schemas.inventory import (
    EU_SIZES,
    MAX_STOCK,
    Color,
    Pricing,
    Product,
    Size,
)
from shoestore.utils.numbers import clamp_num, parse_num

SKU_PREFIX = "SP"
SKU_ALPHABET = string.ascii_uppercase + string.digits

StockStatus = Literal["in", "low", "out"]


class CatalogError(ValueError):
    """Business-rule rejection raised by catalog, bulk and sales operations."""


class NotFoundError(CatalogError):
    """Unknown product or color id."""


# ----- SKU -----

def _code(value: str, length: int) -> str:
    cleaned = re.sub(r"[^A-Z0-9]", "", str(value or "").upper())
    return cleaned[:length].rjust(length, "X")


def generate_sku(brand: str, model: str, existing_skus: Iterable[str]) -> str:
    """Build ``SP-BBB-MMMM-RRRR``, suffixing ``-1``, ``-2``... until unused.

    The existing SKUs are required: a SKU minted without looking at the
    catalog cannot be guaranteed unique.
    """
    if existing_skus is None:
        raise TypeError("generate_sku needs the existing catalog SKUs")
    taken = set(existing_skus)
    rand = "".join(random.choices(SKU_ALPHABET, k=4))
    base = f"{SKU_PREFIX}-{_code(brand, 3)}-{_code(model, 4)}-{rand}"
    if base not in taken:
        return base
    i = 1
    while f"{base}-{i}" in taken:
        i += 1
    return f"{base}-{i}"


# ----- Construction -----

def _required_fields(brand: str, model: str, pricing: Pricing, images: list[str]):
    brand = (brand or "").strip()
    model = (model or "").strip()
    if not brand or not model:
        raise CatalogError("Brand and Model are required")
    if pricing.original <= 0:
        raise CatalogError("Original price is required")
    images = [i for i in images if i]
    if len(images) < 2:
        raise CatalogError("Add at least two images")
    return brand, model, images


def new_color(name: str, code: str | None = None, stock: dict[int, int] | None = None) -> Color:
    stock = stock or {}
    return Color(
        name=name.strip(),
        code=code or "#ffffff",
        sizes=[{"eu": eu, "stock": stock.get(eu, 0)} for eu in EU_SIZES],
    )


def create_product(
    brand: str,
    model: str,
    category: str,
    status: str,
    images: list[str],
    pricing: Pricing,
    existing: list[Product],
    description: str = "",
    colors: Iterable[Color] = (),
) -> Product:
    brand, model, images = _required_fields(brand, model, pricing, images)
    return Product(
        brand=brand,
        model=model,
        category=(category or "").strip(),
        status=status,
        sku=generate_sku(brand, model, (p.sku for p in existing)),
        pricing=pricing,
        description=(description or "").strip(),
        images=images,
        colors=list(colors),
    )


# ----- Queries -----

def total_stock(item: Product | Color) -> int:
    if isinstance(item, Product):
        return sum(total_stock(c) for c in item.colors)
    return sum(s.stock for s in item.sizes)


def available_sizes(color: Color) -> list[int]:
    return sorted(s.eu for s in color.sizes if s.stock > 0)


def stock_status(total: int, threshold: int) -> StockStatus:
    if total <= 0:
        return "out"
    if total <= threshold:
        return "low"
    return "in"


def size_stock(product: Product, eu: int) -> int:
    return sum(s.stock for c in product.colors for s in c.sizes if s.eu == eu)


def filter_products(
    products: list[Product],
    threshold: int,
    text: str | None = None,
    brand: str | None = None,
    category: str | None = None,
    size: int | None = None,
    stock: StockStatus | None = None,
    status: str | None = None,
) -> list[Product]:
    """Admin listing filters, combined with AND."""
    needle = (text or "").strip().lower()
    matched = []
    for p in products:
        if needle:
            haystack = " ".join([p.brand, p.model, p.category]).lower()
            if needle not in haystack and not any(needle in c.name.lower() for c in p.colors):
                continue
        if brand and p.brand != brand:
            continue
        if category and p.category != category:
            continue
        if status and p.status != status:
            continue
        if size is not None:
            # Out-of-stock sizes only count when looking for out-of-stock products
            has_size = any(
                s.eu == size and (stock == "out" or s.stock > 0)
                for c in p.colors for s in c.sizes
            )
            if not has_size:
                continue
        if stock:
            total = total_stock(p) if size is None else size_stock(p, size)
            if stock_status(total, threshold) != stock:
                continue
        matched.append(p)
    return matched


def filter_options(products: list[Product]) -> dict[str, list[str]]:
    return {
        "brands": sorted({p.brand for p in products if p.brand}),
        "categories": sorted({p.category for p in products if p.category}),
    }


# ----- Mutations -----

def find_product(products: list[Product], product_id: str) -> Product:
    product = next((p for p in products if p.id == product_id), None)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def find_color(product: Product, color_id: str) -> Color:
    color = product.color(color_id)
    if not color:
        raise NotFoundError(f"Color {color_id} not found")
    return color


def _clamp_stock(value) -> int:
    return int(clamp_num(parse_num(value, 0), 0, MAX_STOCK))


def update_product(
    products: list[Product],
    product_id: str,
    brand: str,
    model: str,
    category: str,
    status: str,
    pricing: Pricing,
    images: list[str],
    description: str = "",
) -> Product:
    product = find_product(products, product_id)
    brand, model, images = _required_fields(brand, model, pricing, images)
    product.brand = brand
    product.model = model
    product.category = (category or "").strip()
    product.status = status
    product.pricing = pricing
    product.description = (description or "").strip()
    product.images = images
    # Keep the existing SKU; only mint one when it was never set
    if not product.sku:
        product.sku = generate_sku(brand, model, (p.sku for p in products if p is not product))
    return product


def delete_product(products: list[Product], product_id: str) -> tuple[list[Product], Product]:
    product = find_product(products, product_id)
    return [p for p in products if p.id != product_id], product


def add_color(products: list[Product], product_id: str, name: str, code: str | None = None) -> Color:
    product = find_product(products, product_id)
    if not (name or "").strip():
        raise CatalogError("Enter a color name")
    color = new_color(name, code)
    product.colors.append(color)
    return color


def update_color(products: list[Product], product_id: str, color_id: str,
                 name: str | None = None, code: str | None = None) -> Color:
    color = find_color(find_product(products, product_id), color_id)
    color.name = (name or "").strip() or color.name
    color.code = code or color.code
    return color


def delete_color(products: list[Product], product_id: str, color_id: str) -> None:
    product = find_product(products, product_id)
    find_color(product, color_id)
    product.colors = [c for c in product.colors if c.id != color_id]


def set_size_stock(products: list[Product], product_id: str, color_id: str, eu: int, stock) -> Size:
    color = find_color(find_product(products, product_id), color_id)
    size = color.size(eu)
    if size is None:
        raise CatalogError("Size must be between 35 and 45 EU")
    size.stock = _clamp_stock(stock)
    return size


def fill_color_stock(products: list[Product], product_id: str, color_id: str, stock) -> Color:
    color = find_color(find_product(products, product_id), color_id)
    qty = _clamp_stock(stock)
    for s in color.sizes:
        s.stock = qty
    return color


def clear_color_stock(products: list[Product], product_id: str, color_id: str) -> Color:
    return fill_color_stock(products, product_id, color_id, 0)
