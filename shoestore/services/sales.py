"""Point-of-sale recording against the catalog stock."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from shoestore.schemas.inventory import MAX_STOCK, Product
from shoestore.schemas.sales import Sale
from shoestore.services.catalog import CatalogError, find_color, find_product
from shoestore.utils.numbers import clamp_num, parse_num

logger = logging.getLogger(__name__)


def record_sale(
    products: list[Product],
    product_id: str,
    color_id: str,
    eu: int,
    qty=1,
    price: float | None = None,
    now: datetime | None = None,
) -> Sale:
    """Take ``qty`` pairs out of stock and return the sale to append to the log."""
    product = find_product(products, product_id)
    color = find_color(product, color_id)
    size = color.size(eu)
    if size is None:
        raise CatalogError("Size must be between 35 and 45 EU")
    qty = int(clamp_num(parse_num(qty, 1), 1, MAX_STOCK))
    if price is None:
        price = product.pricing.sale or product.pricing.original or 0
    if size.stock < qty:
        raise CatalogError("Insufficient stock")
    size.stock -= qty
    sale = Sale(
        productId=product.id,
        colorId=color.id,
        eu=eu,
        qty=qty,
        price=price,
        date=now or datetime.now(timezone.utc),
    )
    logger.info(f"Recorded sale {sale.id}: {product.display_name} {color.name} {eu}EU x{qty}")
    return sale


def sales_log(sales: list[Sale]) -> list[Sale]:
    return list(reversed(sales))
