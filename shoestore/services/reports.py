"""Read-only summaries over the catalog and the sales log.

Everything is recomputed from the full documents on each call.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal

from shoestore.schemas.inventory import Product
from shoestore.schemas.sales import Sale
from shoestore.services.catalog import stock_status, total_stock

Timeframe = Literal["all", "7d", "30d"]

TIMEFRAME_WINDOWS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def sales_in_timeframe(sales: list[Sale], timeframe: Timeframe = "all", now: datetime | None = None) -> list[Sale]:
    window = TIMEFRAME_WINDOWS.get(timeframe)
    if window is None:
        return list(sales)
    cutoff = (now or datetime.now(timezone.utc)) - window
    return [s for s in sales if s.date >= cutoff]


def stock_alerts(products: list[Product], threshold: int) -> list[dict]:
    """Every product/color/size with low or zero stock."""
    alerts = []
    for p in products:
        for c in p.colors:
            for s in c.sizes:
                status = stock_status(s.stock, threshold)
                if status == "in":
                    continue
                alerts.append({
                    "productId": p.id,
                    "brand": p.brand,
                    "model": p.model,
                    "colorId": c.id,
                    "color": c.name,
                    "eu": s.eu,
                    "stock": s.stock,
                    "status": status,
                })
    return alerts


def best_sizes(sales: list[Sale], timeframe: Timeframe = "all", now: datetime | None = None) -> list[dict]:
    by_size: dict[int, int] = {}
    for s in sales_in_timeframe(sales, timeframe, now):
        by_size[s.eu] = by_size.get(s.eu, 0) + s.qty
    # sorted() is stable, so ties keep first-sold order
    ranked = sorted(by_size.items(), key=lambda kv: kv[1], reverse=True)
    return [{"eu": eu, "qty": qty} for eu, qty in ranked]


def best_brands(
    products: list[Product],
    sales: list[Sale],
    timeframe: Timeframe = "all",
    now: datetime | None = None,
) -> list[dict]:
    brand_of = {p.id: p.brand for p in products}
    by_brand: dict[str, float] = {}
    for s in sales_in_timeframe(sales, timeframe, now):
        brand = brand_of.get(s.productId)
        if brand is None:
            # Product deleted since the sale
            continue
        by_brand[brand] = by_brand.get(brand, 0.0) + s.qty * s.price
    ranked = sorted(by_brand.items(), key=lambda kv: kv[1], reverse=True)
    return [{"brand": brand, "revenue": round(revenue, 2)} for brand, revenue in ranked]


def dead_stock(products: list[Product], sales: list[Sale]) -> list[dict]:
    """Sizes with stock on hand that have never sold, over the whole sales history."""
    sold = {(s.productId, s.colorId, s.eu) for s in sales}
    items = []
    for p in products:
        for c in p.colors:
            for s in c.sizes:
                if s.stock > 0 and (p.id, c.id, s.eu) not in sold:
                    items.append({
                        "productId": p.id,
                        "brand": p.brand,
                        "model": p.model,
                        "colorId": c.id,
                        "color": c.name,
                        "eu": s.eu,
                        "stock": s.stock,
                    })
    return items


def overview(
    products: list[Product],
    sales: list[Sale],
    threshold: int,
    timeframe: Timeframe = "all",
    now: datetime | None = None,
) -> dict:
    alerts = stock_alerts(products, threshold)
    revenue = sum(s.qty * s.price for s in sales_in_timeframe(sales, timeframe, now))
    return {
        "timeframe": timeframe,
        "activeProducts": sum(1 for p in products if p.status == "active"),
        "totalUnits": sum(total_stock(p) for p in products),
        "salesTotal": round(revenue, 2),
        "lowCount": sum(1 for a in alerts if a["status"] == "low"),
        "outCount": sum(1 for a in alerts if a["status"] == "out"),
    }
