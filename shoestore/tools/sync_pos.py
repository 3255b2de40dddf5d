"""One-way sync from the POS (Loyverse) into the hosted database (Supabase PostgREST).

Run as ``python -m shoestore.tools.sync_pos [since]``. Items, customers and
orders are fetched from the POS and upserted one row at a time. A row that
fails to upsert is logged and skipped; nothing is retried or rolled back.
"""

from __future__ import annotations

import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any

import httpx

from shoestore.config import get_settings
from shoestore.utils.numbers import parse_num

logger = logging.getLogger(__name__)
TIMEOUT_SECONDS = 30
DEFAULT_CURRENCY = "PHP"


# ----- Mapping -----

def slugify(text: Any) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", str(text or "").lower()).strip("-")
    return slug[:60]


def _cents(value: Any) -> int:
    return int(round(float(parse_num(value, 0)) * 100))


def _first(*values: Any) -> Any:
    # Falsy values (0, "", None) fall through, matching how the POS omits fields
    return next((v for v in values if v), None)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def map_item_to_product(item: dict) -> dict:
    item_id = _first(item.get("id"), item.get("sku"), item.get("code")) or slugify(item.get("name") or "product")
    price = _first(parse_num(item.get("price"), 0), parse_num(item.get("unit_price"), 0)) or 0
    categories = item.get("categories")
    if categories and not isinstance(categories, list):
        categories = [categories]
    return {
        "id": str(item_id),
        "title": _first(item.get("name"), item.get("title")) or "",
        "description": item.get("description") or None,
        "price_cents": _cents(price),
        "currency": item.get("currency") or DEFAULT_CURRENCY,
        "stock": int(_first(parse_num(item.get("quantity"), 0), parse_num(item.get("stock"), 0)) or 0),
        "images": item.get("images") or [],
        "categories": categories or [],
        "tags": item.get("tags") or [],
        "metadata": {"raw": item},
        "loyverse_id": item.get("id") or None,
    }


def map_sale_to_order(sale: dict) -> dict:
    items = []
    for line in _as_list(sale.get("items") or sale.get("lines"), "items"):
        qty = parse_num(_first(line.get("quantity"), line.get("qty")), 0)
        unit = parse_num(_first(line.get("price"), line.get("unit_price")), 0)
        items.append({
            "product_id": _first(line.get("product_id"), line.get("item_id"), line.get("id")),
            "sku": line.get("sku") or None,
            "title": _first(line.get("name"), line.get("title")),
            "quantity": qty,
            "unit_price_cents": _cents(unit),
            "line_total_cents": _cents(_first(parse_num(line.get("total"), 0), unit * qty)),
        })
    customer = sale.get("customer")
    if not isinstance(customer, dict):
        # Walk-in sales carry a plain label instead of a customer object
        customer = {}
    return {
        "order_number": _first(sale.get("id"), sale.get("order_no")),
        "buyer_email": _first(customer.get("email"), sale.get("email")),
        "items": items,
        "subtotal_cents": _cents(_first(sale.get("total_without_tax"), sale.get("subtotal"), sale.get("subtotal_amount"))),
        "shipping_cents": _cents(sale.get("shipping")),
        "tax_cents": _cents(sale.get("tax")),
        "discount_cents": _cents(sale.get("discount")),
        "total_cents": _cents(_first(sale.get("total"), sale.get("amount"))),
        "currency": sale.get("currency") or DEFAULT_CURRENCY,
        "status": sale.get("status") or "paid",
        "payment_method": sale.get("payment_method") or None,
        "shipping_address": _first(sale.get("shipping_address"), sale.get("address")) or {},
        "created_at": _first(sale.get("created_at"), sale.get("createdAt")) or _now_iso(),
        "loyverse_id": sale.get("id") or None,
    }


def map_customer_to_user(customer: dict) -> dict:
    first_name = customer.get("first_name")
    display_name = customer.get("name")
    if not display_name and first_name:
        display_name = f"{first_name} {customer.get('last_name') or ''}".strip()
    return {
        "email": (customer.get("email") or "").lower() or None,
        "display_name": display_name or None,
        "first_name": first_name or None,
        "last_name": customer.get("last_name") or None,
        "phone": customer.get("phone") or None,
        "role": "client",
        "addresses": customer.get("addresses") or [],
        "registered_at": customer.get("created_at") or _now_iso(),
        "loyverse_id": customer.get("id") or None,
    }


def _as_list(payload: Any, key: str) -> list:
    """POS endpoints answer with either a bare array or an envelope object.

    Only object records are kept.
    """
    if isinstance(payload, dict):
        payload = payload.get("data") or payload.get(key)
    if not isinstance(payload, list):
        return []
    return [record for record in payload if isinstance(record, dict)]


def _json_body(response: httpx.Response, path: str) -> Any:
    try:
        return response.json()
    except ValueError:
        logger.error(f"POS {path} answered with a non-JSON body: {response.text[:200]}")
        return None


# ----- Sync -----

class PosSync:
    """Holds the two HTTP clients; pass your own clients to point it elsewhere."""

    def __init__(
        self,
        pos: httpx.Client,
        supabase: httpx.Client,
        page_size: int = 100,
        max_pages: int = 50,
    ):
        self.pos = pos
        self.supabase = supabase
        self.page_size = page_size
        self.max_pages = max_pages

    @classmethod
    def from_settings(cls, settings=None) -> "PosSync":
        settings = settings or get_settings()
        pos = httpx.Client(
            base_url=settings.LOYVERSE_BASE,
            headers={"Authorization": f"Bearer {settings.LOYVERSE_API_KEY}"},
            timeout=TIMEOUT_SECONDS,
        )
        supabase = httpx.Client(
            base_url=f"{settings.SUPABASE_URL.rstrip('/')}/rest/v1",
            headers={
                "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
                "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
                "Content-Type": "application/json",
                "Prefer": "resolution=merge-duplicates",
            },
            timeout=TIMEOUT_SECONDS,
        )
        return cls(pos, supabase, page_size=settings.SYNC_PAGE_SIZE, max_pages=settings.SYNC_MAX_PAGES)

    def close(self) -> None:
        self.pos.close()
        self.supabase.close()

    # ----- POS reads -----

    def fetch_pages(self, path: str, key: str) -> list[dict]:
        """Walk ``page``/``per_page`` until a short page or the page limit."""
        records: list[dict] = []
        for page in range(1, self.max_pages + 1):
            try:
                response = self.pos.get(path, params={"page": page, "per_page": self.page_size})
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"POS {path} page {page} failed: HTTP {e.response.status_code}: {e.response.text[:200]}")
                break
            except httpx.RequestError as e:
                logger.error(f"POS {path} page {page} request error: {e}")
                break
            batch = _as_list(_json_body(response, path), key)
            records.extend(batch)
            if len(batch) < self.page_size:
                break
        else:
            logger.warning(f"POS {path}: stopped after {self.max_pages} pages")
        return records

    def fetch_orders(self, since: str | None = None) -> list[dict]:
        params = {"since": since} if since else {}
        try:
            response = self.pos.get("/orders", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"POS /orders failed: HTTP {e.response.status_code}: {e.response.text[:200]}")
            return []
        except httpx.RequestError as e:
            logger.error(f"POS /orders request error: {e}")
            return []
        return _as_list(_json_body(response, "/orders"), "sales")

    # ----- Supabase writes -----

    def upsert(self, table: str, conflict: str, row: dict) -> bool:
        try:
            response = self.supabase.post(f"/{table}", params={"on_conflict": conflict}, json=row)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Upsert into {table} failed for {row.get(conflict)}: HTTP {e.response.status_code}: {e.response.text[:200]}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Upsert into {table} failed for {row.get(conflict)}: {e}")
            return False
        logger.info(f"Upserted {table} {row.get(conflict)}")
        return True

    def _upsert_all(self, table: str, conflict: str, records: list[dict], mapper) -> dict[str, int]:
        counts = {"upserted": 0, "failed": 0}
        for record in records:
            try:
                row = mapper(record)
            except (TypeError, ValueError, AttributeError) as e:
                logger.error(f"Could not map {table} record {record.get('id')}: {e}")
                counts["failed"] += 1
                continue
            counts["upserted" if self.upsert(table, conflict, row) else "failed"] += 1
        return counts

    def sync_items(self) -> dict[str, int]:
        logger.info("Syncing items...")
        items = self.fetch_pages("/items", "items")
        return self._upsert_all("inventory", "id", items, map_item_to_product)

    def sync_customers(self) -> dict[str, int]:
        logger.info("Syncing customers...")
        customers = self.fetch_pages("/customers", "customers")
        return self._upsert_all("users", "loyverse_id", customers, map_customer_to_user)

    def sync_orders(self, since: str | None = None) -> dict[str, int]:
        logger.info("Syncing sales...")
        orders = self.fetch_orders(since)
        return self._upsert_all("orders", "loyverse_id", orders, map_sale_to_order)

    def run(self, since: str | None = None) -> dict[str, dict[str, int]]:
        return {
            "items": self.sync_items(),
            "customers": self.sync_customers(),
            "orders": self.sync_orders(since),
        }


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = sys.argv[1:] if argv is None else argv
    since = args[0] if args else None
    settings = get_settings()
    if not settings.LOYVERSE_API_KEY:
        logger.error("LOYVERSE_API_KEY not set")
        return 1
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        logger.error("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set")
        return 1

    logger.info("Starting POS -> Supabase sync")
    sync = PosSync.from_settings(settings)
    try:
        results = sync.run(since)
    finally:
        sync.close()
    for entity, counts in results.items():
        logger.info(f"{entity}: {counts['upserted']} upserted, {counts['failed']} failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
