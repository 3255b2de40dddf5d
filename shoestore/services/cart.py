"""Inventory-aware cart rules: caps, de-duplication and totals."""

from __future__ import annotations

import logging
import math
import re
from typing import Callable

from shoestore.schemas.cart import CartLine, CartOutcome, CartTotals
from shoestore.schemas.inventory import Product
from shoestore.services.store import DocumentStore

logger = logging.getLogger(__name__)

PACKAGING_FEE_PER_PAIR = 50
# Below this many units in stock a customer may hold a single pair
CRITICAL_STOCK_LEVEL = 6
UNLIMITED = math.inf


class CartAuthorizationError(PermissionError):
    """Raised when a cart mutation is attempted without an authorized caller."""


def _eu_from(size: str) -> int | None:
    match = re.search(r"\d+", size or "")
    return int(match.group()) if match else None


class CartEngine:
    """Cart operations for one cart owner, reading caps from the live inventory document.

    ``authorize`` is consulted before every mutation; reads are always allowed.
    Products that cannot be matched in the inventory are not capped.
    """

    def __init__(
        self,
        store: DocumentStore,
        owner: str | None = None,
        authorize: Callable[[], bool] | None = None,
        fee_per_pair: int = PACKAGING_FEE_PER_PAIR,
        critical_level: int = CRITICAL_STOCK_LEVEL,
    ):
        self.store = store
        self.owner = owner
        self.authorize = authorize
        self.fee_per_pair = fee_per_pair
        self.critical_level = critical_level

    # ----- persistence -----

    def lines(self) -> list[CartLine]:
        return self.store.read_cart(self.owner)

    def _save(self, lines: list[CartLine]) -> None:
        self.store.write_cart(lines, self.owner)

    def _require_authorized(self) -> None:
        if self.authorize is not None and not self.authorize():
            raise CartAuthorizationError("Login required to change the cart")

    # ----- inventory caps -----

    def find_inventory_product(self, line: CartLine) -> Product | None:
        products = self.store.read_inventory()
        if not products:
            return None
        if line.id:
            by_id = next((p for p in products if p.id == line.id), None)
            if by_id:
                return by_id
        title = line.title.strip()
        brand = line.brand.strip().lower()
        if title:
            exact = next((p for p in products if p.display_name.strip() == title), None)
            if exact:
                return exact
            lowered = title.lower()
            partial = next((p for p in products if lowered in p.display_name.lower()), None)
            if partial:
                return partial
        if brand:
            return next((p for p in products if p.brand.strip().lower() == brand), None)
        return None

    def available_stock(self, line: CartLine, product: Product) -> int:
        eu = _eu_from(line.size)
        if eu is None:
            return 0
        colors = product.colors
        if line.color:
            wanted = line.color.strip().lower()
            named = [c for c in product.colors if c.name.strip().lower() == wanted]
            if named:
                colors = named
        return sum(s.stock for c in colors for s in c.sizes if s.eu == eu)

    def max_allowed(self, line: CartLine) -> int | float:
        product = self.find_inventory_product(line)
        if product is None:
            return UNLIMITED
        stock = self.available_stock(line, product)
        if stock <= 0:
            return 0
        if stock < self.critical_level:
            return 1
        return stock

    # ----- mutations -----

    def add(self, line: CartLine) -> CartOutcome:
        self._require_authorized()
        cap = self.max_allowed(line)
        if cap == 0:
            logger.info(f"Rejected {line.title!r} size {line.size}: out of stock")
            return CartOutcome(success=False, reason="out_of_stock", maxAllowed=0)

        lines = self.lines()
        incoming = line.quantity or 1
        found = next((item for item in lines if item.identity == line.identity), None)
        if found:
            new_qty = (found.quantity or 1) + incoming
            if new_qty > cap:
                found.quantity = int(cap)
                self._save(lines)
                logger.info(f"Clamped {line.title!r} size {line.size} to {int(cap)}")
                return CartOutcome(success=False, reason="max_reached", maxAllowed=int(cap))
            found.quantity = new_qty
        else:
            # Newest pair goes on top
            lines.insert(0, line.model_copy(update={"quantity": int(min(incoming, cap))}))
        self._save(lines)
        return CartOutcome(success=True)

    def set_quantity(self, index: int, quantity: int) -> CartOutcome:
        self._require_authorized()
        lines = self.lines()
        if not 0 <= index < len(lines):
            return CartOutcome(success=False, reason="not_found")
        if quantity < 1:
            return CartOutcome(success=False, reason="invalid_quantity")
        line = lines[index]
        cap = self.max_allowed(line)
        if cap == 0:
            return CartOutcome(success=False, reason="out_of_stock", maxAllowed=0)
        if quantity > cap:
            line.quantity = int(cap)
            self._save(lines)
            return CartOutcome(success=False, reason="max_reached", maxAllowed=int(cap))
        line.quantity = quantity
        self._save(lines)
        return CartOutcome(success=True)

    def remove(self, index: int) -> bool:
        self._require_authorized()
        lines = self.lines()
        if not 0 <= index < len(lines):
            return False
        lines.pop(index)
        self._save(lines)
        return True

    def clear(self) -> None:
        self._require_authorized()
        self._save([])

    # ----- derived values -----

    def item_count(self, lines: list[CartLine] | None = None) -> int:
        lines = self.lines() if lines is None else lines
        return sum(line.quantity for line in lines)

    def packaging_fee(self, lines: list[CartLine] | None = None) -> int:
        return self.fee_per_pair * (self.item_count(lines) // 2)

    def totals(self, lines: list[CartLine] | None = None) -> CartTotals:
        lines = self.lines() if lines is None else lines
        subtotal = sum(line.price * line.quantity for line in lines)
        packaging = self.packaging_fee(lines)
        return CartTotals(subtotal=subtotal, packaging=packaging, total=subtotal + packaging)
