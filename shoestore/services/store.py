"""Key/value JSON document store shared by the cart, catalog, sales log and settings."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from shoestore.models.document import Document
from shoestore.schemas.cart import CartLine
from shoestore.schemas.inventory import Product
from shoestore.schemas.sales import Sale
from shoestore.schemas.settings import StoreSettings

logger = logging.getLogger(__name__)

CART_KEY = "cart"
INVENTORY_KEY = "inventory"
SALES_KEY = "sales"
SETTINGS_KEY = "settings"

ChangeListener = Callable[[str], None]


def cart_key(owner: str | None) -> str:
    return f"{CART_KEY}:{owner}" if owner else CART_KEY


def _records(raw: Any, model: type[BaseModel], key: str) -> list:
    """Normalize a stored array into models, dropping entries that cannot be read."""
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Document {key!r} is not an array; reading as empty")
        return []
    records = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object entry {idx} in {key!r}")
            continue
        try:
            records.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping malformed entry {idx} in {key!r}: {e.error_count()} error(s)")
    return records


class DocumentStore:
    """Explicit handle on the persisted documents.

    Writes are last-write-wins; registered listeners are told which key changed
    after every write so other views can refresh. Listeners are advisory only.
    """

    def __init__(self, db: Session, listeners: Iterable[ChangeListener] = ()):
        self.db = db
        self._listeners: list[ChangeListener] = list(listeners)

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    # ----- raw text -----

    def get_text(self, key: str) -> str | None:
        doc = self.db.get(Document, key)
        return doc.value if doc else None

    def set_text(self, key: str, value: str) -> None:
        doc = self.db.get(Document, key)
        if doc:
            doc.value = value
        else:
            self.db.add(Document(key=key, value=value))
        self.db.commit()
        self._notify(key)

    def get_json(self, key: str, default: Any = None) -> Any:
        txt = self.get_text(key)
        if not txt:
            return default
        try:
            return json.loads(txt)
        except json.JSONDecodeError:
            logger.warning(f"Document {key!r} holds invalid JSON; using default")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_text(key, json.dumps(value))

    def _notify(self, key: str) -> None:
        for listener in self._listeners:
            try:
                listener(key)
            except Exception as e:
                logger.error(f"Change listener failed for {key!r}: {e}", exc_info=True)

    # ----- typed documents -----

    def read_cart(self, owner: str | None = None) -> list[CartLine]:
        key = cart_key(owner)
        return _records(self.get_json(key, []), CartLine, key)

    def write_cart(self, lines: list[CartLine], owner: str | None = None) -> None:
        self.set_json(cart_key(owner), [line.model_dump(exclude_none=True) for line in lines])

    def read_inventory(self) -> list[Product]:
        return _records(self.get_json(INVENTORY_KEY, []), Product, INVENTORY_KEY)

    def write_inventory(self, products: list[Product]) -> None:
        self.set_json(INVENTORY_KEY, [p.model_dump() for p in products])

    def read_sales(self) -> list[Sale]:
        return _records(self.get_json(SALES_KEY, []), Sale, SALES_KEY)

    def append_sale(self, sale: Sale) -> None:
        # Append to the stored array as-is; entries the reader skips are kept
        raw = self.get_json(SALES_KEY, [])
        if not isinstance(raw, list):
            raw = []
        raw.append(sale.model_dump(mode="json"))
        self.set_json(SALES_KEY, raw)

    def read_settings(self) -> StoreSettings:
        raw = self.get_json(SETTINGS_KEY, {})
        if not isinstance(raw, dict):
            raw = {}
        return StoreSettings.model_validate(raw)

    def write_settings(self, settings: StoreSettings) -> None:
        self.set_json(SETTINGS_KEY, settings.model_dump())
