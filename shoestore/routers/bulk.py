from fastapi import APIRouter, Depends
import logging

from shoestore.schemas.bulk import BulkPriceIn, BulkRestockIn, BulkResult, BulkSelectionIn
from shoestore.services import bulk
from shoestore.services.store import DocumentStore
from shoestore.utils.deps import get_store
from shoestore.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


# Bulk Price Change
@router.post("/price", response_model=BulkResult)
def bulk_price(payload: BulkPriceIn, store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    products = store.read_inventory()
    updated = bulk.bulk_price(products, payload.ids, payload.field, payload.method, payload.value)
    store.write_inventory(products)
    logger.info(f"Bulk {payload.method} on {payload.field} price for {updated} product(s) by {admin_email}")
    return BulkResult(message="Prices updated", updated=updated)


# Bulk Restock
@router.post("/restock", response_model=BulkResult)
def bulk_restock(payload: BulkRestockIn, store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    products = store.read_inventory()
    threshold = store.read_settings().lowStockThreshold
    updated = bulk.bulk_restock(products, payload.ids, payload.quantity, payload.scope, threshold, size=payload.size)
    store.write_inventory(products)
    logger.info(f"Bulk restock ({payload.scope}) of {updated} product(s) by {admin_email}")
    return BulkResult(message="Stock updated", updated=updated)


# Archive Selected
@router.post("/archive", response_model=BulkResult)
def bulk_archive(payload: BulkSelectionIn, store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    products = store.read_inventory()
    updated = bulk.bulk_set_status(products, payload.ids, "archived")
    store.write_inventory(products)
    return BulkResult(message="Products archived", updated=updated)


# Unarchive Selected
@router.post("/unarchive", response_model=BulkResult)
def bulk_unarchive(payload: BulkSelectionIn, store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    products = store.read_inventory()
    updated = bulk.bulk_set_status(products, payload.ids, "active")
    store.write_inventory(products)
    return BulkResult(message="Products unarchived", updated=updated)
