from fastapi import APIRouter, Depends, Query
from typing import List

from shoestore.schemas.sales import Sale, SaleIn
from shoestore.services.sales import record_sale, sales_log
from shoestore.services.store import DocumentStore
from shoestore.utils.deps import get_store
from shoestore.utils.security import require_admin

router = APIRouter()


# Record Sale (decrements stock)
@router.post("/", response_model=Sale)
def create_sale(payload: SaleIn, store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    products = store.read_inventory()
    sale = record_sale(
        products,
        payload.productId,
        payload.colorId,
        payload.eu,
        qty=payload.qty,
        price=payload.price,
    )
    store.write_inventory(products)
    store.append_sale(sale)
    return sale


# List Sales (newest first)
@router.get("/", response_model=List[Sale])
def list_sales(
    limit: int = Query(100, ge=1, le=1000),
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    return sales_log(store.read_sales())[:limit]
