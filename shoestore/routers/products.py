from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Query
from typing import List, Optional
import logging

from shoestore.schemas.inventory import (
    Color,
    ColorIn,
    ColorUpdate,
    FilterOptions,
    Product,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    Size,
    StockIn,
)
from shoestore.services import catalog
from shoestore.services.store import DocumentStore
from shoestore.utils.deps import get_store
from shoestore.utils.security import require_admin
from shoestore.utils.storage import save_image, delete_images

logger = logging.getLogger(__name__)

router = APIRouter()

# Helpers

def to_product_out(p: Product, threshold: int) -> ProductOut:
    total = catalog.total_stock(p)
    return ProductOut(
        **p.model_dump(),
        totalStock=total,
        stockStatus=catalog.stock_status(total, threshold),
    )


def _color_from_payload(payload: ColorIn) -> Color:
    return Color(
        name=payload.name.strip(),
        code=payload.code,
        sizes=[s.model_dump(exclude_none=True) for s in payload.sizes],
    )


# Public Product Listing (active products only)
@router.get("/", response_model=List[ProductOut])
def list_products(
    search: Optional[str] = None,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    size: Optional[int] = Query(None, ge=35, le=45),
    store: DocumentStore = Depends(get_store),
):
    threshold = store.read_settings().lowStockThreshold
    products = catalog.filter_products(
        store.read_inventory(),
        threshold,
        text=search,
        brand=brand,
        category=category,
        size=size,
        status="active",
    )
    return [to_product_out(p, threshold) for p in products]


@router.get("/filters", response_model=FilterOptions)
def list_filter_options(store: DocumentStore = Depends(get_store)):
    """Distinct brands and categories across the whole catalog, sorted."""
    return catalog.filter_options(store.read_inventory())


# Admin Listing (every status, all filters)
@router.get("/admin/all", response_model=List[ProductOut])
def admin_list_products(
    search: Optional[str] = None,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    size: Optional[int] = Query(None, ge=35, le=45),
    stock: Optional[catalog.StockStatus] = None,
    status: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    threshold = store.read_settings().lowStockThreshold
    products = catalog.filter_products(
        store.read_inventory(),
        threshold,
        text=search,
        brand=brand,
        category=category,
        size=size,
        stock=stock,
        status=status,
    )
    return [to_product_out(p, threshold) for p in products]


# Product Detail
@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, store: DocumentStore = Depends(get_store)):
    product = catalog.find_product(store.read_inventory(), product_id)
    if product.status != "active":
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_out(product, store.read_settings().lowStockThreshold)


# Create Product (Admin)
@router.post("/admin", response_model=ProductOut)
def create_product(
    payload: ProductCreate,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    product = catalog.create_product(
        brand=payload.brand,
        model=payload.model,
        category=payload.category,
        status=payload.status,
        images=payload.images,
        pricing=payload.pricing,
        existing=products,
        description=payload.description,
        colors=[_color_from_payload(c) for c in payload.colors if c.name.strip()],
    )
    products.append(product)
    store.write_inventory(products)
    logger.info(f"Product {product.id} ({product.sku}) created by {admin_email}")
    return to_product_out(product, store.read_settings().lowStockThreshold)


# Update Product (Admin)
@router.put("/admin/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    product = catalog.update_product(
        products,
        product_id,
        brand=payload.brand,
        model=payload.model,
        category=payload.category,
        status=payload.status,
        pricing=payload.pricing,
        images=payload.images,
        description=payload.description,
    )
    store.write_inventory(products)
    return to_product_out(product, store.read_settings().lowStockThreshold)


# Delete Product (Admin)
@router.delete("/admin/{product_id}")
def delete_product(
    product_id: str,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    remaining, removed = catalog.delete_product(store.read_inventory(), product_id)
    store.write_inventory(remaining)
    # Uploaded images only; external URLs are left alone
    delete_images(removed.images)
    logger.info(f"Product {product_id} deleted by {admin_email}")
    return {"message": "Product deleted"}


# ----- Variants (Admin) -----

@router.post("/admin/{product_id}/colors", response_model=ProductOut)
def add_color(
    product_id: str,
    payload: ColorIn,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    color = catalog.add_color(products, product_id, payload.name, payload.code)
    for s in payload.sizes:
        catalog.set_size_stock(products, product_id, color.id, s.eu, s.stock)
    store.write_inventory(products)
    return to_product_out(catalog.find_product(products, product_id), store.read_settings().lowStockThreshold)


@router.put("/admin/{product_id}/colors/{color_id}", response_model=ProductOut)
def update_color(
    product_id: str,
    color_id: str,
    payload: ColorUpdate,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    catalog.update_color(products, product_id, color_id, name=payload.name, code=payload.code)
    store.write_inventory(products)
    return to_product_out(catalog.find_product(products, product_id), store.read_settings().lowStockThreshold)


@router.delete("/admin/{product_id}/colors/{color_id}", response_model=ProductOut)
def delete_color(
    product_id: str,
    color_id: str,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    catalog.delete_color(products, product_id, color_id)
    store.write_inventory(products)
    return to_product_out(catalog.find_product(products, product_id), store.read_settings().lowStockThreshold)


@router.put("/admin/{product_id}/colors/{color_id}/sizes/{eu}", response_model=Size)
def set_size_stock(
    product_id: str,
    color_id: str,
    eu: int,
    payload: StockIn,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    size = catalog.set_size_stock(products, product_id, color_id, eu, payload.stock)
    store.write_inventory(products)
    return size


@router.post("/admin/{product_id}/colors/{color_id}/fill", response_model=Color)
def fill_color_stock(
    product_id: str,
    color_id: str,
    payload: StockIn,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    color = catalog.fill_color_stock(products, product_id, color_id, payload.stock)
    store.write_inventory(products)
    return color


@router.post("/admin/{product_id}/colors/{color_id}/clear", response_model=Color)
def clear_color_stock(
    product_id: str,
    color_id: str,
    store: DocumentStore = Depends(get_store),
    admin_email: str = Depends(require_admin),
):
    products = store.read_inventory()
    color = catalog.clear_color_stock(products, product_id, color_id)
    store.write_inventory(products)
    return color


# Upload Image (Admin)
@router.post("/upload")
def upload_file(
    file: UploadFile = File(...),
    admin_email: str = Depends(require_admin),
):
    try:
        url = save_image(file, subdir="products")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": url}
