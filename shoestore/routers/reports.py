from fastapi import APIRouter, Depends

from shoestore.services import reports
from shoestore.services.reports import Timeframe
from shoestore.services.store import DocumentStore
from shoestore.utils.deps import get_store
from shoestore.utils.security import require_admin


router = APIRouter()


def _alert_message(alert: dict) -> str:
    name = f"{alert['brand']} {alert['model']}".strip()
    if alert["status"] == "out":
        return f"{name} ({alert['color']}, EU {alert['eu']}) is out of stock"
    return f"{name} ({alert['color']}, EU {alert['eu']}) is low: {alert['stock']} left"


# Dashboard Overview
@router.get("/overview")
def get_overview(timeframe: Timeframe = "all", store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    threshold = store.read_settings().lowStockThreshold
    return reports.overview(store.read_inventory(), store.read_sales(), threshold, timeframe)


# Low / Out of Stock Sizes
@router.get("/low-stock")
def get_low_stock(store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    threshold = store.read_settings().lowStockThreshold
    return reports.stock_alerts(store.read_inventory(), threshold)


# Stock Alerts (display strings for the admin bell)
@router.get("/alerts")
def get_alerts(store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    threshold = store.read_settings().lowStockThreshold
    alerts = reports.stock_alerts(store.read_inventory(), threshold)
    return [{**a, "message": _alert_message(a)} for a in alerts]


# Best Selling Sizes
@router.get("/best-sizes")
def get_best_sizes(timeframe: Timeframe = "all", store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    return reports.best_sizes(store.read_sales(), timeframe)


# Best Selling Brands (by revenue)
@router.get("/best-brands")
def get_best_brands(timeframe: Timeframe = "all", store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    return reports.best_brands(store.read_inventory(), store.read_sales(), timeframe)


# Dead Stock (never sold)
@router.get("/dead-stock")
def get_dead_stock(store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    return reports.dead_stock(store.read_inventory(), store.read_sales())
