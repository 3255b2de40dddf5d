from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
import logging

from shoestore.config import get_settings
from shoestore.routers import auth, products, cart
from shoestore.routers import bulk
from shoestore.routers import sales
from shoestore.routers import reports
from shoestore.routers import settings as settings_router
from shoestore.services.cart import CartAuthorizationError
from shoestore.services.catalog import CatalogError, NotFoundError
from shoestore.utils.storage import MEDIA_ROOT

logging.basicConfig(
    level=getattr(logging, get_settings().LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SoleStore")


@app.on_event("startup")
def on_startup():
    # Ensure all DB tables exist after all models are imported
    from shoestore.models.database import Base, engine
    import shoestore.models.user  # register User/RevokedToken models
    import shoestore.models.document  # register Document model
    Base.metadata.create_all(bind=engine)


# Domain errors -> HTTP
@app.exception_handler(NotFoundError)
def handle_not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(CatalogError)
def handle_catalog_error(request: Request, exc: CatalogError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(CartAuthorizationError)
def handle_cart_authorization(request: Request, exc: CartAuthorizationError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


# Ensure media directory exists before mounting
MEDIA_ROOT.mkdir(parents=True, exist_ok=True)

# Serve uploaded media files
app.mount("/media", StaticFiles(directory=str(MEDIA_ROOT)), name="media")

# CORS configuration for the admin panel and storefront
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])
app.include_router(bulk.router, prefix="/api/admin/bulk", tags=["admin-bulk"])
app.include_router(sales.router, prefix="/api/admin/sales", tags=["admin-sales"])
app.include_router(reports.router, prefix="/api/admin/reports", tags=["admin-reports"])
app.include_router(settings_router.router, prefix="/api/admin/settings", tags=["admin-settings"])


# --- Entry point for local runs ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("shoestore.main:app", host="0.0.0.0", port=port, reload=False)
