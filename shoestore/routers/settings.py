from fastapi import APIRouter, Depends

from shoestore.schemas.settings import StoreSettings
from shoestore.services.store import DocumentStore
from shoestore.utils.deps import get_store
from shoestore.utils.security import require_admin

router = APIRouter()


@router.get("/", response_model=StoreSettings)
def get_store_settings(store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    return store.read_settings()


# Save Settings (threshold clamped to 1..999)
@router.put("/", response_model=StoreSettings)
def save_store_settings(payload: dict, store: DocumentStore = Depends(get_store), admin_email: str = Depends(require_admin)):
    settings = StoreSettings.model_validate(payload)
    store.write_settings(settings)
    return settings
