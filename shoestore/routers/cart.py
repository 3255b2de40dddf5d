from fastapi import APIRouter, Depends, Header, HTTPException
from typing import Optional

from shoestore.config import get_settings
from shoestore.schemas.cart import CartLine, CartMutationOut, CartOut, CartOutcome, QuantityIn
from shoestore.services.cart import CartEngine
from shoestore.services.store import DocumentStore
from shoestore.utils.deps import get_store
from shoestore.utils.security import get_optional_user


router = APIRouter()


def get_cart_engine(
    store: DocumentStore = Depends(get_store),
    current_user_email: Optional[str] = Depends(get_optional_user),
    cart_session: Optional[str] = Header(None, alias="X-Cart-Session"),
) -> CartEngine:
    """Signed-in customers get their own cart; guests are keyed by their cart session header."""
    settings = get_settings()
    owner = current_user_email or (f"guest:{cart_session}" if cart_session else None)

    def signed_in() -> bool:
        return current_user_email is not None

    authorize = signed_in if settings.REQUIRE_LOGIN_FOR_CART else None
    return CartEngine(store, owner=owner, authorize=authorize, fee_per_pair=settings.PACKAGING_FEE_PER_PAIR)


def _serialize_cart(engine: CartEngine) -> CartOut:
    lines = engine.lines()
    totals = engine.totals(lines)
    return CartOut(items=lines, itemCount=engine.item_count(lines), **totals.model_dump())


def _mutation_out(engine: CartEngine, outcome: CartOutcome) -> CartMutationOut:
    return CartMutationOut(**outcome.model_dump(), cart=_serialize_cart(engine))


# Get Cart
@router.get("/", response_model=CartOut)
def get_cart(engine: CartEngine = Depends(get_cart_engine)):
    return _serialize_cart(engine)


# Add Cart Line (merges with an existing line for the same title, brand and size)
@router.post("/", response_model=CartMutationOut)
def add_to_cart(payload: CartLine, engine: CartEngine = Depends(get_cart_engine)):
    outcome = engine.add(payload)
    return _mutation_out(engine, outcome)


# Cap for a product/size, null when the product is not tracked in inventory
@router.post("/max-allowed")
def max_allowed(payload: CartLine, engine: CartEngine = Depends(get_cart_engine)):
    cap = engine.max_allowed(payload)
    return {"maxAllowed": None if cap == float("inf") else int(cap)}


# Clear Cart
@router.delete("/clear", response_model=CartOut)
def clear_cart(engine: CartEngine = Depends(get_cart_engine)):
    engine.clear()
    return _serialize_cart(engine)


# Change Line Quantity
@router.put("/{index}", response_model=CartMutationOut)
def update_quantity(index: int, payload: QuantityIn, engine: CartEngine = Depends(get_cart_engine)):
    outcome = engine.set_quantity(index, payload.quantity)
    if outcome.reason == "not_found":
        raise HTTPException(status_code=404, detail="Cart item not found")
    return _mutation_out(engine, outcome)


# Remove Cart Line
@router.delete("/{index}", response_model=CartOut)
def remove_cart_item(index: int, engine: CartEngine = Depends(get_cart_engine)):
    if not engine.remove(index):
        raise HTTPException(status_code=404, detail="Cart item not found")
    return _serialize_cart(engine)
