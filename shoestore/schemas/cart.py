from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional

from shoestore.utils.numbers import parse_num


class CartLine(BaseModel):
    """One entry of the cart document.

    Stored carts may spell the quantity ``qty`` or ``quantity``; both are folded
    into ``quantity`` here and nowhere else. Non-numeric prices read as 0 and
    non-numeric quantities as 1.
    """

    id: Optional[str] = None
    title: str = ""
    brand: str = ""
    size: str = ""
    quantity: int = 1
    price: float = 0.0
    image: Optional[str] = None
    color: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_qty(cls, data):
        if isinstance(data, dict) and "qty" in data:
            data = dict(data)
            qty = data.pop("qty")
            if parse_num(qty, None) is not None or "quantity" not in data:
                data["quantity"] = qty
        return data

    @field_validator("title", "brand", "size", mode="before")
    @classmethod
    def _as_text(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("id", "image", "color", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return None if v in (None, "") else str(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v):
        return max(0, int(parse_num(v, 1)))

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v):
        return float(parse_num(v, 0))

    @property
    def identity(self) -> tuple:
        return (self.title, self.brand, self.size)


class CartOutcome(BaseModel):
    success: bool
    reason: Optional[Literal["out_of_stock", "max_reached", "invalid_quantity", "not_found"]] = None
    maxAllowed: Optional[int] = None


class CartTotals(BaseModel):
    subtotal: float
    packaging: float
    total: float


class CartOut(CartTotals):
    items: List[CartLine]
    itemCount: int


class CartMutationOut(CartOutcome):
    cart: CartOut


class QuantityIn(BaseModel):
    quantity: int = Field(ge=0)
