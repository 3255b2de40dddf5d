from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from shoestore.utils.ids import new_id


class Sale(BaseModel):
    id: str = Field(default_factory=lambda: new_id("sale"))
    productId: str
    colorId: str
    eu: int
    qty: int = Field(ge=1)
    price: float = Field(ge=0)
    date: datetime

    @field_validator("id", "productId", "colorId", mode="before")
    @classmethod
    def _as_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("date")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        # Older entries were written without an offset; they are UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class SaleIn(BaseModel):
    productId: str
    colorId: str
    eu: int
    qty: int = 1
    price: Optional[float] = Field(default=None, ge=0)
