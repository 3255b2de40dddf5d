from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional

from shoestore.utils.ids import new_id
from shoestore.utils.numbers import clamp_num, parse_num

EU_SIZES = list(range(35, 46))  # 35..45
MAX_STOCK = 9999

ProductStatus = Literal["active", "archived"]


def _text(v) -> str:
    return "" if v is None else str(v)


class Pricing(BaseModel):
    original: float = 0.0
    sale: float = 0.0
    cost: float = 0.0

    @field_validator("original", "sale", "cost", mode="before")
    @classmethod
    def _non_negative(cls, v):
        return max(0.0, float(parse_num(v, 0)))


class Size(BaseModel):
    eu: int
    stock: int = 0
    sku: str = ""

    @field_validator("stock", mode="before")
    @classmethod
    def _clamp_stock(cls, v):
        return int(clamp_num(parse_num(v, 0), 0, MAX_STOCK))

    @field_validator("sku", mode="before")
    @classmethod
    def _sku_text(cls, v):
        return _text(v)


def _size_entries(raw) -> list:
    # Accept both the list form [{eu, stock, sku}] and the legacy {"42": 5} mapping
    if isinstance(raw, dict):
        return [{"eu": k, "stock": v} for k, v in raw.items()]
    if isinstance(raw, list):
        return [s.model_dump() if isinstance(s, Size) else s for s in raw]
    return []


class Color(BaseModel):
    id: str = Field(default_factory=lambda: new_id("color"))
    name: str = ""
    code: str = "#ffffff"
    sizes: List[Size] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _color_id(cls, v):
        return _text(v) or new_id("color")

    @field_validator("name", mode="before")
    @classmethod
    def _as_text(cls, v):
        return _text(v)

    @field_validator("code", mode="before")
    @classmethod
    def _default_code(cls, v):
        return _text(v) or "#ffffff"

    @field_validator("sizes", mode="before")
    @classmethod
    def _full_grid(cls, v):
        """Always hold exactly one entry per EU size, ascending; unknown sizes are dropped."""
        by_eu = {}
        for entry in _size_entries(v):
            if not isinstance(entry, dict):
                continue
            eu = parse_num(entry.get("eu"), None)
            if eu is None or eu not in EU_SIZES:
                continue
            by_eu.setdefault(int(eu), {**entry, "eu": int(eu)})
        return [by_eu.get(eu, {"eu": eu, "stock": 0, "sku": ""}) for eu in EU_SIZES]

    def size(self, eu: int) -> Optional[Size]:
        return next((s for s in self.sizes if s.eu == eu), None)


class Product(BaseModel):
    id: str = Field(default_factory=lambda: new_id("prod"))
    brand: str = ""
    model: str = ""
    category: str = ""
    status: ProductStatus = "active"
    sku: str = ""
    pricing: Pricing = Field(default_factory=Pricing)
    description: str = ""
    images: List[str] = Field(default_factory=list)
    colors: List[Color] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _product_id(cls, v):
        # Blank stored ids could never be addressed again
        return _text(v) or new_id("prod")

    @field_validator("brand", "model", "category", "sku", "description", mode="before")
    @classmethod
    def _as_text(cls, v):
        return _text(v)

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, v):
        return v if v in ("active", "archived") else "active"

    @field_validator("pricing", mode="before")
    @classmethod
    def _pricing_object(cls, v):
        return v if isinstance(v, (dict, Pricing)) else {}

    @field_validator("images", mode="before")
    @classmethod
    def _image_refs(cls, v):
        return [str(i) for i in v if i] if isinstance(v, list) else []

    @field_validator("colors", mode="before")
    @classmethod
    def _color_objects(cls, v):
        return [c for c in v if isinstance(c, (dict, Color))] if isinstance(v, list) else []

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model}".strip()

    def color(self, color_id: str) -> Optional[Color]:
        return next((c for c in self.colors if c.id == color_id), None)


# ----- Admin payloads -----

class SizeStockIn(BaseModel):
    eu: int
    stock: int = Field(ge=0)
    sku: Optional[str] = None


class ColorIn(BaseModel):
    name: str
    code: Optional[str] = None
    sizes: List[SizeStockIn] = Field(default_factory=list)


class ProductCreate(BaseModel):
    brand: str
    model: str
    category: str = ""
    status: ProductStatus = "active"
    pricing: Pricing
    description: str = ""
    images: List[str] = Field(default_factory=list)
    colors: List[ColorIn] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    brand: str
    model: str
    category: str = ""
    status: ProductStatus = "active"
    pricing: Pricing
    description: str = ""
    images: List[str] = Field(default_factory=list)


class ColorUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None


class StockIn(BaseModel):
    stock: int


class ProductOut(Product):
    totalStock: int
    stockStatus: Literal["in", "low", "out"]


class FilterOptions(BaseModel):
    brands: List[str]
    categories: List[str]
