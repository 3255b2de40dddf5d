from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class BulkSelectionIn(BaseModel):
    ids: List[str] = Field(default_factory=list)


class BulkPriceIn(BulkSelectionIn):
    field: Literal["original", "sale", "cost"]
    method: Literal["set", "inc_pct", "dec_pct", "inc_num", "dec_num"]
    value: float


class BulkRestockIn(BulkSelectionIn):
    quantity: float
    scope: Literal["all", "low", "out", "size"] = "all"
    size: Optional[int] = None


class BulkResult(BaseModel):
    message: str
    updated: int
