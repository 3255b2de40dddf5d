from pydantic import BaseModel, field_validator

from shoestore.utils.numbers import clamp_num, parse_num

DEFAULT_LOW_STOCK_THRESHOLD = 3


class StoreSettings(BaseModel):
    lowStockThreshold: int = DEFAULT_LOW_STOCK_THRESHOLD

    @field_validator("lowStockThreshold", mode="before")
    @classmethod
    def _threshold(cls, v):
        return int(clamp_num(parse_num(v, DEFAULT_LOW_STOCK_THRESHOLD), 1, 999))
