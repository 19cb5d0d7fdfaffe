from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal
from decimal import Decimal
from datetime import datetime

UnitLiteral = Literal["kg", "ltr", "ml", "packet", "pcs"]

class ProductIn(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    category: Optional[str] = None
    price: Decimal = Field(gt=0)
    cost_price: Decimal = Field(default=Decimal("0"), ge=0)
    stocks: int = Field(ge=0)
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    unit: UnitLiteral
    gst_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    barcode: Optional[str] = None

    @field_validator("barcode")
    @classmethod
    def blank_barcode(cls, v: Optional[str]) -> Optional[str]:
        # an empty barcode must not collide with the unique index
        if v is None:
            return None
        v = v.strip()
        return v or None

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    category: Optional[str] = None
    price: float
    cost_price: float = 0.0
    stocks: int
    quantity: float = 0.0
    unit: str
    gst_percent: float = 0.0
    barcode: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("unit", mode="before")
    @classmethod
    def unit_value(cls, v):
        return getattr(v, "value", v)
