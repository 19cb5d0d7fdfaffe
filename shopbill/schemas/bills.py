from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal

from shopbill.schemas.common import CamelModel

class BillItemIn(CamelModel):
    product_id: int = Field(ge=1)
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    gst_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    @field_validator("gst_percent", mode="before")
    @classmethod
    def gst_default(cls, v):
        return 0 if v is None else v

class BillIn(CamelModel):
    customer_name: Optional[str] = Field(default=None, max_length=100)
    customer_phone: Optional[str] = Field(default=None, max_length=15)
    items: List[BillItemIn] = Field(min_length=1)
    # totals are computed from the cart when the client leaves them out
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    tax_amount: Optional[Decimal] = Field(default=None, ge=0)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    grand_total: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("customer_name", "customer_phone", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

class BillCreated(CamelModel):
    id: int
    bill_number: str

class CartTotals(BaseModel):
    subtotal: float
    gst: float
    discount: float
    grand_total: float
