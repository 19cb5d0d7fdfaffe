from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal, List, Any
from decimal import Decimal, InvalidOperation
from datetime import date, datetime

from shopbill.schemas.common import CamelModel

DeliveryStatusLiteral = Literal["Pending", "Delivered", "Cancelled"]
PaymentStatusLiteral = Literal["Paid", "Partial", "Unpaid"]


def _to_int(v: Any) -> int:
    try:
        return int(float(v))
    except (TypeError, ValueError):
        return 0


def _to_decimal(v: Any) -> Decimal:
    if v is None or isinstance(v, bool):
        return Decimal("0")
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return d if d.is_finite() else Decimal("0")


def _blank_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


_OPTIONAL_TEXT = ("ordered_date", "delivered_date", "invoice_number", "notes", "bill_file_url")


class OrderIn(BaseModel):
    ordered_date: Optional[date] = None
    delivered_date: Optional[date] = None
    delivery_status: DeliveryStatusLiteral = "Pending"
    invoice_number: Optional[str] = None
    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    balance_amount: Optional[Decimal] = None
    payment_status: Optional[PaymentStatusLiteral] = None
    notes: Optional[str] = None
    bill_file_url: Optional[str] = None

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_none(v)

class OrderUpdate(BaseModel):
    """Partial update; fields left out (or sent as null) keep their stored value."""
    ordered_date: Optional[date] = None
    delivered_date: Optional[date] = None
    delivery_status: Optional[DeliveryStatusLiteral] = None
    invoice_number: Optional[str] = None
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    balance_amount: Optional[Decimal] = None
    payment_status: Optional[PaymentStatusLiteral] = None
    notes: Optional[str] = None
    bill_file_url: Optional[str] = None

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_none(v)

class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    supplier_id: int
    ordered_date: Optional[date] = None
    delivered_date: Optional[date] = None
    delivery_status: str
    invoice_number: Optional[str] = None
    total_amount: float
    paid_amount: float
    balance_amount: float
    payment_status: str
    notes: Optional[str] = None
    bill_file_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("delivery_status", "payment_status", mode="before")
    @classmethod
    def enum_value(cls, v):
        return getattr(v, "value", v)

class ReceiveItemIn(CamelModel):
    product_id: int
    quantity: int = 0
    unit_price: Decimal = Decimal("0")

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v):
        return max(0, _to_int(v))

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        return _to_decimal(v)

class ReceiveStockIn(CamelModel):
    supplier_id: int
    invoice_number: Optional[str] = None
    order_date: Optional[date] = None
    delivered_date: Optional[date] = None
    paid_amount: Decimal = Decimal("0")
    notes: Optional[str] = None
    items: List[ReceiveItemIn] = []

    @field_validator("paid_amount", mode="before")
    @classmethod
    def coerce_paid(cls, v):
        return _to_decimal(v)

    @field_validator("invoice_number", "notes", "order_date", "delivered_date", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_none(v)

class ReceiveStockOut(BaseModel):
    id: int
    total_amount: float
    message: str
