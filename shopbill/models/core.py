from sqlalchemy import (
    String, ForeignKey, Boolean, Numeric, Enum, Text, Date, Integer
)
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum as PyEnum
from datetime import date
from decimal import Decimal
from shopbill.db import Base
from shopbill.models.common import IdMixin, TSMixin


def _values(enum_cls):
    # persist the human-readable value ("Pending"), not the member name
    return [m.value for m in enum_cls]

# ── Enums ───────────────────────────────────────────────────────────────────
class Unit(PyEnum):
    KG = "kg"
    LTR = "ltr"
    ML = "ml"
    PACKET = "packet"
    PCS = "pcs"

class DeliveryStatus(PyEnum):
    PENDING = "Pending"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

class PaymentStatus(PyEnum):
    PAID = "Paid"
    PARTIAL = "Partial"
    UNPAID = "Unpaid"

# ── Identity ────────────────────────────────────────────────────────────────
class Role(Base, IdMixin, TSMixin):
    __tablename__ = "roles"
    name: Mapped[str] = mapped_column(String(50), unique=True)  # ADMIN | CASHIER

class User(Base, IdMixin, TSMixin):
    __tablename__ = "users"
    username: Mapped[str] = mapped_column(String(80), unique=True)
    pass_hash: Mapped[str] = mapped_column(String(200))
    full_name: Mapped[str | None] = mapped_column(String(160))
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

# ── Catalog ─────────────────────────────────────────────────────────────────
class Product(Base, IdMixin, TSMixin):
    __tablename__ = "products"
    name: Mapped[str] = mapped_column(String(160))
    category: Mapped[str | None] = mapped_column(String(100))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # sale price
    cost_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)  # last received unit cost
    stocks: Mapped[int] = mapped_column(Integer, default=0)  # on-hand units
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)  # package content size
    unit: Mapped[Unit] = mapped_column(Enum(Unit, values_callable=_values))
    gst_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    barcode: Mapped[str | None] = mapped_column(String(64), unique=True)

class Supplier(Base, IdMixin, TSMixin):
    __tablename__ = "suppliers"
    name: Mapped[str] = mapped_column(String(100))
    contact_person: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(20))
    product_categories: Mapped[str | None] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(Text)
    gst_number: Mapped[str | None] = mapped_column(String(20))

# ── Sales ───────────────────────────────────────────────────────────────────
class Bill(Base, IdMixin, TSMixin):
    __tablename__ = "bills"
    bill_number: Mapped[str] = mapped_column(String(40), unique=True)
    customer_name: Mapped[str | None] = mapped_column(String(100))
    customer_phone: Mapped[str | None] = mapped_column(String(15), index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))  # pre-tax
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    grand_total: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    cashier_id: Mapped[int] = mapped_column(ForeignKey("users.id"))

class BillItem(Base, IdMixin, TSMixin):
    __tablename__ = "bill_items"
    bill_id: Mapped[int] = mapped_column(ForeignKey("bills.id"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # price at sale time
    gst_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2))

# ── Purchasing ──────────────────────────────────────────────────────────────
class DistributorOrder(Base, IdMixin, TSMixin):
    __tablename__ = "distributor_orders"
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id"), index=True)
    ordered_date: Mapped[date | None] = mapped_column(Date)
    delivered_date: Mapped[date | None] = mapped_column(Date)
    delivery_status: Mapped[DeliveryStatus] = mapped_column(
        Enum(DeliveryStatus, values_callable=_values), default=DeliveryStatus.PENDING)
    invoice_number: Mapped[str | None] = mapped_column(String(80))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    balance_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, values_callable=_values), default=PaymentStatus.UNPAID)
    notes: Mapped[str | None] = mapped_column(Text)
    bill_file_url: Mapped[str | None] = mapped_column(String(512))

class DistributorOrderItem(Base, IdMixin, TSMixin):
    __tablename__ = "distributor_order_items"
    order_id: Mapped[int] = mapped_column(ForeignKey("distributor_orders.id"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2))
