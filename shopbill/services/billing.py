import logging
import random
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopbill.models.core import Bill, BillItem, Product, User
from shopbill.schemas.bills import BillIn, BillItemIn
from shopbill.services.errors import (
    InsufficientStock, ProductNotFound, ServiceError, TransactionFailure,
)

logger = logging.getLogger(__name__)


def _money(x) -> Decimal:
    return Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def generate_bill_number(now: datetime | None = None) -> str:
    """``SB-<1000..9999>-<last six digits of the epoch millis>``."""
    now = now or datetime.now(timezone.utc)
    millis = str(int(now.timestamp() * 1000))
    return f"SB-{random.randint(1000, 9999)}-{millis[-6:]}"


def line_amounts(item: BillItemIn) -> tuple[Decimal, Decimal]:
    """Return (gst_amount, subtotal) for one cart line."""
    base = Decimal(item.unit_price) * item.quantity
    gst = base * Decimal(item.gst_percent or 0) / 100
    return gst, base + gst


def compute_cart_totals(items: Iterable[BillItemIn], discount=0) -> dict:
    subtotal = Decimal("0")
    gst_total = Decimal("0")
    for item in items:
        gst, line_total = line_amounts(item)
        subtotal += line_total - gst
        gst_total += gst
    discount = Decimal(str(discount or 0))
    grand = max(Decimal("0"), subtotal + gst_total - discount)
    return {
        "subtotal": _money(subtotal),
        "gst": _money(gst_total),
        "discount": _money(discount),
        "grand_total": _money(grand),
    }


def create_bill(db: Session, bill_in: BillIn, cashier_id: int) -> dict:
    """Create a bill and deduct stock in one transaction.

    Every line is checked against the current stock before anything is
    written. The deduction itself is conditional (``stocks >= quantity``)
    so two tills selling the last units concurrently cannot push stock
    below zero; the loser gets ``InsufficientStock`` and nothing of its
    bill survives.
    """
    totals = compute_cart_totals(bill_in.items, bill_in.discount_amount)
    total_amount = bill_in.total_amount if bill_in.total_amount is not None else totals["subtotal"]
    tax_amount = bill_in.tax_amount if bill_in.tax_amount is not None else totals["gst"]
    grand_total = bill_in.grand_total if bill_in.grand_total is not None else totals["grand_total"]

    try:
        names: dict[int, str] = {}
        for item in bill_in.items:
            row = (
                db.query(Product.name, Product.stocks)
                  .filter(Product.id == item.product_id)
                  .first()
            )
            if row is None:
                raise ProductNotFound(item.product_id)
            name, stocks = row
            if stocks < item.quantity:
                raise InsufficientStock(name, stocks)
            names[item.product_id] = name

        bill = Bill(
            bill_number=generate_bill_number(),
            customer_name=bill_in.customer_name,
            customer_phone=bill_in.customer_phone,
            total_amount=_money(total_amount),
            tax_amount=_money(tax_amount),
            discount_amount=_money(bill_in.discount_amount),
            grand_total=_money(grand_total),
            cashier_id=cashier_id,
        )
        db.add(bill)
        db.flush()

        for item in bill_in.items:
            gst, subtotal = line_amounts(item)
            db.add(BillItem(
                bill_id=bill.id,
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=_money(item.unit_price),
                gst_amount=_money(gst),
                subtotal=_money(subtotal),
            ))
            res = db.execute(
                update(Product)
                .where(Product.id == item.product_id, Product.stocks >= item.quantity)
                .values(stocks=Product.stocks - item.quantity)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                left = db.query(Product.stocks).filter(Product.id == item.product_id).scalar()
                raise InsufficientStock(names[item.product_id], left or 0)

        db.commit()
    except ServiceError as e:
        db.rollback()
        logger.warning("bill rejected for cashier %s: %s", cashier_id, e.message)
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("bill transaction failed for cashier %s", cashier_id)
        raise TransactionFailure("Could not create bill") from e

    logger.info("bill %s created: %d item(s), grand total %s", bill.bill_number,
                len(bill_in.items), bill.grand_total)
    return {"id": bill.id, "bill_number": bill.bill_number}


def _bill_dict(b: Bill, cashier_name: str | None) -> dict:
    return {
        "id": b.id,
        "bill_number": b.bill_number,
        "customer_name": b.customer_name,
        "customer_phone": b.customer_phone,
        "total_amount": float(b.total_amount or 0),
        "tax_amount": float(b.tax_amount or 0),
        "discount_amount": float(b.discount_amount or 0),
        "grand_total": float(b.grand_total or 0),
        "cashier_id": b.cashier_id,
        "cashier_name": cashier_name,
        "created_at": b.created_at,
    }


def list_recent_bills(db: Session, limit: int = 10) -> list[dict]:
    rows = (
        db.query(Bill, User.full_name)
          .join(User, User.id == Bill.cashier_id)
          .order_by(Bill.created_at.desc(), Bill.id.desc())
          .limit(limit)
          .all()
    )
    return [_bill_dict(b, name) for b, name in rows]


def list_bills(db: Session, page: int = 1, size: int = 20, q: str | None = None) -> dict:
    """Paged billing history, newest first; ``q`` matches bill number, customer name or phone."""
    query = db.query(Bill, User.full_name).join(User, User.id == Bill.cashier_id)
    if q and q.strip():
        term = f"%{q.strip()}%"
        query = query.filter(or_(
            Bill.bill_number.like(term),
            Bill.customer_name.like(term),
            Bill.customer_phone.like(term),
        ))

    if page < 1:
        page = 1
    if size < 1:
        size = 20
    total = query.count()
    rows = (
        query.order_by(Bill.created_at.desc(), Bill.id.desc())
             .offset((page - 1) * size)
             .limit(size)
             .all()
    )
    return {"items": [_bill_dict(b, name) for b, name in rows], "total": total,
            "page": page, "size": size}


def get_bill_details(db: Session, bill_id: int) -> dict | None:
    row = (
        db.query(Bill, User.full_name)
          .join(User, User.id == Bill.cashier_id)
          .filter(Bill.id == bill_id)
          .first()
    )
    if not row:
        return None
    bill, cashier_name = row
    items = (
        db.query(BillItem, Product.name)
          .join(Product, Product.id == BillItem.product_id)
          .filter(BillItem.bill_id == bill_id)
          .order_by(BillItem.id)
          .all()
    )
    out = _bill_dict(bill, cashier_name)
    out["items"] = [
        {
            "id": bi.id,
            "product_id": bi.product_id,
            "product_name": pname,
            "quantity": bi.quantity,
            "unit_price": float(bi.unit_price),
            "gst_amount": float(bi.gst_amount or 0),
            "subtotal": float(bi.subtotal),
        }
        for bi, pname in items
    ]
    return out
