import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopbill.models.core import (
    DeliveryStatus, DistributorOrder, DistributorOrderItem, PaymentStatus, Product, Supplier,
)
from shopbill.schemas.orders import OrderIn, OrderUpdate, ReceiveStockIn
from shopbill.services.errors import (
    NotFound, ProductNotFound, ServiceError, TransactionFailure, ValidationError,
)

logger = logging.getLogger(__name__)

RECEIVED_MESSAGE = "Stock received and updated"


def _money(x) -> Decimal:
    return Decimal(str(x or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def balance_for(total, paid) -> Decimal:
    return max(Decimal("0"), _money(total) - _money(paid))


def payment_status_for(balance, paid) -> PaymentStatus:
    if Decimal(str(balance)) <= 0:
        return PaymentStatus.PAID
    if Decimal(str(paid or 0)) > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def _require_supplier(db: Session, supplier_id: int) -> None:
    if db.get(Supplier, supplier_id) is None:
        raise NotFound(f"Supplier id {supplier_id} not found")


# ── Stock receipt ───────────────────────────────────────────────────────────

def receive_stock(db: Session, receipt: ReceiveStockIn) -> dict:
    """Record goods received from a supplier.

    Creates a delivered distributor order with one line per item of positive quantity, adds the
    quantities to product stock and sets each product's cost price to the
    received unit price. All of it commits together or not at all.
    """
    if not receipt.items:
        raise ValidationError("At least one product with quantity is required")
    lines = [it for it in receipt.items if it.quantity > 0]
    seen: set[int] = set()
    for it in lines:
        if it.product_id in seen:
            raise ValidationError(f"Product id {it.product_id} appears more than once in this receipt")
        seen.add(it.product_id)

    total = sum((Decimal(it.quantity) * it.unit_price for it in lines), Decimal("0"))
    total = _money(total)
    paid = _money(receipt.paid_amount)
    balance = balance_for(total, paid)

    if db.get(Supplier, receipt.supplier_id) is None:
        raise ValidationError(f"Supplier id {receipt.supplier_id} not found")
    try:
        order = DistributorOrder(
            supplier_id=receipt.supplier_id,
            ordered_date=receipt.order_date,
            delivered_date=receipt.delivered_date or receipt.order_date,
            delivery_status=DeliveryStatus.DELIVERED,
            invoice_number=receipt.invoice_number,
            total_amount=total,
            paid_amount=paid,
            balance_amount=balance,
            payment_status=payment_status_for(balance, paid),
            notes=receipt.notes,
        )
        db.add(order)
        db.flush()

        for it in lines:
            res = db.execute(
                update(Product)
                .where(Product.id == it.product_id)
                .values(stocks=Product.stocks + it.quantity, cost_price=_money(it.unit_price))
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                raise ProductNotFound(it.product_id)
            db.add(DistributorOrderItem(
                order_id=order.id,
                product_id=it.product_id,
                quantity=it.quantity,
                unit_price=_money(it.unit_price),
                subtotal=_money(Decimal(it.quantity) * it.unit_price),
            ))

        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("stock receipt failed for supplier %s", receipt.supplier_id)
        raise TransactionFailure("Could not record stock receipt") from e

    logger.info("stock received from supplier %s: order %s, %d line(s), total %s",
                receipt.supplier_id, order.id, len(lines), total)
    return {"id": order.id, "total_amount": float(total), "message": RECEIVED_MESSAGE}


# ── Manual order lifecycle ──────────────────────────────────────────────────

def get_order_by_id(db: Session, order_id: int) -> DistributorOrder | None:
    return db.get(DistributorOrder, order_id)


def list_orders_for_supplier(db: Session, supplier_id: int) -> list[DistributorOrder]:
    return (
        db.query(DistributorOrder)
          .filter(DistributorOrder.supplier_id == supplier_id)
          .order_by(
              func.coalesce(DistributorOrder.ordered_date, DistributorOrder.created_at).desc(),
              DistributorOrder.id.desc(),
          )
          .all()
    )


def create_order(db: Session, supplier_id: int, body: OrderIn) -> DistributorOrder:
    _require_supplier(db, supplier_id)
    total = _money(body.total_amount)
    paid = _money(body.paid_amount)
    balance = _money(body.balance_amount) if body.balance_amount is not None else balance_for(total, paid)
    status = (PaymentStatus(body.payment_status) if body.payment_status
              else payment_status_for(balance, paid))

    o = DistributorOrder(
        supplier_id=supplier_id,
        ordered_date=body.ordered_date,
        delivered_date=body.delivered_date,
        delivery_status=DeliveryStatus(body.delivery_status),
        invoice_number=body.invoice_number,
        total_amount=total,
        paid_amount=paid,
        balance_amount=balance,
        payment_status=status,
        notes=body.notes,
        bill_file_url=body.bill_file_url,
    )
    db.add(o)
    db.commit()
    db.refresh(o)
    return o


def update_order(db: Session, order_id: int, body: OrderUpdate) -> DistributorOrder | None:
    """Apply the non-null fields of ``body``; returns ``None`` when the order does not exist.

    Balance and payment status are re-derived from the resulting total and
    paid amounts unless the caller sends them explicitly.
    """
    o = db.get(DistributorOrder, order_id)
    if o is None:
        return None

    data = body.model_dump(exclude_none=True)
    for field in ("ordered_date", "delivered_date", "invoice_number", "notes", "bill_file_url"):
        if field in data:
            setattr(o, field, data[field])
    if "delivery_status" in data:
        o.delivery_status = DeliveryStatus(data["delivery_status"])

    total = _money(data.get("total_amount", o.total_amount))
    paid = _money(data.get("paid_amount", o.paid_amount))
    balance = _money(data["balance_amount"]) if "balance_amount" in data else balance_for(total, paid)
    o.total_amount = total
    o.paid_amount = paid
    o.balance_amount = balance
    o.payment_status = (PaymentStatus(data["payment_status"]) if "payment_status" in data
                        else payment_status_for(balance, paid))

    db.commit()
    db.refresh(o)
    return o


def delete_order(db: Session, order_id: int) -> bool:
    o = db.get(DistributorOrder, order_id)
    if o is None:
        return False
    db.query(DistributorOrderItem).filter(DistributorOrderItem.order_id == order_id).delete()
    db.delete(o)
    db.commit()
    return True


# ── Summaries ───────────────────────────────────────────────────────────────

def supplier_order_summary(db: Session, supplier_id: int) -> dict:
    paid, pending, count = (
        db.query(
            func.coalesce(func.sum(DistributorOrder.paid_amount), 0),
            func.coalesce(func.sum(DistributorOrder.balance_amount), 0),
            func.count(DistributorOrder.id),
        )
        .filter(DistributorOrder.supplier_id == supplier_id)
        .one()
    )
    return {"total_paid": float(paid or 0), "total_pending": float(pending or 0), "order_count": int(count or 0)}


def distributor_summary(db: Session) -> list[dict]:
    total_col = func.coalesce(func.sum(DistributorOrder.total_amount), 0)
    rows = (
        db.query(
            Supplier.id, Supplier.name,
            total_col,
            func.coalesce(func.sum(DistributorOrder.paid_amount), 0),
            func.coalesce(func.sum(DistributorOrder.balance_amount), 0),
            func.count(DistributorOrder.id),
        )
        .outerjoin(DistributorOrder, DistributorOrder.supplier_id == Supplier.id)
        .group_by(Supplier.id, Supplier.name)
        .order_by(total_col.desc(), Supplier.id)
        .all()
    )
    return [
        {
            "id": sid, "name": name,
            "total_amount": float(total or 0),
            "total_paid": float(paid or 0),
            "total_pending": float(pending or 0),
            "order_count": int(count or 0),
        }
        for sid, name, total, paid, pending, count in rows
    ]
