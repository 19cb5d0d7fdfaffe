from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Literal

from shopbill.config import settings
from shopbill.db import get_db
from shopbill.deps import CurrentUser, require_auth, require_role
from shopbill.schemas.bills import BillCreated, BillIn, CartTotals
from shopbill.services import billing, reports

router = APIRouter(prefix="/bills", tags=["bills"])
admin_only = require_role("ADMIN")


@router.post("/", response_model=BillCreated, status_code=201)
def generate_bill(body: BillIn, db: Session = Depends(get_db), user: CurrentUser = Depends(require_auth)):
    return billing.create_bill(db, body, user.id)

@router.post("/preview", response_model=CartTotals)
def preview_totals(body: BillIn, user: CurrentUser = Depends(require_auth)):
    """Totals the till would charge for this cart, without touching stock."""
    return billing.compute_cart_totals(body.items, body.discount_amount)

@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_db), user=Depends(require_auth)):
    return reports.dashboard_stats(db, tz=settings.TZ, low_stock_threshold=settings.LOW_STOCK_THRESHOLD)

@router.get("/")
def recent_bills(db: Session = Depends(get_db), user=Depends(require_auth)):
    return billing.list_recent_bills(db)

@router.get("/history")
def billing_history(page: int = 1, size: int = 20, q: str | None = None,
                    db: Session = Depends(get_db), user=Depends(require_auth)):
    return billing.list_bills(db, page=page, size=size, q=q)

@router.get("/reports")
def sales_report(period: Literal["daily", "monthly"] = "daily",
                 db: Session = Depends(get_db), user=Depends(admin_only)):
    return reports.sales_report(db, period, tz=settings.TZ)

@router.get("/top-products")
def top_products(period: Literal["daily", "monthly", "yearly"] = "daily",
                 db: Session = Depends(get_db), user=Depends(admin_only)):
    return reports.top_products(db, period, tz=settings.TZ)

@router.get("/customers")
def customers(db: Session = Depends(get_db), user=Depends(admin_only)):
    return reports.list_customers(db)

@router.get("/customers/{phone}")
def customer_history(phone: str, db: Session = Depends(get_db), user=Depends(admin_only)):
    return reports.customer_history(db, phone)

@router.get("/sales-by-time")
def sales_by_time(db: Session = Depends(get_db), user=Depends(admin_only)):
    return reports.sales_by_time(db, tz=settings.TZ)

@router.get("/{bill_id}")
def get_bill(bill_id: int, db: Session = Depends(get_db), user=Depends(require_auth)):
    bill = billing.get_bill_details(db, bill_id)
    if not bill:
        raise HTTPException(404, detail="Bill not found")
    return bill
