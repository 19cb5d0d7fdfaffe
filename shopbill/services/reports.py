"""Read-only sales aggregations for the dashboard, reports and customer pages.

Period boundaries ("today", "this month") are taken in the shop's local
time zone and converted to UTC before querying, since timestamps are
stored in UTC. Grouping by calendar day or hour is done in Python so the
same code runs on MySQL and SQLite.
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from shopbill.models.core import Bill, BillItem, Product
from shopbill.services.errors import ValidationError

HOUR_LABELS = ["12am"] + [f"{h}am" for h in range(1, 12)] + ["12pm"] + [f"{h}pm" for h in range(1, 12)]


def _now(now: datetime | None, tz: str) -> datetime:
    zone = ZoneInfo(tz)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def _local(dt: datetime, tz: str) -> datetime:
    # drivers hand back naive datetimes for UTC columns
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ZoneInfo(tz))


def _utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc)


def _day_start(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _month_start(now: datetime) -> datetime:
    return _day_start(now).replace(day=1)


def _year_before(day: datetime) -> datetime:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # 29 Feb
        return day.replace(year=day.year - 1, day=28)


def _next_month(start: datetime) -> datetime:
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def _period_bounds(period: str, now: datetime) -> tuple[datetime, datetime]:
    if period == "daily":
        start = _day_start(now)
        return start, start + timedelta(days=1)
    if period == "monthly":
        start = _month_start(now)
        return start, _next_month(start)
    if period == "yearly":
        start = _month_start(now).replace(month=1)
        return start, start.replace(year=start.year + 1)
    raise ValidationError(f"Unknown period '{period}'")


def _revenue_between(db: Session, start: datetime, end: datetime) -> float:
    v = (
        db.query(func.coalesce(func.sum(Bill.grand_total), 0))
          .filter(Bill.created_at >= _utc(start), Bill.created_at < _utc(end))
          .scalar()
    )
    return float(v or 0)


def _profit_between(db: Session, start: datetime, end: datetime) -> float:
    margin = (BillItem.unit_price - func.coalesce(Product.cost_price, 0)) * BillItem.quantity
    v = (
        db.query(func.coalesce(func.sum(margin), 0))
          .join(Bill, Bill.id == BillItem.bill_id)
          .join(Product, Product.id == BillItem.product_id)
          .filter(Bill.created_at >= _utc(start), Bill.created_at < _utc(end))
          .scalar()
    )
    return float(v or 0)


def dashboard_stats(db: Session, now: datetime | None = None, tz: str = "UTC",
                    low_stock_threshold: int = 10) -> dict:
    now = _now(now, tz)
    total_revenue, bill_count = (
        db.query(func.coalesce(func.sum(Bill.grand_total), 0), func.count(Bill.id)).one()
    )
    product_count, low_stock = (
        db.query(
            func.count(Product.id),
            func.coalesce(func.sum(case((Product.stocks < low_stock_threshold, 1), else_=0)), 0),
        ).one()
    )
    day, day_end = _period_bounds("daily", now)
    month, month_end = _period_bounds("monthly", now)
    return {
        "total_revenue": float(total_revenue or 0),
        "bill_count": int(bill_count or 0),
        "product_count": int(product_count or 0),
        "low_stock_count": int(low_stock or 0),
        "today_revenue": _revenue_between(db, day, day_end),
        "month_revenue": _revenue_between(db, month, month_end),
        "today_profit": _profit_between(db, day, day_end),
        "month_profit": _profit_between(db, month, month_end),
    }


def sales_report(db: Session, period: str = "daily", now: datetime | None = None, tz: str = "UTC") -> list[dict]:
    """Revenue per day for the last 7 days, or per month over the rolling year ending today."""
    now = _now(now, tz)
    if period == "daily":
        start = _day_start(now) - timedelta(days=7)
        key_fmt, key_name = "%Y-%m-%d", "date"
    elif period == "monthly":
        start = _year_before(_day_start(now))
        key_fmt, key_name = "%Y-%m", "month"
    else:
        raise ValidationError(f"Unknown period '{period}'")

    rows = (
        db.query(Bill.created_at, Bill.grand_total)
          .filter(Bill.created_at >= _utc(start))
          .all()
    )
    buckets: dict[str, dict] = {}
    for created_at, grand_total in rows:
        key = _local(created_at, tz).strftime(key_fmt)
        b = buckets.setdefault(key, {key_name: key, "revenue": 0.0, "bill_count": 0})
        b["revenue"] += float(grand_total or 0)
        b["bill_count"] += 1
    out = [buckets[k] for k in sorted(buckets)]
    for b in out:
        b["revenue"] = round(b["revenue"], 2)
    return out


def top_products(db: Session, period: str = "daily", now: datetime | None = None,
                 tz: str = "UTC", limit: int = 10) -> list[dict]:
    start, end = _period_bounds(period, _now(now, tz))
    total_sales = func.sum(BillItem.subtotal)
    rows = (
        db.query(Product.name, func.sum(BillItem.quantity), total_sales)
          .join(Product, Product.id == BillItem.product_id)
          .join(Bill, Bill.id == BillItem.bill_id)
          .filter(Bill.created_at >= _utc(start), Bill.created_at < _utc(end))
          .group_by(BillItem.product_id, Product.name)
          .order_by(total_sales.desc())
          .limit(limit)
          .all()
    )
    return [
        {"name": name, "total_quantity": int(qty or 0), "total_sales": float(sales or 0)}
        for name, qty, sales in rows
    ]


def sales_by_time(db: Session, now: datetime | None = None, tz: str = "UTC", days: int = 30) -> list[dict]:
    start = _day_start(_now(now, tz)) - timedelta(days=days)
    rows = (
        db.query(Bill.created_at, Bill.grand_total)
          .filter(Bill.created_at >= _utc(start))
          .all()
    )
    hours: dict[int, dict] = {}
    for created_at, grand_total in rows:
        h = _local(created_at, tz).hour
        b = hours.setdefault(h, {"name": HOUR_LABELS[h], "hour": h, "bill_count": 0, "revenue": 0.0})
        b["bill_count"] += 1
        b["revenue"] += float(grand_total or 0)
    out = [hours[h] for h in sorted(hours)]
    for b in out:
        b["revenue"] = round(b["revenue"], 2)
    return out


def list_customers(db: Session) -> list[dict]:
    last_visit = func.max(Bill.created_at)
    rows = (
        db.query(
            Bill.customer_name, Bill.customer_phone,
            func.count(Bill.id), func.coalesce(func.sum(Bill.grand_total), 0), last_visit,
        )
        .filter(Bill.customer_phone.isnot(None), Bill.customer_phone != "")
        .group_by(Bill.customer_phone, Bill.customer_name)
        .order_by(last_visit.desc())
        .all()
    )
    return [
        {
            "customer_name": name,
            "customer_phone": phone,
            "visit_count": int(visits),
            "total_spend": float(spend or 0),
            "last_visit": last,
        }
        for name, phone, visits, spend, last in rows
    ]


def customer_history(db: Session, phone: str) -> list[dict]:
    rows = (
        db.query(Bill.created_at, Bill.bill_number, Product.name,
                 BillItem.quantity, BillItem.unit_price, BillItem.subtotal)
          .join(BillItem, BillItem.bill_id == Bill.id)
          .join(Product, Product.id == BillItem.product_id)
          .filter(Bill.customer_phone == phone)
          .order_by(Bill.created_at.desc(), Bill.id.desc(), BillItem.id)
          .all()
    )
    return [
        {
            "created_at": created_at,
            "bill_number": number,
            "product_name": pname,
            "quantity": qty,
            "unit_price": float(price),
            "subtotal": float(subtotal),
        }
        for created_at, number, pname, qty, price, subtotal in rows
    ]
