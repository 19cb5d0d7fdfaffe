import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopbill.models.core import Product, Unit
from shopbill.schemas.products import ProductIn
from shopbill.services.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


def list_products(db: Session) -> list[Product]:
    return db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()


def get_product(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def get_product_by_barcode(db: Session, barcode: str | None) -> Product | None:
    code = (barcode or "").strip()
    if not code:
        return None
    return db.query(Product).filter(Product.barcode == code).first()


def search_products(db: Session, term: str | None) -> list[Product]:
    t = term.strip() if isinstance(term, str) else ""
    if not t:
        return []
    like = f"%{t}%"
    return (
        db.query(Product)
          .filter(or_(Product.name.like(like), Product.category.like(like), Product.barcode == t))
          .order_by(Product.name)
          .all()
    )


def _apply(p: Product, data: dict) -> None:
    if "unit" in data:
        data["unit"] = Unit(data["unit"])
    for k, v in data.items():
        setattr(p, k, v)


def _check_barcode(db: Session, barcode: str | None, product_id: int | None = None) -> None:
    if not barcode:
        return
    q = db.query(Product.id).filter(Product.barcode == barcode)
    if product_id is not None:
        q = q.filter(Product.id != product_id)
    if q.first() is not None:
        raise Conflict(f"Barcode {barcode} is already assigned to another product")


def create_product(db: Session, body: ProductIn) -> Product:
    _check_barcode(db, body.barcode)
    p = Product()
    _apply(p, body.model_dump())
    db.add(p)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Product conflicts with an existing record")
    db.refresh(p)
    logger.info("product %s created (%s)", p.id, p.name)
    return p


def update_product(db: Session, product_id: int, body: ProductIn) -> Product:
    """Write the fields present in ``body``; omitted ones (cost price, barcode) keep their stored values."""
    p = db.get(Product, product_id)
    if p is None:
        raise NotFound("Product not found")
    data = body.model_dump(exclude_unset=True)
    if "barcode" in data:
        _check_barcode(db, data["barcode"], product_id)
    _apply(p, data)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Product conflicts with an existing record")
    db.refresh(p)
    return p


def delete_product(db: Session, product_id: int) -> None:
    p = db.get(Product, product_id)
    if p is None:
        raise NotFound("Product not found")
    db.delete(p)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Product is referenced by bills or stock receipts and cannot be removed")
    logger.info("product %s removed", product_id)
