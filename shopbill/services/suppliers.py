from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopbill.models.core import Supplier
from shopbill.schemas.suppliers import SupplierIn
from shopbill.services.errors import Conflict, NotFound


def list_suppliers(db: Session) -> list[Supplier]:
    return db.query(Supplier).order_by(Supplier.created_at.desc(), Supplier.id.desc()).all()


def get_supplier(db: Session, supplier_id: int) -> Supplier | None:
    return db.get(Supplier, supplier_id)


def create_supplier(db: Session, body: SupplierIn) -> Supplier:
    s = Supplier(**body.model_dump())
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def update_supplier(db: Session, supplier_id: int, body: SupplierIn) -> Supplier:
    s = db.get(Supplier, supplier_id)
    if s is None:
        raise NotFound("Supplier not found")
    for k, v in body.model_dump().items():
        setattr(s, k, v)
    db.commit()
    db.refresh(s)
    return s


def delete_supplier(db: Session, supplier_id: int) -> None:
    s = db.get(Supplier, supplier_id)
    if s is None:
        raise NotFound("Supplier not found")
    db.delete(s)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Supplier has distributor orders and cannot be deleted")
