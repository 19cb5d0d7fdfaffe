from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from shopbill.db import get_db
from shopbill.deps import require_auth, require_role
from shopbill.schemas.common import Msg
from shopbill.schemas.orders import OrderIn, OrderOut, OrderUpdate
from shopbill.schemas.suppliers import SupplierIn, SupplierOut
from shopbill.services import stock, suppliers

router = APIRouter(prefix="/suppliers", tags=["suppliers"])
admin_only = require_role("ADMIN")


# ── Suppliers ───────────────────────────────────────────────────────────────

@router.get("/", response_model=List[SupplierOut])
def list_suppliers(db: Session = Depends(get_db), user=Depends(require_auth)):
    return suppliers.list_suppliers(db)

@router.post("/", response_model=SupplierOut, status_code=201)
def add_supplier(body: SupplierIn, db: Session = Depends(get_db), user=Depends(admin_only)):
    return suppliers.create_supplier(db, body)

@router.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: int, body: SupplierIn, db: Session = Depends(get_db), user=Depends(admin_only)):
    return suppliers.update_supplier(db, supplier_id, body)

@router.delete("/{supplier_id}", response_model=Msg)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db), user=Depends(admin_only)):
    suppliers.delete_supplier(db, supplier_id)
    return Msg(message="Supplier deleted")

@router.get("/distributor-summary")
def distributor_summary(db: Session = Depends(get_db), user=Depends(admin_only)):
    return stock.distributor_summary(db)

@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), user=Depends(require_auth)):
    s = suppliers.get_supplier(db, supplier_id)
    if not s:
        raise HTTPException(404, detail="Supplier not found")
    return s


# ── Distributor orders ──────────────────────────────────────────────────────

def _order_of(db: Session, supplier_id: int, order_id: int):
    o = stock.get_order_by_id(db, order_id)
    if not o or o.supplier_id != supplier_id:
        raise HTTPException(404, detail="Order not found")
    return o

@router.get("/{supplier_id}/orders/summary")
def order_summary(supplier_id: int, db: Session = Depends(get_db), user=Depends(admin_only)):
    return stock.supplier_order_summary(db, supplier_id)

@router.get("/{supplier_id}/orders", response_model=List[OrderOut])
def list_orders(supplier_id: int, db: Session = Depends(get_db), user=Depends(admin_only)):
    return stock.list_orders_for_supplier(db, supplier_id)

@router.post("/{supplier_id}/orders", response_model=OrderOut, status_code=201)
def add_order(supplier_id: int, body: OrderIn, db: Session = Depends(get_db), user=Depends(admin_only)):
    return stock.create_order(db, supplier_id, body)

@router.get("/{supplier_id}/orders/{order_id}", response_model=OrderOut)
def get_order(supplier_id: int, order_id: int, db: Session = Depends(get_db), user=Depends(admin_only)):
    return _order_of(db, supplier_id, order_id)

@router.put("/{supplier_id}/orders/{order_id}", response_model=OrderOut)
def update_order(supplier_id: int, order_id: int, body: OrderUpdate,
                 db: Session = Depends(get_db), user=Depends(admin_only)):
    _order_of(db, supplier_id, order_id)
    o = stock.update_order(db, order_id, body)
    if o is None:
        raise HTTPException(404, detail="Order not found")
    return o

@router.delete("/{supplier_id}/orders/{order_id}", response_model=Msg)
def delete_order(supplier_id: int, order_id: int, db: Session = Depends(get_db), user=Depends(admin_only)):
    _order_of(db, supplier_id, order_id)
    stock.delete_order(db, order_id)
    return Msg(message="Order deleted")
