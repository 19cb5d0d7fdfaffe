from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from shopbill.db import get_db
from shopbill.deps import require_auth, require_role
from shopbill.schemas.common import Msg
from shopbill.schemas.products import ProductIn, ProductOut
from shopbill.services import catalog

router = APIRouter(prefix="/products", tags=["products"])

@router.get("/", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db), user=Depends(require_auth)):
    return catalog.list_products(db)

@router.get("/search", response_model=List[ProductOut])
def search_products(q: str | None = None, db: Session = Depends(get_db), user=Depends(require_auth)):
    return catalog.search_products(db, q)

@router.get("/barcode/{barcode}", response_model=ProductOut)
def get_by_barcode(barcode: str, db: Session = Depends(get_db), user=Depends(require_auth)):
    p = catalog.get_product_by_barcode(db, barcode)
    if not p:
        raise HTTPException(404, detail="Product not found")
    return p

@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), user=Depends(require_auth)):
    p = catalog.get_product(db, product_id)
    if not p:
        raise HTTPException(404, detail="Product not found")
    return p

@router.post("/", response_model=ProductOut, status_code=201)
def add_product(body: ProductIn, db: Session = Depends(get_db), user=Depends(require_role("ADMIN"))):
    return catalog.create_product(db, body)

@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, body: ProductIn, db: Session = Depends(get_db),
                   user=Depends(require_role("ADMIN"))):
    return catalog.update_product(db, product_id, body)

@router.delete("/{product_id}", response_model=Msg)
def delete_product(product_id: int, db: Session = Depends(get_db), user=Depends(require_role("ADMIN"))):
    catalog.delete_product(db, product_id)
    return Msg(message="Product removed")
