from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopbill.db import get_db
from shopbill.deps import require_role
from shopbill.schemas.orders import ReceiveStockIn, ReceiveStockOut
from shopbill.services import stock

router = APIRouter(prefix="/receive-stock", tags=["stock"])

@router.post("/", response_model=ReceiveStockOut, status_code=201)
def receive_stock(body: ReceiveStockIn, db: Session = Depends(get_db), user=Depends(require_role("ADMIN"))):
    return stock.receive_stock(db, body)
