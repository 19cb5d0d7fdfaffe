from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from shopbill.db import get_db
from shopbill.config import settings
from shopbill.util.security import hash_pw
from shopbill.models.core import Role, User

router = APIRouter(prefix="/admin", tags=["admin"])

DEFAULT_ROLES = ("ADMIN", "CASHIER")

@router.post("/dev-bootstrap")
def dev_bootstrap(db: Session = Depends(get_db)):
    if settings.APP_ENV != "dev":
        raise HTTPException(403, detail="Not allowed")

    roles = {}
    for name in DEFAULT_ROLES:
        r = db.query(Role).filter(Role.name == name).first()
        if not r:
            r = Role(name=name)
            db.add(r); db.flush()
        roles[name] = r

    u = db.query(User).filter(User.username == "admin").first()
    if not u:
        u = User(
            username="admin",
            pass_hash=hash_pw("admin123"),
            full_name="Super Admin",
            role_id=roles["ADMIN"].id,
            active=True,
        )
        db.add(u); db.flush()

    db.commit()
    return {
        "admin_username": u.username,
        "admin_password": "admin123",
        "roles": list(DEFAULT_ROLES),
    }
