from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from shopbill.schemas.common import LoginIn, Token, UserOut
from shopbill.util.security import create_token, verify_pw
from shopbill.models.core import User, Role
from shopbill.db import get_db
from shopbill.deps import CurrentUser, require_auth

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=Token)
def login(body: LoginIn, db: Session = Depends(get_db)):
    row = (
        db.query(User, Role.name)
          .join(Role, Role.id == User.role_id)
          .filter(User.username == body.username)
          .first()
    )
    if not row or not row[0].active or not verify_pw(row[0].pass_hash, body.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    user, role = row
    return Token(
        access_token=create_token(str(user.id), role),
        user=UserOut(id=user.id, username=user.username, role=role, full_name=user.full_name),
    )

@router.get("/me", response_model=UserOut)
def me(user: CurrentUser = Depends(require_auth)):
    return UserOut(id=user.id, username=user.username, role=user.role, full_name=user.full_name)
