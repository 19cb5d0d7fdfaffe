from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session
from shopbill.config import settings
from shopbill.db import get_db
from shopbill.models.core import User, Role

auth_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: int
    username: str
    role: str
    full_name: str | None = None


def require_auth(creds: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
                 db: Session = Depends(get_db)) -> CurrentUser:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token")
    try:
        data = jwt.decode(creds.credentials, settings.APP_SECRET, algorithms=["HS256"],
                          issuer=settings.JWT_ISS)
        user_id = int(data["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")

    row = (
        db.query(User, Role.name)
          .join(Role, Role.id == User.role_id)
          .filter(User.id == user_id)
          .first()
    )
    if not row or not row[0].active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")
    user, role = row
    return CurrentUser(id=user.id, username=user.username, role=role, full_name=user.full_name)


def require_role(*roles: str):
    def _dep(user: CurrentUser = Depends(require_auth)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail=f"User role {user.role} is not authorized to access this route")
        return user
    return _dep
