# app/auth/token.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.auth_schema import AuthIdentity
from app.utils.errors import UnauthorizedError

# Key/alg
SECRET_KEY = settings.JWT_SECRET
ALGORITHM = settings.JWT_ALG
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRES_MINUTES


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(
        {"sub": user.id, "id": user.id, "address": user.address},
        expires_delta=expires_delta,
    )


def extract_token(request: Request) -> Optional[str]:
    """
    Accept both header forms:
      Authorization: Bearer <token>
      Authorization: <token>
    """
    header = request.headers.get("authorization")
    if not header:
        return None
    parts = header.strip().split(" ")
    token = parts[1] if len(parts) > 1 else parts[0]
    return token.strip() or None


def resolve_identity(token: str, db: Session) -> AuthIdentity:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token")

    user = db.get(User, str(user_id))
    if not user:
        raise UnauthorizedError("Invalid user")

    return AuthIdentity(id=user.id, address=payload.get("address") or user.address)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> AuthIdentity:
    token = extract_token(request)
    if not token:
        raise UnauthorizedError("No token provided")
    return resolve_identity(token, db)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[AuthIdentity]:
    """Partial auth: no header means anonymous, a bad header is still rejected."""
    token = extract_token(request)
    if not token:
        return None
    return resolve_identity(token, db)
