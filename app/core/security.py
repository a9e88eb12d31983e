# app/core/security.py
from datetime import datetime, timedelta, timezone
from jose import jwt
from typing import Any, Optional, Union
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(subject: Union[str, Any], expires_delta: timedelta = None, **claims: Any) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(subject), "iat": datetime.now(timezone.utc), **claims}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Raises jose.JWTError on a bad signature, expiry or malformed token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def can_modify(actor_id: Optional[int], resource_owner_id: Optional[int], is_admin: bool) -> bool:
    """Owner-or-admin rule for mutating a record."""
    if is_admin:
        return True
    return actor_id is not None and actor_id == resource_owner_id
