from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from studyquiz.core.config import settings
from studyquiz.core.errors import UnauthorizedError


class TokenData(BaseModel):
    sub: str


bearer = HTTPBearer(auto_error=False)


def create_token(user_id: str, ttl_minutes: Optional[int] = None) -> str:
    ttl = ttl_minutes if ttl_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    now = datetime.now(timezone.utc)
    payload = {"sub": user_id, "iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=ttl)).timestamp())}
    return jwt.encode(payload, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def decode_token(token: str) -> TokenData:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid or expired token")
    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError("Token has no subject")
    return TokenData(sub=sub)


def get_current_owner(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> str:
    """Resolve the caller's owner id; no usable bearer token means Unauthorized."""
    if creds is None or not creds.credentials:
        raise UnauthorizedError("Unauthorized")
    return decode_token(creds.credentials).sub
