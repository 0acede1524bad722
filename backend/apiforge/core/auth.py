"""
Identity provider - bearer JWT carrying the owner id
"""
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from apiforge.config import get_settings
from apiforge.core.errors import UnauthorizedError

security = HTTPBearer(auto_error=False)


def create_access_token(owner_id: str, expires_minutes: Optional[int] = None) -> str:
    """Create JWT access token for an owner."""
    settings = get_settings()
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(owner_id),
        "exp": datetime.utcnow() + timedelta(minutes=minutes),
        "type": "access"
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """Verify JWT token and return the owner id, or None."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "access" or not payload.get("sub"):
        return None
    return payload["sub"]


async def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Resolve the current owner id from the bearer token."""
    if credentials is None:
        raise UnauthorizedError("Unauthorized")

    owner_id = verify_token(credentials.credentials)
    if not owner_id:
        raise UnauthorizedError("Invalid or expired token")

    return owner_id
