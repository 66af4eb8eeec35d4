# app/core/security.py
"""
Password hashing and access-token handling.

Tokens are HS256 JWTs carrying a snapshot of the user's roles and permission
keys taken at login. Requests are authorized from that snapshot alone, so a
permission change only reaches a user after they log in again (at most
ACCESS_TOKEN_EXPIRE_HOURS later).
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import Unauthorized

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class TokenClaims(BaseModel):
    """Identity of the caller as carried by the bearer token."""

    user_id: int
    username: str
    roles: List[str] = []
    permissions: List[str] = []


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    claims: TokenClaims, expires_delta: Optional[timedelta] = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.access_token_expire_hours)
    )
    to_encode = {
        "sub": str(claims.user_id),
        "userId": claims.user_id,
        "username": claims.username,
        "roles": claims.roles,
        "permissions": claims.permissions,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry and return the embedded claims.

    Raises:
        Unauthorized: if the token is malformed, forged or expired.
    """
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise Unauthorized("Invalid or expired token")

    user_id = payload.get("userId")
    username = payload.get("username")
    if user_id is None or not username:
        raise Unauthorized("Invalid or expired token")

    return TokenClaims(
        user_id=user_id,
        username=username,
        roles=payload.get("roles") or [],
        permissions=payload.get("permissions") or [],
    )
