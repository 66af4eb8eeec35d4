# app/core/authorization.py
"""
Permission-based access control.

The decision itself is a pure function over two sets of permission keys.
The FastAPI dependencies below only extract the caller's claims from the
bearer token and turn a DENY into a 403.
"""
from enum import Enum
from typing import Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import Forbidden, Unauthorized
from app.core.security import TokenClaims, decode_access_token


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


def authorize(required: Iterable[str], granted: Iterable[str]) -> Decision:
    """
    Allow iff every required key is granted.
    An empty requirement always allows an authenticated caller.
    """
    if set(required) <= set(granted):
        return Decision.ALLOW
    return Decision.DENY


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    """Claims of the authenticated caller; 401 when the token is absent or invalid."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No token provided")
    return decode_access_token(credentials.credentials)


class PermissionChecker:
    """
    Dependency class that requires every listed permission key.

    Usage:
        @router.post("/tickets")
        def create(claims: TokenClaims = Depends(PermissionChecker(["tickets.create"]))):
            ...
    """

    def __init__(self, required_permissions: Iterable[str]):
        self.required_permissions = {str(getattr(p, "value", p)) for p in required_permissions}

    def __call__(self, claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if authorize(self.required_permissions, claims.permissions) is Decision.DENY:
            raise Forbidden("Insufficient permissions")
        return claims


def require_permissions(*keys) -> PermissionChecker:
    return PermissionChecker(keys)
