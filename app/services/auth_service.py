# app/services/auth_service.py
"""
Registration, login and current-user lookup.

Login snapshots the user's role names and the union of their permission keys
into the access token; later role changes take effect on the next login.
"""
import logging
from typing import Any, Dict, Tuple

from sqlmodel import Session, select

from app.core.constants import DEFAULT_REGISTRATION_ROLE
from app.core.exceptions import Conflict, NotFound, Unauthorized, ValidationError
from app.core.security import (
    TokenClaims,
    create_access_token,
    get_password_hash,
    verify_password,
)
from app.models.role import Role
from app.models.user import User

logger = logging.getLogger(__name__)


def build_claims(user: User) -> TokenClaims:
    return TokenClaims(
        user_id=user.id,
        username=user.username,
        roles=user.role_names,
        permissions=sorted(user.permission_keys),
    )


class AuthService:
    def __init__(self, session: Session):
        self.session = session

    def _get_by_username(self, username: str):
        return self.session.exec(select(User).where(User.username == username)).first()

    def register(self, data: Dict[str, Any]) -> User:
        """
        Create a self-registered account holding the default role.

        Raises:
            ValidationError: username, email or password missing.
            Conflict: username or email already taken.
        """
        if not data.get("username") or not data.get("email") or not data.get("password"):
            raise ValidationError("Username, email and password are required")
        if self._get_by_username(data["username"]):
            raise Conflict("Username already exists")
        if self.session.exec(select(User).where(User.email == data["email"])).first():
            raise Conflict("Email already exists")

        user = User(
            username=data["username"],
            email=data["email"],
            hashed_password=get_password_hash(data["password"]),
            full_name=data.get("full_name"),
            phone=data.get("phone"),
        )
        default_role = self.session.exec(
            select(Role).where(Role.name == DEFAULT_REGISTRATION_ROLE.value)
        ).first()
        if default_role:
            user.roles = [default_role]
        else:
            logger.warning(
                f"Default role {DEFAULT_REGISTRATION_ROLE.value} missing; "
                f"{data['username']} registered without roles"
            )

        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        logger.info(f"User {user.username} registered")
        return user

    def login(self, username: str, password: str) -> Tuple[str, User]:
        """
        Verify credentials and issue an access token.

        Raises:
            Unauthorized: unknown user, wrong password or disabled account.
        """
        user = self._get_by_username(username)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for '{username}'")
            raise Unauthorized("Invalid credentials")
        if not user.is_active:
            raise Unauthorized("Account is disabled")

        token = create_access_token(build_claims(user))
        logger.info(f"User {user.username} logged in")
        return token, user

    def me(self, user_id: int) -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user
