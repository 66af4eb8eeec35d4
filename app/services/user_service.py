# app/services/user_service.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from app.core.exceptions import Conflict, Forbidden, NoValidFields, NotFound, ValidationError
from app.core.security import get_password_hash
from app.models.role import Role
from app.models.ticket import Ticket, TicketAttachment, TicketLog
from app.models.user import User

from .base_service import BaseCRUDService

logger = logging.getLogger(__name__)

USER_UPDATABLE_FIELDS = ("username", "email", "full_name", "phone", "is_active")


class UserService(BaseCRUDService[User]):
    def __init__(self, session: Session):
        super().__init__(session, User)

    def list_users(self, exclude_roles: Optional[Iterable[str]] = None) -> List[User]:
        """All users, skipping anyone holding one of `exclude_roles`."""
        statement = select(User)
        excluded = [name for name in (exclude_roles or []) if name]
        if excluded:
            statement = statement.where(~User.roles.any(col(Role.name).in_(excluded)))
        statement = statement.order_by(col(User.created_at).desc(), col(User.id).desc())
        return list(self.session.exec(statement).all())

    def get_user(self, user_id: int) -> User:
        return self.get_by_id(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.username == username)).first()

    def _check_identity_available(
        self, username: Optional[str], email: Optional[str], user_id: Optional[int] = None
    ) -> None:
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return
        statement = select(User).where(or_(*conditions))
        if user_id is not None:
            statement = statement.where(User.id != user_id)
        if self.session.exec(statement).first():
            raise Conflict("Username or email already exists")

    def _get_role(self, role_id: int) -> Role:
        role = self.session.get(Role, role_id)
        if not role:
            raise NotFound("Role not found")
        return role

    def create_user(self, data: Dict[str, Any]) -> User:
        if not data.get("username") or not data.get("email") or not data.get("password"):
            raise ValidationError("Username, email and password are required")
        self._check_identity_available(data["username"], data["email"])

        db_user = User(
            username=data["username"],
            email=data["email"],
            hashed_password=get_password_hash(data["password"]),
            full_name=data.get("full_name"),
            phone=data.get("phone"),
        )
        if data.get("role_id"):
            db_user.roles = [self._get_role(data["role_id"])]

        self.session.add(db_user)
        self.commit(db_user)
        logger.info(f"User {db_user.username} created")
        return db_user

    def replace_user(self, user_id: int, data: Dict[str, Any]) -> User:
        """Full update: username and email are both required."""
        if not data.get("username") or not data.get("email"):
            raise ValidationError("Username and email are required for full update")
        return self.update_user(user_id, data)

    def update_user(self, user_id: int, data: Dict[str, Any]) -> User:
        """
        Apply the supplied fields. A `role_id` replaces every role the user
        holds; a `password` is re-hashed. Both land in the same commit as the
        profile change.
        """
        db_user = self.get_user(user_id)
        update_data = {k: v for k, v in data.items() if v is not None}

        password = update_data.pop("password", None)
        role_id = update_data.pop("role_id", None)
        changes = {k: v for k, v in update_data.items() if k in USER_UPDATABLE_FIELDS}
        if not changes and not password and not role_id:
            raise NoValidFields("No valid fields to update provided.")

        self._check_identity_available(changes.get("username"), changes.get("email"), db_user.id)
        role = self._get_role(role_id) if role_id else None

        for key, value in changes.items():
            setattr(db_user, key, value)
        if password:
            db_user.hashed_password = get_password_hash(password)
        if role is not None:
            db_user.roles = [role]

        self.session.add(db_user)
        self.commit(db_user)
        return db_user

    def delete_user(self, user_id: int, acting_user_id: int) -> str:
        """
        Delete a user and return the username. Users cannot delete themselves,
        and users that tickets, ticket logs or attachments point at are kept.
        """
        if user_id == acting_user_id:
            raise Forbidden("You cannot delete your own account")
        db_user = self.get_user(user_id)
        username = db_user.username

        ticket_count = self.session.exec(
            select(func.count(Ticket.id)).where(
                or_(Ticket.created_by_id == db_user.id, Ticket.assigned_to_id == db_user.id)
            )
        ).one()
        if ticket_count:
            raise Conflict(
                f"User {username} is linked to {ticket_count} ticket(s) and cannot be deleted"
            )
        history_count = self.session.exec(
            select(func.count(TicketLog.id)).where(TicketLog.actor_id == db_user.id)
        ).one() + self.session.exec(
            select(func.count(TicketAttachment.id)).where(TicketAttachment.uploaded_by_id == db_user.id)
        ).one()
        if history_count:
            raise Conflict(f"User {username} appears in ticket history and cannot be deleted")

        self.session.delete(db_user)
        self.commit()
        logger.info(f"User {username} deleted")
        return username
