# app/services/role_service.py
"""
Role registry and the links between roles, permissions and users.

System roles (see PROTECTED_ROLE_NAMES) can be relabelled and have their
permission set changed, but never renamed or deleted.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, select

from app.core.constants import PROTECTED_ROLE_NAMES
from app.core.exceptions import (
    Conflict,
    InvalidPermissionIds,
    NoValidFields,
    NotFound,
    ProtectedRoleViolation,
    ValidationError,
)
from app.models.links import RolePermission, UserRole
from app.models.role import Permission, Role
from app.models.user import User

from .base_service import BaseCRUDService

logger = logging.getLogger(__name__)

ROLE_NAME_PATTERN = re.compile(r"^[A-Z_]+$")


class RoleService(BaseCRUDService[Role]):
    def __init__(self, session: Session):
        super().__init__(session, Role)

    # --- Queries ---

    def list_roles(self, search: Optional[str] = None, name: Optional[str] = None) -> List[Role]:
        statement = select(Role)
        if search:
            term = f"%{search}%"
            statement = statement.where(
                or_(col(Role.name).ilike(term), col(Role.label).ilike(term))
            )
        if name:
            statement = statement.where(Role.name == name)
        statement = statement.order_by(col(Role.created_at).desc(), col(Role.id).desc())
        return list(self.session.exec(statement).all())

    def get_role(self, role_id: int) -> Role:
        return self.get_by_id(role_id)

    def get_role_by_name(self, name: str) -> Optional[Role]:
        return self.session.exec(select(Role).where(Role.name == name)).first()

    def get_role_permissions(self, role_id: int) -> List[Permission]:
        return list(self.get_role(role_id).permissions)

    def get_user_roles(self, user_id: int) -> List[Role]:
        return list(self._get_user(user_id).roles)

    # --- Validation helpers ---

    def _get_user(self, user_id: int) -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def _get_permission(self, permission_id: int) -> Permission:
        permission = self.session.get(Permission, permission_id)
        if not permission:
            raise NotFound("Permission not found")
        return permission

    @staticmethod
    def _check_name(name: Optional[str]) -> str:
        if not name:
            raise ValidationError("Role name is required")
        if not ROLE_NAME_PATTERN.match(name):
            raise ValidationError(
                "Invalid role name. Use uppercase letters and underscores only"
            )
        return name

    @staticmethod
    def _check_label(label: Optional[str]) -> str:
        if not label or not label.strip():
            raise ValidationError("Role label is required")
        return label.strip()

    def _check_name_available(self, name: str, role_id: Optional[int] = None) -> None:
        existing = self.get_role_by_name(name)
        if existing and existing.id != role_id:
            raise Conflict("Role with this name already exists")

    def _resolve_permissions(self, permission_ids: Iterable[int]) -> List[Permission]:
        """
        Load every permission in the list, or none at all.

        Raises:
            InvalidPermissionIds: if any id does not exist.
        """
        ids = set(permission_ids)
        if not ids:
            return []
        permissions = list(
            self.session.exec(select(Permission).where(col(Permission.id).in_(ids))).all()
        )
        if len(permissions) != len(ids):
            raise InvalidPermissionIds("One or more permission IDs are invalid")
        return permissions

    # --- Role CRUD ---

    def create_role(self, data: Dict[str, Any]) -> Role:
        name = self._check_name(data.get("name"))
        label = self._check_label(data.get("label"))
        permissions = self._resolve_permissions(data.get("permissions") or [])
        self._check_name_available(name)

        role = Role(name=name, label=label)
        role.permissions = permissions
        self.session.add(role)
        self.commit(role)
        logger.info(f"Role {role.name} created with {len(permissions)} permission(s)")
        return role

    def replace_role(self, role_id: int, data: Dict[str, Any]) -> Role:
        """Full update: name and label are both required."""
        if not data.get("name") or not data.get("label"):
            raise ValidationError("Name and label are required for full update")
        return self.update_role(role_id, data)

    def update_role(self, role_id: int, data: Dict[str, Any]) -> Role:
        """
        Partial update of name, label and permission set. A supplied
        permission list replaces the current set in the same commit.

        Raises:
            NoValidFields: nothing to update.
            ProtectedRoleViolation: renaming a system role.
            Conflict: the new name is taken.
            InvalidPermissionIds: any permission id does not exist.
        """
        role = self.get_role(role_id)
        changes = {k: v for k, v in data.items() if k in ("name", "label", "permissions") and v is not None}
        if not changes:
            raise NoValidFields("No data provided for update")

        name = label = permissions = None
        if "name" in changes and changes["name"] != role.name:
            name = self._check_name(changes["name"])
            if role.name in PROTECTED_ROLE_NAMES:
                raise ProtectedRoleViolation("Cannot modify system role names")
            self._check_name_available(name, role.id)
        if "label" in changes:
            label = self._check_label(changes["label"])
        if "permissions" in changes:
            permissions = self._resolve_permissions(changes["permissions"])

        # Nothing is touched until every check has passed.
        if name is not None:
            role.name = name
        if label is not None:
            role.label = label
        if permissions is not None:
            role.permissions = permissions

        self.session.add(role)
        self.commit(role)
        return role

    def delete_role(self, role_id: int) -> str:
        """Delete a custom role and return its name."""
        role = self.get_role(role_id)
        name = role.name
        if name in PROTECTED_ROLE_NAMES:
            raise ProtectedRoleViolation("Cannot delete system roles")
        self.session.delete(role)
        self.commit()
        logger.info(f"Role {name} deleted")
        return name

    # --- Role <-> Permission ---

    def add_permission_to_role(self, role_id: int, permission_id: int) -> Role:
        role = self.get_role(role_id)
        permission = self._get_permission(permission_id)
        if self.session.get(RolePermission, (role.id, permission.id)):
            raise Conflict("Permission already assigned to role")

        self.session.add(RolePermission(role_id=role.id, permission_id=permission.id))
        self.commit(role)
        return role

    def remove_permission_from_role(self, role_id: int, permission_id: int) -> None:
        link = self.session.get(RolePermission, (role_id, permission_id))
        if not link:
            raise NotFound("Permission is not assigned to this role")
        self.session.delete(link)
        self.commit()

    # --- User <-> Role ---

    def assign_role_to_user(self, role_id: int, user_id: int) -> User:
        role = self.get_role(role_id)
        user = self._get_user(user_id)
        if self.session.get(UserRole, (user.id, role.id)):
            raise Conflict("User already has this role")

        self.session.add(UserRole(user_id=user.id, role_id=role.id))
        self.commit(user)
        logger.info(f"Role {role.name} assigned to {user.username}")
        return user

    def remove_role_from_user(self, role_id: int, user_id: int) -> None:
        link = self.session.get(UserRole, (user_id, role_id))
        if not link:
            raise NotFound("User does not have this role")
        self.session.delete(link)
        self.commit()
