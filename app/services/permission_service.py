# app/services/permission_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, select

from app.core.exceptions import Conflict, ValidationError
from app.models.role import Permission

from .base_service import BaseCRUDService, pick_fields

PERMISSION_UPDATABLE_FIELDS = ("key", "label")


class PermissionService(BaseCRUDService[Permission]):
    def __init__(self, session: Session):
        super().__init__(session, Permission)

    def list_permissions(
        self, search: Optional[str] = None, key: Optional[str] = None
    ) -> List[Permission]:
        statement = select(Permission)
        if search:
            term = f"%{search}%"
            statement = statement.where(
                or_(col(Permission.key).ilike(term), col(Permission.label).ilike(term))
            )
        if key:
            statement = statement.where(Permission.key == key)
        statement = statement.order_by(col(Permission.key))
        return list(self.session.exec(statement).all())

    def get_by_key(self, key: str) -> Optional[Permission]:
        return self.session.exec(select(Permission).where(Permission.key == key)).first()

    def _check_key_available(self, key: str, permission_id: Optional[int] = None) -> None:
        existing = self.get_by_key(key)
        if existing and existing.id != permission_id:
            raise Conflict("Permission with this key already exists")

    def create_permission(self, data: Dict[str, Any]) -> Permission:
        if not data.get("key") or not data.get("label"):
            raise ValidationError("Key and label are required")
        self._check_key_available(data["key"])

        permission = Permission(key=data["key"], label=data["label"])
        self.session.add(permission)
        self.commit(permission)
        return permission

    def update_permission(self, permission_id: int, data: Dict[str, Any]) -> Permission:
        permission = self.get_by_id(permission_id)
        changes = pick_fields(
            {k: v for k, v in data.items() if v is not None}, PERMISSION_UPDATABLE_FIELDS
        )
        if "key" in changes:
            if not changes["key"]:
                raise ValidationError("Permission key is required")
            self._check_key_available(changes["key"], permission.id)
        if "label" in changes and not changes["label"]:
            raise ValidationError("Permission label is required")
        return self.update_fields(permission, changes)

    def delete_permission(self, permission_id: int) -> str:
        """Delete a permission, detaching it from every role. Returns its key."""
        permission = self.get_by_id(permission_id)
        key = permission.key
        self.session.delete(permission)
        self.commit()
        return key
