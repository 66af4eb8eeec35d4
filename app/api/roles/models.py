# app/api/roles/models.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ...schemas.user import UserSummary
from ..permissions.models import Permission


class Role(BaseModel):
    id: int
    name: str
    label: str
    created_at: datetime
    permissions: list[Permission] = []
    users: list[UserSummary] = []
    model_config = ConfigDict(from_attributes=True)


class RoleWithPermissions(BaseModel):
    """A role as seen from one of its users."""

    id: int
    name: str
    label: str
    permissions: list[Permission] = []
    model_config = ConfigDict(from_attributes=True)


class RoleCreate(BaseModel):
    name: str
    label: str
    permissions: list[int] | None = None


class RoleReplace(BaseModel):
    name: str
    label: str
    permissions: list[int] | None = None


class RoleUpdate(BaseModel):
    name: str | None = None
    label: str | None = None
    permissions: list[int] | None = None
