# app/api/permissions/models.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Permission(BaseModel):
    id: int
    key: str
    label: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PermissionCreate(BaseModel):
    key: str
    label: str


class PermissionUpdate(BaseModel):
    key: str | None = None
    label: str | None = None
