# app/models/role.py
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

from .links import RolePermission, UserRole


class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True, nullable=False, max_length=50)
    label: str = Field(nullable=False, max_length=100)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    permissions: List["Permission"] = Relationship(
        back_populates="roles", link_model=RolePermission
    )
    users: List["User"] = Relationship(back_populates="roles", link_model=UserRole)


class Permission(SQLModel, table=True):
    __tablename__ = "permissions"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(unique=True, index=True, nullable=False, max_length=100)  # e.g. "tickets.update"
    label: str = Field(nullable=False, max_length=100)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    roles: List[Role] = Relationship(
        back_populates="permissions", link_model=RolePermission
    )
