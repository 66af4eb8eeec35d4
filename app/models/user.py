# app/models/user.py
"""
Portal user model.

Fields:
- id: auto-increment primary key
- username / email: unique login identifiers
- hashed_password: Argon2 hash, never exposed through the API
- full_name / phone: contact data, full_name is the display name
- is_active: disabled users cannot log in
- roles: many-to-many through user_roles
"""
from datetime import datetime
from typing import List, Optional, Set

from sqlmodel import Field, Relationship, SQLModel

from .links import UserRole


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True, nullable=False, max_length=50)
    email: str = Field(index=True, unique=True, nullable=False, max_length=320)
    hashed_password: str = Field(nullable=False, max_length=1024)
    full_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    roles: List["Role"] = Relationship(back_populates="users", link_model=UserRole)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @property
    def role_names(self) -> List[str]:
        return [role.name for role in self.roles]

    @property
    def permission_keys(self) -> Set[str]:
        """Union of the permission keys of every role the user holds."""
        return {perm.key for role in self.roles for perm in role.permissions}
