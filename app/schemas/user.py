# app/schemas/user.py
"""
Read schemas for users.
Password hashes never leave the service layer; these models are the only
shape a user takes in API responses.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Compact form embedded in tickets, logs and roles."""

    id: int
    username: str
    full_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class RoleSummary(BaseModel):
    id: int
    name: str
    label: str
    model_config = ConfigDict(from_attributes=True)


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime
    roles: List[RoleSummary] = []
    model_config = ConfigDict(from_attributes=True)
