# app/api/users/models.py
from pydantic import BaseModel


class UserCreate(BaseModel):
    username: str
    email: str
    password: str
    full_name: str | None = None
    phone: str | None = None
    role_id: int | None = None


class UserReplace(BaseModel):
    username: str
    email: str
    full_name: str | None = None
    phone: str | None = None
    is_active: bool | None = None
    password: str | None = None
    role_id: int | None = None


class UserUpdate(BaseModel):
    username: str | None = None
    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    is_active: bool | None = None
    password: str | None = None
    role_id: int | None = None
