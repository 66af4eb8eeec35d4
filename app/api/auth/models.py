# app/api/auth/models.py
from pydantic import BaseModel

from ...schemas.user import UserRead


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    full_name: str | None = None
    phone: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginData(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead
