# app/api/packages/models.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Package(BaseModel):
    id: int
    code: str
    name: str
    description: str | None = None
    price: float
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PackageCreate(BaseModel):
    name: str
    description: str | None = None
    price: float


class PackageUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    price: float | None = None
