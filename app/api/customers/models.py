# app/api/customers/models.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PackageSummary(BaseModel):
    id: int
    code: str
    name: str
    price: float
    model_config = ConfigDict(from_attributes=True)


class Customer(BaseModel):
    id: int
    customer_code: str
    full_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    package_id: int
    package: PackageSummary | None = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CustomerCreate(BaseModel):
    full_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    package_id: int


class CustomerUpdate(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    package_id: int | None = None
