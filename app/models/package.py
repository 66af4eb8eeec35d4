# app/models/package.py
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Package(SQLModel, table=True):
    __tablename__ = "packages"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True, nullable=False, max_length=20)  # e.g. "PKG-1A2B3C4D"
    name: str = Field(nullable=False, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    price: float = Field(default=0.0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    customers: List["Customer"] = Relationship(back_populates="package")
