# app/models/customer.py
"""
Customer model for portal subscribers.
"""
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Customer(SQLModel, table=True):
    """
    A subscriber of one service package.

    Fields:
    - customer_code: generated "CUST-XXXXXXXX" reference
    - full_name: required
    - email / phone / address: contact data
    - package_id: subscribed package (required)
    """

    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_code: str = Field(unique=True, index=True, nullable=False, max_length=20)
    full_name: str = Field(nullable=False, max_length=100)
    email: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    address: Optional[str] = Field(default=None, max_length=255)
    package_id: int = Field(foreign_key="packages.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    package: Optional["Package"] = Relationship(back_populates="customers")
    tickets: List["Ticket"] = Relationship(back_populates="customer")
