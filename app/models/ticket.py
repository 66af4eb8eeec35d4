# app/models/ticket.py
"""
Ticket models for the support system.
A ticket owns an append-only list of TicketLog rows; each row records one
change (creation, status change, assignment, field edit, attachment).
"""
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

from app.core.constants import TicketPriority, TicketStatus


class Ticket(SQLModel, table=True):
    __tablename__ = "tickets"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_code: str = Field(unique=True, index=True, nullable=False, max_length=20)
    title: str = Field(nullable=False, max_length=200)
    description: Optional[str] = Field(default=None)
    status: str = Field(default=TicketStatus.OPEN.value, index=True)
    priority: str = Field(default=TicketPriority.MEDIUM.value)

    customer_id: int = Field(foreign_key="customers.id", nullable=False, index=True)
    created_by_id: int = Field(foreign_key="users.id", nullable=False)
    assigned_to_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    customer: Optional["Customer"] = Relationship(back_populates="tickets")
    created_by: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Ticket.created_by_id]"}
    )
    assigned_to: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Ticket.assigned_to_id]"}
    )
    logs: List["TicketLog"] = Relationship(
        back_populates="ticket",
        sa_relationship_kwargs={
            "order_by": "[TicketLog.created_at.desc(), TicketLog.id.desc()]"
        },
    )
    attachments: List["TicketAttachment"] = Relationship(back_populates="ticket")


class TicketLog(SQLModel, table=True):
    """
    Immutable audit record of a single change to a ticket.
    """

    __tablename__ = "ticket_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="tickets.id", nullable=False, index=True)
    actor_id: int = Field(foreign_key="users.id", nullable=False)
    from_status: Optional[str] = Field(default=None)
    to_status: Optional[str] = Field(default=None)
    note: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    ticket: Optional[Ticket] = Relationship(back_populates="logs")
    actor: Optional["User"] = Relationship()


class TicketAttachment(SQLModel, table=True):
    __tablename__ = "ticket_attachments"

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="tickets.id", nullable=False, index=True)
    url: str = Field(nullable=False)
    uploaded_by_id: int = Field(foreign_key="users.id", nullable=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    ticket: Optional[Ticket] = Relationship(back_populates="attachments")
