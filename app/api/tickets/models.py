# app/api/tickets/models.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ...core.constants import TicketPriority, TicketStatus
from ...schemas.user import UserSummary


class CustomerSummary(BaseModel):
    id: int
    customer_code: str
    full_name: str
    model_config = ConfigDict(from_attributes=True)


class TicketCreate(BaseModel):
    customer_id: int
    title: str
    description: str | None = None
    priority: TicketPriority | None = None
    assigned_to_id: int | None = None


class TicketUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: TicketPriority | None = None


class TicketUpdateStatus(BaseModel):
    status: TicketStatus
    note: str


class TicketAssign(BaseModel):
    assigned_to_id: int


class TicketAttachmentCreate(BaseModel):
    images: list[str]


class TicketLogRead(BaseModel):
    id: int
    note: str
    from_status: str | None = None
    to_status: str | None = None
    created_at: datetime
    actor: UserSummary | None = None
    model_config = ConfigDict(from_attributes=True)


class TicketAttachmentRead(BaseModel):
    id: int
    url: str
    uploaded_by_id: int | None = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TicketSummary(BaseModel):
    id: int
    ticket_code: str
    title: str
    description: str | None = None
    status: TicketStatus
    priority: TicketPriority
    customer: CustomerSummary
    created_by: UserSummary | None = None
    assigned_to: UserSummary | None = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TicketRead(TicketSummary):
    """Full ticket with its activity history, newest entry first."""

    logs: list[TicketLogRead] = []
    attachments: list[TicketAttachmentRead] = []
