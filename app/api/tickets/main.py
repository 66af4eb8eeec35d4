# app/api/tickets/main.py
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from ...core.authorization import get_current_claims, require_permissions
from ...core.constants import PermissionKey, TicketPriority, TicketStatus
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...services.ticket_service import TicketService
from .models import (
    TicketAssign,
    TicketAttachmentCreate,
    TicketCreate,
    TicketRead,
    TicketSummary,
    TicketUpdate,
    TicketUpdateStatus,
)

router = APIRouter()

require_read = require_permissions(PermissionKey.TICKETS_READ)
require_create = require_permissions(PermissionKey.TICKETS_CREATE)
require_update = require_permissions(PermissionKey.TICKETS_UPDATE)


def get_ticket_service(session: Session = Depends(get_sync_session)) -> TicketService:
    return TicketService(session)


@router.get("/tickets", response_model=ApiResponse[list[TicketSummary]])
def api_get_tickets(
    search: str | None = None,
    ticket_status: TicketStatus | None = Query(None, alias="status"),
    priority: TicketPriority | None = None,
    customer_id: int | None = None,
    assigned_to_id: int | None = None,
    created_at: date | None = Query(None, description="Only tickets created on this day"),
    start_date: date | None = None,
    end_date: date | None = None,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(require_read),
):
    tickets = service.list_tickets(
        search=search,
        status=ticket_status,
        priority=priority,
        customer_id=customer_id,
        assigned_to_id=assigned_to_id,
        created_at=created_at,
        start_date=start_date,
        end_date=end_date,
    )
    return ok(tickets, "Tickets retrieved successfully")


@router.get("/tickets/{ticket_id}", response_model=ApiResponse[TicketRead])
def api_get_ticket(
    ticket_id: int,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(require_read),
):
    return ok(service.get_ticket(ticket_id), "Ticket retrieved successfully")


@router.post("/tickets", response_model=ApiResponse[TicketRead], status_code=status.HTTP_201_CREATED)
def api_create_ticket(
    ticket: TicketCreate,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(require_create),
):
    created = service.create_ticket(ticket.model_dump(exclude_unset=True), current_user.user_id)
    return ok(created, "Ticket created successfully")


@router.patch("/tickets/{ticket_id}", response_model=ApiResponse[TicketRead])
def api_update_ticket(
    ticket_id: int,
    ticket_update: TicketUpdate,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(require_update),
):
    updated = service.update_ticket_details(
        ticket_id, ticket_update.model_dump(exclude_unset=True), current_user.user_id
    )
    return ok(updated, "Ticket updated successfully")


@router.patch("/tickets/{ticket_id}/status", response_model=ApiResponse[TicketRead])
def api_update_ticket_status(
    ticket_id: int,
    payload: TicketUpdateStatus,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(require_update),
):
    updated = service.update_status(ticket_id, payload.status, current_user.user_id, payload.note)
    return ok(updated, "Ticket status updated successfully")


@router.patch("/tickets/{ticket_id}/assign", response_model=ApiResponse[TicketRead])
def api_assign_ticket(
    ticket_id: int,
    payload: TicketAssign,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(require_update),
):
    updated = service.assign_ticket(ticket_id, payload.assigned_to_id, current_user.user_id)
    return ok(updated, "Ticket assigned successfully")


@router.post(
    "/tickets/{ticket_id}/attachments",
    response_model=ApiResponse[TicketRead],
    status_code=status.HTTP_201_CREATED,
)
def api_add_attachments(
    ticket_id: int,
    payload: TicketAttachmentCreate,
    service: TicketService = Depends(get_ticket_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    updated = service.add_attachment(ticket_id, payload.images, current_user.user_id)
    return ok(updated, "Attachments added successfully")
