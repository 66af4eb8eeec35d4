# app/services/ticket_service.py
"""
Ticket lifecycle: creation with the per-customer active cap, status
transitions, (re)assignment, detail edits and attachments.

Every mutating method writes the ticket change and its TicketLog row(s) in
one commit. A failed commit is rolled back, so no reader ever sees a ticket
change without its log entry or the other way round. There is no version
column: two concurrent updates on the same ticket resolve last-writer-wins.
The active-ticket cap is checked and enforced inside one request, not
serialised across requests.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from app.core.constants import (
    ACTIVE_TICKET_STATUSES,
    MAX_ACTIVE_TICKETS_PER_CUSTOMER,
    TicketPriority,
    TicketStatus,
)
from app.core.exceptions import (
    InvalidTransition,
    NotFound,
    TicketLimitExceeded,
    ValidationError,
)
from app.models.customer import Customer
from app.models.ticket import Ticket, TicketAttachment, TicketLog
from app.models.user import User

from .base_service import BaseCRUDService, generate_code, pick_fields

logger = logging.getLogger(__name__)

TICKET_EDITABLE_FIELDS = ("title", "description", "priority")


def _parse_status(value: Any) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        raise ValidationError("Invalid status")


def _parse_priority(value: Any) -> TicketPriority:
    try:
        return TicketPriority(value)
    except ValueError:
        raise ValidationError("Priority must be LOW, MEDIUM, or HIGH")


def check_transition(current: TicketStatus, new: TicketStatus) -> None:
    """
    CLOSED is only reachable from RESOLVED. Every other move is allowed,
    including reopening a CLOSED ticket.
    """
    if new is TicketStatus.CLOSED and current is not TicketStatus.RESOLVED:
        raise InvalidTransition("Ticket must be RESOLVED before it can be CLOSED")


class TicketService(BaseCRUDService[Ticket]):
    def __init__(self, session: Session):
        super().__init__(session, Ticket)

    # --- Queries ---

    def get_ticket(self, ticket_id: int) -> Ticket:
        return self.get_by_id(ticket_id)

    def count_active_tickets(self, customer_id: int) -> int:
        statement = select(func.count(Ticket.id)).where(
            Ticket.customer_id == customer_id,
            col(Ticket.status).in_([s.value for s in ACTIVE_TICKET_STATUSES]),
        )
        return self.session.exec(statement).one()

    def list_tickets(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        customer_id: Optional[int] = None,
        assigned_to_id: Optional[int] = None,
        created_at: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Ticket]:
        """
        Tickets newest first.

        `created_at` selects a single day; `start_date`/`end_date` select an
        inclusive range of days. `search` matches ticket code, title,
        description, customer name and customer code, case-insensitively.
        """
        statement = select(Ticket)

        if search:
            term = f"%{search}%"
            statement = statement.join(Customer, Customer.id == Ticket.customer_id).where(
                or_(
                    col(Ticket.ticket_code).ilike(term),
                    col(Ticket.title).ilike(term),
                    col(Ticket.description).ilike(term),
                    col(Customer.full_name).ilike(term),
                    col(Customer.customer_code).ilike(term),
                )
            )
        if status:
            statement = statement.where(Ticket.status == _parse_status(status).value)
        if priority:
            statement = statement.where(Ticket.priority == _parse_priority(priority).value)
        if customer_id is not None:
            statement = statement.where(Ticket.customer_id == customer_id)
        if assigned_to_id is not None:
            statement = statement.where(Ticket.assigned_to_id == assigned_to_id)
        if created_at is not None:
            day_start = datetime.combine(created_at, time.min)
            statement = statement.where(
                Ticket.created_at >= day_start,
                Ticket.created_at < day_start + timedelta(days=1),
            )
        if start_date is not None:
            statement = statement.where(Ticket.created_at >= datetime.combine(start_date, time.min))
        if end_date is not None:
            statement = statement.where(
                Ticket.created_at < datetime.combine(end_date, time.min) + timedelta(days=1)
            )

        statement = statement.order_by(col(Ticket.created_at).desc(), col(Ticket.id).desc())
        return list(self.session.exec(statement).all())

    # --- Helpers ---

    def _get_user(self, user_id: int, message: str = "User not found") -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFound(message)
        return user

    def _add_log(
        self,
        ticket: Ticket,
        actor_id: int,
        note: str,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
    ) -> TicketLog:
        log = TicketLog(
            ticket_id=ticket.id,
            actor_id=actor_id,
            note=note,
            from_status=from_status,
            to_status=to_status,
        )
        self.session.add(log)
        return log

    # --- Mutations ---

    def create_ticket(self, data: Dict[str, Any], creator_id: int) -> Ticket:
        """
        Open a new ticket for a customer.

        Raises:
            ValidationError: customer_id or title missing, bad priority.
            NotFound: customer or assignee does not exist.
            TicketLimitExceeded: the customer already has the maximum of
                active (OPEN / IN_PROGRESS) tickets.
        """
        customer_id = data.get("customer_id")
        title = (data.get("title") or "").strip()
        if not customer_id or not title:
            raise ValidationError("Customer ID and title are required")

        customer = self.session.get(Customer, customer_id)
        if not customer:
            raise NotFound("Customer not found")

        assigned_to_id = data.get("assigned_to_id")
        if assigned_to_id is not None:
            self._get_user(assigned_to_id, "Assigned user not found")

        requested_priority = data.get("priority")
        priority = (
            _parse_priority(requested_priority) if requested_priority else TicketPriority.MEDIUM
        )

        active = self.count_active_tickets(customer.id)
        if active >= MAX_ACTIVE_TICKETS_PER_CUSTOMER:
            logger.warning(
                f"Customer {customer.customer_code} exceeded active ticket limit "
                f"({active}/{MAX_ACTIVE_TICKETS_PER_CUSTOMER})"
            )
            raise TicketLimitExceeded(
                f"Customer already has {MAX_ACTIVE_TICKETS_PER_CUSTOMER} active tickets "
                "(OPEN or IN_PROGRESS). Resolve or close one before creating another."
            )

        ticket = Ticket(
            ticket_code=generate_code("TKT"),
            title=title,
            description=data.get("description"),
            status=TicketStatus.OPEN.value,
            priority=priority.value,
            customer_id=customer.id,
            created_by_id=creator_id,
            assigned_to_id=assigned_to_id,
        )
        with self.rollback_on_error():
            self.session.add(ticket)
            self.session.flush()

            self._add_log(
                ticket,
                creator_id,
                f"Ticket {ticket.ticket_code} created",
                to_status=TicketStatus.OPEN.value,
            )
            if assigned_to_id is not None:
                self._add_log(ticket, creator_id, "Initial assignment set")
            if requested_priority:
                self._add_log(ticket, creator_id, f"Initial priority set to {priority.value}")
        self.commit(ticket)

        logger.info(f"Ticket {ticket.ticket_code} created for customer {customer.customer_code}")
        return ticket

    def update_status(
        self, ticket_id: int, new_status: Any, actor_id: int, note: Optional[str]
    ) -> Ticket:
        """
        Move a ticket to another status and record the transition.

        Raises:
            NotFound: unknown ticket.
            ValidationError: empty note or unknown status.
            InvalidTransition: CLOSED requested while not RESOLVED.
        """
        ticket = self.get_ticket(ticket_id)
        if not note or not note.strip():
            raise ValidationError("Note is required")
        target = _parse_status(new_status)
        current = TicketStatus(ticket.status)
        check_transition(current, target)

        with self.rollback_on_error():
            ticket.status = target.value
            ticket.updated_at = datetime.utcnow()
            self.session.add(ticket)
            self._add_log(
                ticket,
                actor_id,
                note.strip(),
                from_status=current.value,
                to_status=target.value,
            )
        self.commit(ticket)

        logger.info(f"Ticket {ticket.ticket_code}: {current.value} -> {target.value}")
        return ticket

    def assign_ticket(self, ticket_id: int, assigned_to_id: Optional[int], actor_id: int) -> Ticket:
        """
        Assign or reassign a ticket. The log note names both users by display
        name (full name, falling back to username).
        """
        if not assigned_to_id:
            raise ValidationError("Assigned user ID is required")
        ticket = self.get_ticket(ticket_id)
        assignee = self._get_user(assigned_to_id, "Assigned user not found")

        previous = ticket.assigned_to
        if previous:
            note = f"Ticket reassigned from {previous.display_name} to {assignee.display_name}"
        else:
            note = f"Ticket assigned to {assignee.display_name}"

        with self.rollback_on_error():
            ticket.assigned_to_id = assignee.id
            ticket.updated_at = datetime.utcnow()
            self.session.add(ticket)
            self._add_log(ticket, actor_id, note)
        self.commit(ticket)

        logger.info(f"Ticket {ticket.ticket_code}: {note}")
        return ticket

    def update_ticket_details(self, ticket_id: int, patch: Dict[str, Any], actor_id: int) -> Ticket:
        """
        Edit title, description or priority. Writes one log per changed field,
        or a single "Ticket updated" entry when the values are unchanged.

        Raises:
            NoValidFields: nothing editable in the patch.
        """
        ticket = self.get_ticket(ticket_id)
        changes = pick_fields(patch, TICKET_EDITABLE_FIELDS)

        if "title" in changes:
            changes["title"] = (changes["title"] or "").strip()
            if not changes["title"]:
                raise ValidationError("Title is required")
        if "priority" in changes:
            changes["priority"] = _parse_priority(changes["priority"]).value

        notes = []
        with self.rollback_on_error():
            if "title" in changes and changes["title"] != ticket.title:
                notes.append(f'Title updated from "{ticket.title}" to "{changes["title"]}"')
                ticket.title = changes["title"]
            if "description" in changes and changes["description"] != ticket.description:
                notes.append("Description updated")
                ticket.description = changes["description"]
            if "priority" in changes and changes["priority"] != ticket.priority:
                notes.append(f"Priority changed from {ticket.priority} to {changes['priority']}")
                ticket.priority = changes["priority"]

            ticket.updated_at = datetime.utcnow()
            self.session.add(ticket)
            for note in notes or ["Ticket updated"]:
                self._add_log(ticket, actor_id, note)
        self.commit(ticket)
        return ticket

    def add_attachment(self, ticket_id: int, images: Optional[Iterable[str]], actor_id: int) -> Ticket:
        urls = [url.strip() for url in (images or []) if url and url.strip()]
        if not urls:
            raise ValidationError("Attachment images are required")
        ticket = self.get_ticket(ticket_id)

        with self.rollback_on_error():
            for url in urls:
                self.session.add(
                    TicketAttachment(ticket_id=ticket.id, url=url, uploaded_by_id=actor_id)
                )
            ticket.updated_at = datetime.utcnow()
            self.session.add(ticket)
            self._add_log(ticket, actor_id, f"Added {len(urls)} attachment(s)")
        self.commit(ticket)
        return ticket
