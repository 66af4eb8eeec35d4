import re
from datetime import date, datetime, timedelta

import pytest
from sqlmodel import select

from app.core.constants import TicketPriority, TicketStatus
from app.core.exceptions import (
    BusinessRuleViolation,
    InvalidTransition,
    NoValidFields,
    NotFound,
    TicketLimitExceeded,
    ValidationError,
)
from app.models.ticket import Ticket, TicketLog
from app.services.customer_service import CustomerService
from app.services.ticket_service import TicketService, check_transition


@pytest.fixture(name="service")
def service_fixture(session):
    return TicketService(session)


def new_ticket(service, customer, actor, **extra):
    data = {"customer_id": customer.id, "title": "No internet"}
    data.update(extra)
    return service.create_ticket(data, actor.id)


def test_create_ticket_defaults_and_creation_log(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user, description="Router LOS light is red")

    assert re.fullmatch(r"TKT-[A-Z0-9]{8}", ticket.ticket_code)
    assert ticket.status == TicketStatus.OPEN.value
    assert ticket.priority == TicketPriority.MEDIUM.value
    assert ticket.created_by_id == cs_user.id
    assert ticket.assigned_to_id is None

    assert len(ticket.logs) == 1
    log = ticket.logs[0]
    assert log.note == f"Ticket {ticket.ticket_code} created"
    assert log.from_status is None
    assert log.to_status == TicketStatus.OPEN.value
    assert log.actor_id == cs_user.id


def test_create_ticket_with_assignee_and_priority_writes_extra_logs(
    service, customer, cs_user, noc_user
):
    ticket = new_ticket(
        service, customer, cs_user, assigned_to_id=noc_user.id, priority=TicketPriority.HIGH
    )

    assert ticket.priority == "HIGH"
    assert ticket.assigned_to_id == noc_user.id
    notes = {log.note for log in ticket.logs}
    assert notes == {
        f"Ticket {ticket.ticket_code} created",
        "Initial assignment set",
        "Initial priority set to HIGH",
    }


def test_create_ticket_requires_customer_and_title(service, customer, cs_user):
    with pytest.raises(ValidationError):
        service.create_ticket({"customer_id": customer.id, "title": "  "}, cs_user.id)
    with pytest.raises(ValidationError):
        service.create_ticket({"title": "No internet"}, cs_user.id)


def test_create_ticket_unknown_customer_or_assignee(service, customer, cs_user):
    with pytest.raises(NotFound, match="Customer not found"):
        service.create_ticket({"customer_id": 9999, "title": "x"}, cs_user.id)
    with pytest.raises(NotFound, match="Assigned user not found"):
        new_ticket(service, customer, cs_user, assigned_to_id=9999)


def test_create_ticket_rejects_bad_priority(service, customer, cs_user):
    with pytest.raises(ValidationError):
        new_ticket(service, customer, cs_user, priority="URGENT")


def test_active_ticket_cap(service, session, customer, cs_user):
    for _ in range(3):
        new_ticket(service, customer, cs_user)
    assert service.count_active_tickets(customer.id) == 3

    with pytest.raises(TicketLimitExceeded) as exc:
        new_ticket(service, customer, cs_user)
    assert isinstance(exc.value, BusinessRuleViolation)
    assert exc.value.status_code == 400

    # The rejected attempt left nothing behind.
    tickets = session.exec(select(Ticket).where(Ticket.customer_id == customer.id)).all()
    assert len(tickets) == 3


def test_cap_counts_only_open_and_in_progress(service, customer, cs_user):
    first = new_ticket(service, customer, cs_user)
    second = new_ticket(service, customer, cs_user)
    new_ticket(service, customer, cs_user)

    service.update_status(first.id, TicketStatus.IN_PROGRESS, cs_user.id, "Working on it")
    assert service.count_active_tickets(customer.id) == 3

    service.update_status(second.id, TicketStatus.RESOLVED, cs_user.id, "Fixed")
    assert service.count_active_tickets(customer.id) == 2
    new_ticket(service, customer, cs_user)
    assert service.count_active_tickets(customer.id) == 3


def test_cap_is_per_customer(service, session, package, customer, cs_user):
    other = CustomerService(session).create_customer(
        {"full_name": "Jane Roe", "package_id": package.id}
    )
    for _ in range(3):
        new_ticket(service, customer, cs_user)
    ticket = new_ticket(service, other, cs_user)
    assert ticket.customer_id == other.id


def test_update_status_records_transition(service, customer, cs_user, noc_user):
    ticket = new_ticket(service, customer, cs_user)
    updated = service.update_status(ticket.id, "IN_PROGRESS", noc_user.id, "  Checking line  ")

    assert updated.status == "IN_PROGRESS"
    latest = updated.logs[0]
    assert latest.from_status == "OPEN"
    assert latest.to_status == "IN_PROGRESS"
    assert latest.note == "Checking line"
    assert latest.actor_id == noc_user.id


def test_update_status_requires_note(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    with pytest.raises(ValidationError, match="Note is required"):
        service.update_status(ticket.id, TicketStatus.RESOLVED, cs_user.id, "   ")


def test_update_status_rejects_unknown_status(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    with pytest.raises(ValidationError):
        service.update_status(ticket.id, "ESCALATED", cs_user.id, "note")


def test_update_status_unknown_ticket(service, cs_user):
    with pytest.raises(NotFound, match="Ticket not found"):
        service.update_status(9999, TicketStatus.RESOLVED, cs_user.id, "note")


@pytest.mark.parametrize("current", [TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.CLOSED])
def test_close_requires_resolved(current):
    with pytest.raises(InvalidTransition) as exc:
        check_transition(current, TicketStatus.CLOSED)
    assert exc.value.message == "Ticket must be RESOLVED before it can be CLOSED"


def test_close_from_open_leaves_ticket_untouched(service, session, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    with pytest.raises(InvalidTransition):
        service.update_status(ticket.id, TicketStatus.CLOSED, cs_user.id, "Closing")

    session.refresh(ticket)
    assert ticket.status == "OPEN"
    logs = session.exec(select(TicketLog).where(TicketLog.ticket_id == ticket.id)).all()
    assert len(logs) == 1


def _failing_log_write(*args, **kwargs):
    raise RuntimeError("log write failed")


def test_failed_creation_log_leaves_no_ticket(service, session, customer, cs_user, monkeypatch):
    monkeypatch.setattr(TicketService, "_add_log", _failing_log_write)

    with pytest.raises(RuntimeError, match="log write failed"):
        new_ticket(service, customer, cs_user)

    assert session.exec(select(Ticket)).all() == []
    assert session.exec(select(TicketLog)).all() == []
    assert service.count_active_tickets(customer.id) == 0


def test_failed_status_log_keeps_previous_status(service, session, customer, cs_user, monkeypatch):
    ticket = new_ticket(service, customer, cs_user)
    monkeypatch.setattr(TicketService, "_add_log", _failing_log_write)

    with pytest.raises(RuntimeError, match="log write failed"):
        service.update_status(ticket.id, TicketStatus.IN_PROGRESS, cs_user.id, "Working on it")

    assert session.get(Ticket, ticket.id).status == "OPEN"
    logs = session.exec(select(TicketLog).where(TicketLog.ticket_id == ticket.id)).all()
    assert len(logs) == 1


def test_failed_assignment_log_keeps_previous_assignee(
    service, session, customer, cs_user, noc_user, monkeypatch
):
    ticket = new_ticket(service, customer, cs_user)
    monkeypatch.setattr(TicketService, "_add_log", _failing_log_write)

    with pytest.raises(RuntimeError):
        service.assign_ticket(ticket.id, noc_user.id, cs_user.id)

    assert session.get(Ticket, ticket.id).assigned_to_id is None


def test_resolve_close_and_reopen(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    service.update_status(ticket.id, TicketStatus.RESOLVED, cs_user.id, "Fixed")
    closed = service.update_status(ticket.id, TicketStatus.CLOSED, cs_user.id, "Confirmed")
    assert closed.status == "CLOSED"

    reopened = service.update_status(ticket.id, TicketStatus.OPEN, cs_user.id, "Problem is back")
    assert reopened.status == "OPEN"
    assert reopened.logs[0].from_status == "CLOSED"
    assert reopened.logs[0].to_status == "OPEN"


def test_logs_are_newest_first(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    service.update_status(ticket.id, TicketStatus.IN_PROGRESS, cs_user.id, "first")
    updated = service.update_status(ticket.id, TicketStatus.RESOLVED, cs_user.id, "second")

    notes = [log.note for log in updated.logs]
    assert notes == ["second", "first", f"Ticket {ticket.ticket_code} created"]


def test_assign_and_reassign_notes_use_display_names(
    service, make_user, customer, cs_user, noc_user
):
    bare = make_user("jdoe", "AGENT_NOC")  # no full name, falls back to username
    ticket = new_ticket(service, customer, cs_user)

    assigned = service.assign_ticket(ticket.id, noc_user.id, cs_user.id)
    assert assigned.assigned_to_id == noc_user.id
    assert assigned.logs[0].note == "Ticket assigned to NOC Engineer"

    reassigned = service.assign_ticket(ticket.id, bare.id, cs_user.id)
    assert reassigned.assigned_to_id == bare.id
    assert reassigned.logs[0].note == "Ticket reassigned from NOC Engineer to jdoe"


def test_assign_requires_existing_user(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    with pytest.raises(ValidationError):
        service.assign_ticket(ticket.id, None, cs_user.id)
    with pytest.raises(NotFound):
        service.assign_ticket(ticket.id, 9999, cs_user.id)


def test_update_details_logs_each_change(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    updated = service.update_ticket_details(
        ticket.id,
        {"title": "Slow internet", "description": "Speed below 1 Mbps", "priority": "HIGH"},
        cs_user.id,
    )

    assert updated.title == "Slow internet"
    assert updated.priority == "HIGH"
    notes = {log.note for log in updated.logs}
    assert 'Title updated from "No internet" to "Slow internet"' in notes
    assert "Description updated" in notes
    assert "Priority changed from MEDIUM to HIGH" in notes


def test_update_details_without_changes_logs_generic_entry(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    updated = service.update_ticket_details(ticket.id, {"title": "No internet"}, cs_user.id)
    assert updated.logs[0].note == "Ticket updated"


def test_update_details_ignores_other_fields(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    with pytest.raises(NoValidFields):
        service.update_ticket_details(ticket.id, {"status": "CLOSED", "customer_id": 1}, cs_user.id)
    with pytest.raises(NoValidFields):
        service.update_ticket_details(ticket.id, {}, cs_user.id)


def test_update_details_validates_values(service, customer, cs_user):
    ticket = new_ticket(service, customer, cs_user)
    with pytest.raises(ValidationError):
        service.update_ticket_details(ticket.id, {"title": ""}, cs_user.id)
    with pytest.raises(ValidationError):
        service.update_ticket_details(ticket.id, {"priority": "CRITICAL"}, cs_user.id)


def test_add_attachment(service, customer, cs_user, noc_user):
    ticket = new_ticket(service, customer, cs_user)
    updated = service.add_attachment(
        ticket.id, ["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"], noc_user.id
    )
    assert sorted(a.url for a in updated.attachments) == [
        "https://cdn.example.com/a.png",
        "https://cdn.example.com/b.png",
    ]
    assert updated.logs[0].note == "Added 2 attachment(s)"

    with pytest.raises(ValidationError, match="Attachment images are required"):
        service.add_attachment(ticket.id, [], noc_user.id)


def test_list_tickets_filters(service, session, package, customer, cs_user, noc_user):
    other = CustomerService(session).create_customer(
        {"full_name": "Jane Roe", "package_id": package.id}
    )
    first = new_ticket(service, customer, cs_user, title="Fiber cut")
    second = new_ticket(service, other, cs_user, title="Billing question", priority="LOW")
    third = new_ticket(service, customer, cs_user, assigned_to_id=noc_user.id)
    service.update_status(third.id, TicketStatus.IN_PROGRESS, noc_user.id, "On site")

    assert [t.id for t in service.list_tickets()] == [third.id, second.id, first.id]
    assert [t.id for t in service.list_tickets(status="IN_PROGRESS")] == [third.id]
    assert [t.id for t in service.list_tickets(priority=TicketPriority.LOW)] == [second.id]
    assert [t.id for t in service.list_tickets(customer_id=other.id)] == [second.id]
    assert [t.id for t in service.list_tickets(assigned_to_id=noc_user.id)] == [third.id]
    assert [t.id for t in service.list_tickets(search="fiber")] == [first.id]
    assert [t.id for t in service.list_tickets(search="jane")] == [second.id]
    assert [t.id for t in service.list_tickets(search=customer.customer_code.lower())] == [
        third.id,
        first.id,
    ]


def test_list_tickets_by_date(service, session, customer, cs_user):
    old = new_ticket(service, customer, cs_user, title="Old")
    old.created_at = datetime(2024, 1, 15, 10, 30)
    session.add(old)
    session.commit()
    recent = new_ticket(service, customer, cs_user, title="Recent")

    assert [t.id for t in service.list_tickets(created_at=date(2024, 1, 15))] == [old.id]
    assert [
        t.id for t in service.list_tickets(start_date=date(2024, 1, 1), end_date=date(2024, 1, 15))
    ] == [old.id]
    today = recent.created_at.date()
    assert [
        t.id for t in service.list_tickets(start_date=today, end_date=today + timedelta(days=1))
    ] == [recent.id]
