import re

from sqlmodel import Session, select

from app.core.bootstrap import seed_defaults
from app.core.config import settings
from app.core.security import verify_password
from app.models.customer import Customer
from app.models.package import Package
from app.models.ticket import Ticket
from app.models.user import User
from app.services.permission_service import PermissionService
from app.services.role_service import RoleService


def role_permission_keys(session, name):
    role = RoleService(session).get_role_by_name(name)
    session.refresh(role)
    return sorted(p.key for p in role.permissions)


# --- Re-seeding on restart ---


def test_reseed_keeps_revoked_role_permission(session):
    roles = RoleService(session)
    noc = roles.get_role_by_name("AGENT_NOC")
    update = PermissionService(session).get_by_key("tickets.update")
    roles.remove_permission_from_role(noc.id, update.id)

    seed_defaults(session)

    assert role_permission_keys(session, "AGENT_NOC") == ["tickets.read"]


def test_reseed_keeps_replaced_permission_set(session):
    roles = RoleService(session)
    permissions = PermissionService(session)
    cs = roles.get_role_by_name("CUSTOMER_SERVICE")
    roles.update_role(cs.id, {"permissions": [permissions.get_by_key("tickets.read").id]})

    seed_defaults(session)

    assert role_permission_keys(session, "CUSTOMER_SERVICE") == ["tickets.read"]


def test_reseed_keeps_edited_permission_label(session):
    service = PermissionService(session)
    permission = service.get_by_key("tickets.read")
    service.update_permission(permission.id, {"label": "View tickets"})

    seed_defaults(session)

    session.refresh(permission)
    assert permission.label == "View tickets"


def test_reseed_recreates_missing_system_role(session):
    roles = RoleService(session)
    noc = roles.get_role_by_name("AGENT_NOC")
    session.delete(noc)
    session.commit()

    seed_defaults(session)

    assert role_permission_keys(session, "AGENT_NOC") == ["tickets.read", "tickets.update"]


# --- Admin account ---


def test_production_skips_admin_with_default_password(engine, monkeypatch):
    monkeypatch.setattr(settings, "app_env", "production")

    with Session(engine) as session:
        assert seed_defaults(session) is None
        assert session.exec(select(User)).all() == []
        assert RoleService(session).get_role_by_name("ADMIN") is not None


def test_production_creates_admin_with_configured_password(engine, monkeypatch):
    monkeypatch.setattr(settings, "app_env", "production")
    monkeypatch.setattr(settings, "admin_password", "Str0ng-Admin-Pass")

    with Session(engine) as session:
        admin = seed_defaults(session)
        assert admin.username == settings.admin_username
        assert admin.role_names == ["ADMIN"]
        assert verify_password("Str0ng-Admin-Pass", admin.hashed_password)


# --- Samples ---


def test_samples_use_generated_code_shape_and_reseed_cleanly(session):
    seed_defaults(session, with_samples=True)
    seed_defaults(session, with_samples=True)

    tickets = session.exec(select(Ticket)).all()
    assert len(tickets) == 1
    assert re.fullmatch(r"TKT-[A-Z0-9]{8}", tickets[0].ticket_code)
    assert [log.note for log in tickets[0].logs] == [f"Ticket {tickets[0].ticket_code} created"]

    customers = session.exec(select(Customer)).all()
    assert [c.full_name for c in customers] == ["John Doe"]
    assert re.fullmatch(r"CUST-[A-Z0-9]{8}", customers[0].customer_code)

    packages = session.exec(select(Package)).all()
    assert len(packages) == 2
    assert all(re.fullmatch(r"PKG-[A-Z0-9]{8}", p.code) for p in packages)
