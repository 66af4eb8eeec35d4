# app/core/bootstrap.py
import logging
from typing import Dict, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.core.config import DEFAULT_ADMIN_PASSWORD, settings
from app.core.constants import (
    DEFAULT_ROLE_PERMISSIONS,
    PERMISSION_LABELS,
    ROLE_LABELS,
    SystemRole,
    TicketStatus,
)
from app.core.security import get_password_hash
from app.db.engine_sync import create_sync_db_and_tables, sync_engine
from app.models.customer import Customer
from app.models.package import Package
from app.models.role import Permission, Role
from app.models.ticket import Ticket, TicketLog
from app.models.user import User

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {
        "username": "cs_agent",
        "email": "cs@example.com",
        "password": "Cs123!",
        "full_name": "Customer Service Agent",
        "role": SystemRole.CUSTOMER_SERVICE,
    },
    {
        "username": "noc_agent",
        "email": "noc@example.com",
        "password": "Noc123!",
        "full_name": "NOC Engineer",
        "role": SystemRole.AGENT_NOC,
    },
]

# Fixed codes in the generated PREFIX-XXXXXXXX shape.
SAMPLE_CUSTOMER_CODE = "CUST-SAMPLE01"
SAMPLE_TICKET_CODE = "TKT-SAMPLE01"

SAMPLE_PACKAGES = [
    {"code": "PKG-BASIC001", "name": "Basic", "description": "Basic internet package", "price": 19.99},
    {"code": "PKG-PREMIUM1", "name": "Premium", "description": "Premium internet package", "price": 49.99},
]


def seed_permissions(session: Session) -> Dict[str, Permission]:
    """Create any missing permission key. Existing labels are left as edited."""
    permissions = {}
    for key, label in PERMISSION_LABELS.items():
        permission = session.exec(select(Permission).where(Permission.key == key.value)).first()
        if not permission:
            permission = Permission(key=key.value, label=label)
            session.add(permission)
            logger.info(f"[Bootstrap] Permission {key.value} created")
        permissions[key.value] = permission
    session.flush()
    return permissions


def seed_roles(session: Session, permissions: Dict[str, Permission]) -> Dict[str, Role]:
    """
    Create any missing system role with its default permissions. Roles that
    already exist keep whatever permission set an administrator gave them.
    """
    roles = {}
    for role_name, label in ROLE_LABELS.items():
        role = session.exec(select(Role).where(Role.name == role_name.value)).first()
        if not role:
            role = Role(name=role_name.value, label=label)
            role.permissions = [permissions[key.value] for key in DEFAULT_ROLE_PERMISSIONS[role_name]]
            session.add(role)
            logger.info(f"[Bootstrap] Role {role_name.value} created")
        roles[role_name.value] = role
    session.flush()
    return roles


def ensure_user(
    session: Session,
    username: str,
    email: str,
    password: str,
    role: Role,
    full_name: Optional[str] = None,
) -> User:
    """Create the user if missing and make sure it holds `role`. Existing passwords are kept."""
    user = session.exec(select(User).where(User.username == username)).first()
    if not user:
        user = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
        )
        logger.info(f"[Bootstrap] User {username} created")
    if role.name not in user.role_names:
        user.roles.append(role)
    session.add(user)
    session.flush()
    return user


def seed_samples(session: Session, roles: Dict[str, Role], admin: User) -> None:
    """Demo users, packages, one customer and one open ticket."""
    for data in SAMPLE_USERS:
        ensure_user(
            session,
            data["username"],
            data["email"],
            data["password"],
            roles[data["role"].value],
            data["full_name"],
        )

    packages = {}
    for data in SAMPLE_PACKAGES:
        package = session.exec(select(Package).where(Package.code == data["code"])).first()
        if not package:
            package = Package(**data)
            session.add(package)
        packages[data["code"]] = package
    session.flush()

    customer = session.exec(select(Customer).where(Customer.customer_code == SAMPLE_CUSTOMER_CODE)).first()
    if not customer:
        customer = Customer(
            customer_code=SAMPLE_CUSTOMER_CODE,
            full_name="John Doe",
            email="john@example.com",
            phone="08123456789",
            address="Jl. Example No 1",
            package_id=packages["PKG-PREMIUM1"].id,
        )
        session.add(customer)
        session.flush()

    if not session.exec(select(Ticket).where(Ticket.ticket_code == SAMPLE_TICKET_CODE)).first():
        ticket = Ticket(
            ticket_code=SAMPLE_TICKET_CODE,
            title="Sample ticket",
            description="Internet connection drops every evening",
            customer_id=customer.id,
            created_by_id=admin.id,
        )
        session.add(ticket)
        session.flush()
        session.add(
            TicketLog(
                ticket_id=ticket.id,
                actor_id=admin.id,
                note=f"Ticket {SAMPLE_TICKET_CODE} created",
                to_status=TicketStatus.OPEN.value,
            )
        )


def seed_admin(session: Session, role: Role) -> Optional[User]:
    """
    Make sure the configured admin account exists. In production a missing
    admin is not created with the built-in default password; set
    ADMIN_PASSWORD first.
    """
    existing = session.exec(select(User).where(User.username == settings.admin_username)).first()
    if not existing and settings.is_production and settings.admin_password == DEFAULT_ADMIN_PASSWORD:
        logger.warning(
            f"[Bootstrap] Admin {settings.admin_username} not created: "
            "ADMIN_PASSWORD is unset in production"
        )
        return None
    return ensure_user(
        session,
        settings.admin_username,
        settings.admin_email,
        settings.admin_password,
        role,
        "Administrator",
    )


def seed_defaults(session: Session, with_samples: bool = False) -> Optional[User]:
    """
    Idempotent seeding of permissions, system roles and the admin account,
    in a single transaction. Returns the admin user, or None when it was
    not created.
    """
    try:
        permissions = seed_permissions(session)
        roles = seed_roles(session, permissions)
        admin = seed_admin(session, roles[SystemRole.ADMIN.value])
        if with_samples and admin is not None:
            seed_samples(session, roles, admin)
        elif with_samples:
            logger.warning("[Bootstrap] Samples skipped: no admin account to own them")
        session.commit()
    except Exception:
        session.rollback()
        raise
    if admin is not None:
        session.refresh(admin)
    return admin


def bootstrap_system(with_samples: bool = False, engine: Engine = sync_engine) -> None:
    """Create the schema and seed default data."""
    try:
        logger.info("[Bootstrap] Initializing database schema...")
        create_sync_db_and_tables(engine)
        with Session(engine) as session:
            admin = seed_defaults(session, with_samples=with_samples)
        if admin is not None:
            logger.info(f"[Bootstrap] Ready. Admin account: {admin.username}")
        else:
            logger.info("[Bootstrap] Ready. No admin account")
    except Exception as e:
        logger.critical(f"[Bootstrap] Fatal error during initialization: {e}")
        raise
