"""
Centralized constants for the portal.
Removes "magic strings" and gives strong typing to common values.
"""

from enum import Enum, unique


@unique
class TicketStatus(str, Enum):
    """Lifecycle states of a ticket."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


@unique
class TicketPriority(str, Enum):
    """Ticket priorities."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Statuses that count against the per-customer ticket cap.
ACTIVE_TICKET_STATUSES = (TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
MAX_ACTIVE_TICKETS_PER_CUSTOMER = 3


@unique
class SystemRole(str, Enum):
    """Seeded roles that cannot be deleted or renamed."""

    ADMIN = "ADMIN"
    AGENT_NOC = "AGENT_NOC"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"


PROTECTED_ROLE_NAMES = frozenset(r.value for r in SystemRole)
DEFAULT_REGISTRATION_ROLE = SystemRole.CUSTOMER_SERVICE


@unique
class PermissionKey(str, Enum):
    """Permission keys checked by the API."""

    CUSTOMERS_READ = "customers.read"
    CUSTOMERS_WRITE = "customers.write"
    CUSTOMERS_DELETE = "customers.delete"
    TICKETS_READ = "tickets.read"
    TICKETS_CREATE = "tickets.create"
    TICKETS_UPDATE = "tickets.update"
    TICKETS_DELETE = "tickets.delete"
    ROLES_MANAGE = "roles.manage"
    PERMISSIONS_MANAGE = "permissions.manage"
    USERS_MANAGE = "users.manage"
    PACKAGES_MANAGE = "packages.manage"


# Labels used when seeding the permission table.
PERMISSION_LABELS = {
    PermissionKey.CUSTOMERS_READ: "Read customers",
    PermissionKey.CUSTOMERS_WRITE: "Create/Update customers",
    PermissionKey.CUSTOMERS_DELETE: "Delete customers",
    PermissionKey.TICKETS_READ: "Read tickets",
    PermissionKey.TICKETS_CREATE: "Create tickets",
    PermissionKey.TICKETS_UPDATE: "Update tickets",
    PermissionKey.TICKETS_DELETE: "Delete tickets",
    PermissionKey.ROLES_MANAGE: "Manage roles",
    PermissionKey.PERMISSIONS_MANAGE: "Manage permissions",
    PermissionKey.USERS_MANAGE: "Manage users",
    PermissionKey.PACKAGES_MANAGE: "Manage packages",
}

ROLE_LABELS = {
    SystemRole.ADMIN: "Administrator",
    SystemRole.AGENT_NOC: "Agent NOC",
    SystemRole.CUSTOMER_SERVICE: "Customer Service",
}

# ADMIN receives every permission.
DEFAULT_ROLE_PERMISSIONS = {
    SystemRole.ADMIN: list(PermissionKey),
    SystemRole.AGENT_NOC: [
        PermissionKey.TICKETS_READ,
        PermissionKey.TICKETS_UPDATE,
    ],
    SystemRole.CUSTOMER_SERVICE: [
        PermissionKey.CUSTOMERS_READ,
        PermissionKey.CUSTOMERS_WRITE,
        PermissionKey.TICKETS_CREATE,
        PermissionKey.TICKETS_READ,
    ],
}
