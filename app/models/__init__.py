from .links import RolePermission, UserRole
from .user import User
from .role import Permission, Role
from .package import Package
from .customer import Customer
from .ticket import Ticket, TicketAttachment, TicketLog
