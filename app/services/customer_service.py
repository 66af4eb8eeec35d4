# app/services/customer_service.py
"""
Customer service layer using SQLModel ORM.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from app.core.exceptions import Conflict, NotFound, ValidationError
from app.models.customer import Customer
from app.models.package import Package
from app.models.ticket import Ticket

from .base_service import BaseCRUDService, generate_code, pick_fields

logger = logging.getLogger(__name__)

CUSTOMER_UPDATABLE_FIELDS = ("full_name", "email", "phone", "address", "package_id")


class CustomerService(BaseCRUDService[Customer]):
    """
    Service layer for Customer operations.
    """

    def __init__(self, session: Session):
        super().__init__(session, Customer)

    def list_customers(self, search: Optional[str] = None) -> List[Customer]:
        """Customers newest first, optionally filtered by code, name, email or phone."""
        statement = select(Customer)
        if search:
            term = f"%{search}%"
            statement = statement.where(
                or_(
                    col(Customer.customer_code).ilike(term),
                    col(Customer.full_name).ilike(term),
                    col(Customer.email).ilike(term),
                    col(Customer.phone).ilike(term),
                )
            )
        statement = statement.order_by(col(Customer.created_at).desc(), col(Customer.id).desc())
        return list(self.session.exec(statement).all())

    def _require_package(self, package_id: int) -> Package:
        package = self.session.get(Package, package_id)
        if not package:
            raise NotFound("Package not found")
        return package

    def create_customer(self, data: Dict[str, Any]) -> Customer:
        if not data.get("full_name") or not data.get("package_id"):
            raise ValidationError("Full name and package ID are required")
        self._require_package(data["package_id"])

        customer = Customer(
            customer_code=generate_code("CUST"),
            full_name=data["full_name"],
            email=data.get("email"),
            phone=data.get("phone"),
            address=data.get("address"),
            package_id=data["package_id"],
        )
        self.session.add(customer)
        self.commit(customer)
        logger.info(f"Customer {customer.customer_code} created")
        return customer

    def update_customer(self, customer_id: int, data: Dict[str, Any]) -> Customer:
        customer = self.get_by_id(customer_id)
        changes = pick_fields(data, CUSTOMER_UPDATABLE_FIELDS)

        if "full_name" in changes and not changes["full_name"]:
            raise ValidationError("Full name is required")
        if "package_id" in changes:
            if not changes["package_id"]:
                raise ValidationError("Package ID is required")
            self._require_package(changes["package_id"])

        changes["updated_at"] = datetime.utcnow()
        return self.update_fields(customer, changes)

    def delete_customer(self, customer_id: int) -> None:
        """Customers that still own tickets cannot be deleted."""
        customer = self.get_by_id(customer_id)
        ticket_count = self.session.exec(
            select(func.count(Ticket.id)).where(Ticket.customer_id == customer.id)
        ).one()
        if ticket_count:
            raise Conflict(
                f"Customer {customer.customer_code} has {ticket_count} ticket(s) and cannot be deleted"
            )
        self.session.delete(customer)
        self.commit()
