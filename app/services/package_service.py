# app/services/package_service.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from app.core.exceptions import Conflict, ValidationError
from app.models.customer import Customer
from app.models.package import Package

from .base_service import BaseCRUDService, generate_code, pick_fields

PACKAGE_UPDATABLE_FIELDS = ("name", "description", "price")


class PackageService(BaseCRUDService[Package]):
    def __init__(self, session: Session):
        super().__init__(session, Package)

    def list_packages(self, search: Optional[str] = None) -> List[Package]:
        """Packages newest first, optionally filtered by code, name or description."""
        statement = select(Package)
        if search:
            term = f"%{search}%"
            statement = statement.where(
                or_(
                    col(Package.code).ilike(term),
                    col(Package.name).ilike(term),
                    col(Package.description).ilike(term),
                )
            )
        statement = statement.order_by(col(Package.created_at).desc(), col(Package.id).desc())
        return list(self.session.exec(statement).all())

    def create_package(self, data: Dict[str, Any]) -> Package:
        if not data.get("name") or data.get("price") is None:
            raise ValidationError("Name and price are required")
        if data["price"] <= 0:
            raise ValidationError("Price must be greater than 0")

        package = Package(
            code=generate_code("PKG"),
            name=data["name"],
            description=data.get("description"),
            price=data["price"],
        )
        self.session.add(package)
        self.commit(package)
        return package

    def update_package(self, package_id: int, data: Dict[str, Any]) -> Package:
        package = self.get_by_id(package_id)
        changes = pick_fields(data, PACKAGE_UPDATABLE_FIELDS)

        if "price" in changes and (changes["price"] is None or changes["price"] <= 0):
            raise ValidationError("Price must be greater than 0")
        if "name" in changes and not changes["name"]:
            raise ValidationError("Package name is required")

        changes["updated_at"] = datetime.utcnow()
        return self.update_fields(package, changes)

    def delete_package(self, package_id: int) -> None:
        """Packages still subscribed by customers cannot be deleted."""
        package = self.get_by_id(package_id)
        in_use = self.session.exec(
            select(func.count(Customer.id)).where(Customer.package_id == package.id)
        ).one()
        if in_use:
            raise Conflict(
                f"Package {package.code} is still assigned to {in_use} customer(s)"
            )
        self.session.delete(package)
        self.commit()
