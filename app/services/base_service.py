# app/services/base_service.py
"""
BaseCRUDService: Generic service class for standard CRUD operations.
Reduces code duplication across domain-specific services.
"""
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterable, List, Type, TypeVar

from sqlmodel import Session, select

from app.core.exceptions import NoValidFields, NotFound

# Generic type for SQLModel models
ModelType = TypeVar("ModelType")


def generate_code(prefix: str) -> str:
    """Human readable reference such as "TKT-1A2B3C4D"."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def pick_fields(data: Dict[str, Any], allowed: Iterable[str]) -> Dict[str, Any]:
    """
    Keep only allow-listed keys.

    Raises:
        NoValidFields: if nothing is left to apply.
    """
    allowed = set(allowed)
    picked = {k: v for k, v in data.items() if k in allowed}
    if not picked:
        raise NoValidFields("No valid fields to update provided.")
    return picked


class BaseCRUDService(Generic[ModelType]):
    """
    Base class providing generic CRUD (Create, Read, Update, Delete) operations.

    Usage:
        class MyService(BaseCRUDService[MyModel]):
            def __init__(self, session: Session):
                super().__init__(session, MyModel)
    """

    def __init__(self, session: Session, model: Type[ModelType]):
        """
        Initialize the service with a database session and model class.

        Args:
            session: SQLModel database session.
            model: The SQLModel class this service manages.
        """
        self.session = session
        self.model = model

    def get_all(self) -> List[ModelType]:
        """Retrieve all records of the model."""
        statement = select(self.model)
        return list(self.session.exec(statement).all())

    def get_by_id(self, id: int) -> ModelType:
        """
        Retrieve a single record by its primary key.

        Raises:
            NotFound: if no record has this id.
        """
        record = self.session.get(self.model, id)
        if not record:
            raise NotFound(f"{self.model.__name__} not found")
        return record

    @contextmanager
    def rollback_on_error(self):
        """Discard every pending change made inside the block if it raises."""
        try:
            yield
        except Exception:
            self.session.rollback()
            raise

    def commit(self, *records: ModelType) -> None:
        """
        Commit the current unit of work, rolling back on any failure,
        then refresh the given records.
        """
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        for record in records:
            self.session.refresh(record)

    def update_fields(self, record: ModelType, data: Dict[str, Any]) -> ModelType:
        for key, value in data.items():
            setattr(record, key, value)
        self.session.add(record)
        self.commit(record)
        return record

    def delete(self, id: int) -> None:
        """
        Delete a record by its primary key.

        Raises:
            NotFound: if no record has this id.
        """
        record = self.get_by_id(id)
        self.session.delete(record)
        self.commit()
