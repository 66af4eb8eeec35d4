# app/api/customers/main.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.authorization import require_permissions
from ...core.constants import PermissionKey
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...services.customer_service import CustomerService
from .models import Customer, CustomerCreate, CustomerUpdate

router = APIRouter()

require_read = require_permissions(PermissionKey.CUSTOMERS_READ)
require_write = require_permissions(PermissionKey.CUSTOMERS_WRITE)
require_delete = require_permissions(PermissionKey.CUSTOMERS_DELETE)


def get_customer_service(session: Session = Depends(get_sync_session)) -> CustomerService:
    return CustomerService(session)


@router.get("/customers", response_model=ApiResponse[list[Customer]])
def api_get_customers(
    search: str | None = None,
    service: CustomerService = Depends(get_customer_service),
    current_user: TokenClaims = Depends(require_read),
):
    return ok(service.list_customers(search), "Customers retrieved successfully")


@router.get("/customers/{customer_id}", response_model=ApiResponse[Customer])
def api_get_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
    current_user: TokenClaims = Depends(require_read),
):
    return ok(service.get_by_id(customer_id), "Customer retrieved successfully")


@router.post("/customers", response_model=ApiResponse[Customer], status_code=status.HTTP_201_CREATED)
def api_create_customer(
    customer: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
    current_user: TokenClaims = Depends(require_write),
):
    return ok(service.create_customer(customer.model_dump()), "Customer created successfully")


@router.patch("/customers/{customer_id}", response_model=ApiResponse[Customer])
def api_update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
    current_user: TokenClaims = Depends(require_write),
):
    update_fields = customer_update.model_dump(exclude_unset=True)
    return ok(service.update_customer(customer_id, update_fields), "Customer updated successfully")


@router.delete("/customers/{customer_id}", response_model=ApiResponse[None])
def api_delete_customer(
    customer_id: int,
    request: Request,
    service: CustomerService = Depends(get_customer_service),
    current_user: TokenClaims = Depends(require_delete),
):
    service.delete_customer(customer_id)
    log_action("DELETE", "customer", str(customer_id), actor=current_user, request=request)
    return ok(message="Customer deleted successfully")
