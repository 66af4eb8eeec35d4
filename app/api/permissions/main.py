# app/api/permissions/main.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.authorization import get_current_claims, require_permissions
from ...core.constants import PermissionKey
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...services.permission_service import PermissionService
from .models import Permission, PermissionCreate, PermissionUpdate

router = APIRouter()

require_manage = require_permissions(PermissionKey.PERMISSIONS_MANAGE)


def get_permission_service(session: Session = Depends(get_sync_session)) -> PermissionService:
    return PermissionService(session)


@router.get("/permissions", response_model=ApiResponse[list[Permission]])
def api_get_permissions(
    search: str | None = None,
    key: str | None = None,
    service: PermissionService = Depends(get_permission_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.list_permissions(search, key), "Permissions retrieved successfully")


@router.get("/permissions/{permission_id}", response_model=ApiResponse[Permission])
def api_get_permission(
    permission_id: int,
    service: PermissionService = Depends(get_permission_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.get_by_id(permission_id), "Permission retrieved successfully")


@router.post(
    "/permissions", response_model=ApiResponse[Permission], status_code=status.HTTP_201_CREATED
)
def api_create_permission(
    permission: PermissionCreate,
    request: Request,
    service: PermissionService = Depends(get_permission_service),
    current_user: TokenClaims = Depends(require_manage),
):
    created = service.create_permission(permission.model_dump())
    log_action("CREATE", "permission", created.key, actor=current_user, request=request)
    return ok(created, "Permission created successfully")


@router.put("/permissions/{permission_id}", response_model=ApiResponse[Permission])
def api_update_permission(
    permission_id: int,
    permission_update: PermissionUpdate,
    request: Request,
    service: PermissionService = Depends(get_permission_service),
    current_user: TokenClaims = Depends(require_manage),
):
    updated = service.update_permission(
        permission_id, permission_update.model_dump(exclude_unset=True)
    )
    log_action("UPDATE", "permission", updated.key, actor=current_user, request=request)
    return ok(updated, "Permission updated successfully")


@router.delete("/permissions/{permission_id}", response_model=ApiResponse[None])
def api_delete_permission(
    permission_id: int,
    request: Request,
    service: PermissionService = Depends(get_permission_service),
    current_user: TokenClaims = Depends(require_manage),
):
    key = service.delete_permission(permission_id)
    log_action("DELETE", "permission", key, actor=current_user, request=request)
    return ok(message="Permission deleted successfully")
