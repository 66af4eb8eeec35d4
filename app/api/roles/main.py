# app/api/roles/main.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.authorization import get_current_claims, require_permissions
from ...core.constants import PermissionKey
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...services.role_service import RoleService
from .models import Role, RoleCreate, RoleReplace, RoleUpdate

router = APIRouter()

require_manage = require_permissions(PermissionKey.ROLES_MANAGE)


def get_role_service(session: Session = Depends(get_sync_session)) -> RoleService:
    return RoleService(session)


@router.get("/roles", response_model=ApiResponse[list[Role]])
def api_get_roles(
    search: str | None = None,
    name: str | None = None,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.list_roles(search, name), "Roles retrieved successfully")


@router.get("/roles/{role_id}", response_model=ApiResponse[Role])
def api_get_role(
    role_id: int,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.get_role(role_id), "Role retrieved successfully")


@router.post("/roles", response_model=ApiResponse[Role], status_code=status.HTTP_201_CREATED)
def api_create_role(
    role: RoleCreate,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    created = service.create_role(role.model_dump())
    log_action(
        "CREATE", "role", created.name, actor=current_user, request=request,
        details={"permissions": role.permissions or []},
    )
    return ok(created, "Role created successfully")


@router.put("/roles/{role_id}", response_model=ApiResponse[Role])
def api_replace_role(
    role_id: int,
    role: RoleReplace,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    updated = service.replace_role(role_id, role.model_dump())
    log_action("UPDATE", "role", updated.name, actor=current_user, request=request)
    return ok(updated, "Role updated successfully")


@router.patch("/roles/{role_id}", response_model=ApiResponse[Role])
def api_update_role(
    role_id: int,
    role_update: RoleUpdate,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    updated = service.update_role(role_id, role_update.model_dump(exclude_unset=True))
    log_action("UPDATE", "role", updated.name, actor=current_user, request=request)
    return ok(updated, "Role updated successfully")


@router.delete("/roles/{role_id}", response_model=ApiResponse[None])
def api_delete_role(
    role_id: int,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    name = service.delete_role(role_id)
    log_action("DELETE", "role", name, actor=current_user, request=request)
    return ok(message="Role deleted successfully")
