# app/api/roles/assignments.py
"""
Links between roles and users, and between roles and permissions.
Changes here only reach a user's token on their next login.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.authorization import get_current_claims, require_permissions
from ...core.constants import PermissionKey
from ...core.security import TokenClaims
from ...schemas.response import ApiResponse, ok
from ...schemas.user import UserRead
from ...services.role_service import RoleService
from ..permissions.models import Permission
from .main import get_role_service
from .models import Role, RoleWithPermissions

router = APIRouter(prefix="/role-assignments")

require_manage = require_permissions(PermissionKey.ROLES_MANAGE)


@router.post(
    "/{role_id}/users/{user_id}",
    response_model=ApiResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
)
def api_assign_role_to_user(
    role_id: int,
    user_id: int,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    user = service.assign_role_to_user(role_id, user_id)
    log_action(
        "ASSIGN", "user_role", f"{user_id}:{role_id}", actor=current_user, request=request
    )
    return ok(user, "Role assigned to user successfully")


@router.delete("/{role_id}/users/{user_id}", response_model=ApiResponse[None])
def api_remove_role_from_user(
    role_id: int,
    user_id: int,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    service.remove_role_from_user(role_id, user_id)
    log_action(
        "UNASSIGN", "user_role", f"{user_id}:{role_id}", actor=current_user, request=request
    )
    return ok(message="Role removed from user successfully")


@router.post(
    "/{role_id}/permissions/{permission_id}",
    response_model=ApiResponse[Role],
    status_code=status.HTTP_201_CREATED,
)
def api_add_permission_to_role(
    role_id: int,
    permission_id: int,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    role = service.add_permission_to_role(role_id, permission_id)
    log_action(
        "ASSIGN", "role_permission", f"{role_id}:{permission_id}",
        actor=current_user, request=request,
    )
    return ok(role, "Permission assigned to role successfully")


@router.delete("/{role_id}/permissions/{permission_id}", response_model=ApiResponse[None])
def api_remove_permission_from_role(
    role_id: int,
    permission_id: int,
    request: Request,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(require_manage),
):
    service.remove_permission_from_role(role_id, permission_id)
    log_action(
        "UNASSIGN", "role_permission", f"{role_id}:{permission_id}",
        actor=current_user, request=request,
    )
    return ok(message="Permission removed from role successfully")


@router.get("/user/{user_id}", response_model=ApiResponse[list[RoleWithPermissions]])
def api_get_user_roles(
    user_id: int,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.get_user_roles(user_id), "User roles retrieved successfully")


@router.get("/{role_id}/permissions", response_model=ApiResponse[list[Permission]])
def api_get_role_permissions(
    role_id: int,
    service: RoleService = Depends(get_role_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.get_role_permissions(role_id), "Role permissions retrieved successfully")
