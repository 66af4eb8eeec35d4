# app/api/users/main.py
from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.authorization import require_permissions
from ...core.constants import PermissionKey
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...schemas.user import UserRead
from ...services.user_service import UserService
from .models import UserCreate, UserReplace, UserUpdate

router = APIRouter()

require_manage = require_permissions(PermissionKey.USERS_MANAGE)


def get_user_service(session: Session = Depends(get_sync_session)) -> UserService:
    return UserService(session)


@router.get("/users", response_model=ApiResponse[list[UserRead]])
def api_get_all_users(
    exclude_roles: str | None = Query(
        None, description="Comma separated role names to leave out, e.g. ADMIN,AGENT_NOC"
    ),
    service: UserService = Depends(get_user_service),
    current_user: TokenClaims = Depends(require_manage),
):
    excluded = [r.strip() for r in exclude_roles.split(",")] if exclude_roles else []
    return ok(service.list_users(excluded), "Users retrieved successfully")


@router.get("/users/{user_id}", response_model=ApiResponse[UserRead])
def api_get_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
    current_user: TokenClaims = Depends(require_manage),
):
    return ok(service.get_user(user_id), "User retrieved successfully")


@router.post("/users", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def api_create_user(
    user_data: UserCreate,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: TokenClaims = Depends(require_manage),
):
    user = service.create_user(user_data.model_dump())
    log_action(
        "CREATE", "user", user.username, actor=current_user, request=request,
        details={"role_id": user_data.role_id} if user_data.role_id else None,
    )
    return ok(user, "User created successfully")


@router.put("/users/{user_id}", response_model=ApiResponse[UserRead])
def api_replace_user(
    user_id: int,
    user_data: UserReplace,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: TokenClaims = Depends(require_manage),
):
    user = service.replace_user(user_id, user_data.model_dump(exclude_unset=True))
    if user_data.role_id:
        log_action("ASSIGN", "user_role", f"{user_id}:{user_data.role_id}", actor=current_user, request=request)
    return ok(user, "User updated successfully")


@router.patch("/users/{user_id}", response_model=ApiResponse[UserRead])
def api_update_user(
    user_id: int,
    user_data: UserUpdate,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: TokenClaims = Depends(require_manage),
):
    user = service.update_user(user_id, user_data.model_dump(exclude_unset=True))
    if user_data.role_id:
        log_action("ASSIGN", "user_role", f"{user_id}:{user_data.role_id}", actor=current_user, request=request)
    return ok(user, "User updated successfully")


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
def api_delete_user(
    user_id: int,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: TokenClaims = Depends(require_manage),
):
    username = service.delete_user(user_id, acting_user_id=current_user.user_id)
    log_action("DELETE", "user", username, actor=current_user, request=request)
    return ok(message="User deleted successfully")
