# app/api/auth/main.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ...core.authorization import get_current_claims
from ...core.config import settings
from ...core.rate_limit import limiter
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...schemas.user import UserRead
from ...services.auth_service import AuthService
from .models import LoginData, LoginRequest, RegisterRequest

router = APIRouter(prefix="/auth")


def get_auth_service(session: Session = Depends(get_sync_session)) -> AuthService:
    return AuthService(session)


@router.post("/register", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def api_register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
):
    return ok(service.register(payload.model_dump()), "User Registration Successful")


@router.post("/login", response_model=ApiResponse[LoginData])
@limiter.limit(settings.login_rate_limit)
def api_login(
    request: Request,
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    token, user = service.login(payload.username, payload.password)
    return ok({"token": token, "user": user}, "Login successful")


@router.get("/me", response_model=ApiResponse[UserRead])
def api_me(
    claims: TokenClaims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
):
    return ok(service.me(claims.user_id), "User retrieved successfully")
