# app/api/packages/main.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from ...core.audit import log_action
from ...core.authorization import get_current_claims, require_permissions
from ...core.constants import PermissionKey
from ...core.security import TokenClaims
from ...db.engine_sync import get_sync_session
from ...schemas.response import ApiResponse, ok
from ...services.package_service import PackageService
from .models import Package, PackageCreate, PackageUpdate

router = APIRouter()


def get_package_service(session: Session = Depends(get_sync_session)) -> PackageService:
    return PackageService(session)


@router.get("/packages", response_model=ApiResponse[list[Package]])
def api_get_packages(
    search: str | None = None,
    service: PackageService = Depends(get_package_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.list_packages(search), "Packages retrieved successfully")


@router.get("/packages/{package_id}", response_model=ApiResponse[Package])
def api_get_package(
    package_id: int,
    service: PackageService = Depends(get_package_service),
    current_user: TokenClaims = Depends(get_current_claims),
):
    return ok(service.get_by_id(package_id), "Package retrieved successfully")


@router.post("/packages", response_model=ApiResponse[Package], status_code=status.HTTP_201_CREATED)
def api_create_package(
    package: PackageCreate,
    service: PackageService = Depends(get_package_service),
    current_user: TokenClaims = Depends(require_permissions(PermissionKey.PACKAGES_MANAGE)),
):
    return ok(service.create_package(package.model_dump()), "Package created successfully")


@router.patch("/packages/{package_id}", response_model=ApiResponse[Package])
def api_update_package(
    package_id: int,
    package_update: PackageUpdate,
    service: PackageService = Depends(get_package_service),
    current_user: TokenClaims = Depends(require_permissions(PermissionKey.PACKAGES_MANAGE)),
):
    update_fields = package_update.model_dump(exclude_unset=True)
    return ok(service.update_package(package_id, update_fields), "Package updated successfully")


@router.delete("/packages/{package_id}", response_model=ApiResponse[None])
def api_delete_package(
    package_id: int,
    request: Request,
    service: PackageService = Depends(get_package_service),
    current_user: TokenClaims = Depends(require_permissions(PermissionKey.PACKAGES_MANAGE)),
):
    service.delete_package(package_id)
    log_action("DELETE", "package", str(package_id), actor=current_user, request=request)
    return ok(message="Package deleted successfully")
