# routers/packages.py
"""
Package catalogue. Listing is public (used by the candidate form);
changes are super_admin only.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_capability
from permissions import Capability, Principal
from schemas.package import PackageCreate, PackageResponse, PackageUpdate
from services.package_service import PackageService

router = APIRouter(prefix="/api/packages", tags=["packages"])


@router.get("", response_model=List[PackageResponse], summary="List packages")
def list_packages(db: Session = Depends(get_session)):
     return PackageService.list_packages(db)


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED, summary="Create package")
def create_package(
     body: PackageCreate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_PACKAGES)),
):
     return PackageService.create_package(db, body)


@router.put("/{package_id}", response_model=PackageResponse, summary="Update package")
def update_package(
     package_id: int,
     body: PackageUpdate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_PACKAGES)),
):
     return PackageService.update_package(db, package_id, body)


@router.delete("/{package_id}", summary="Soft delete package")
def delete_package(
     package_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.MANAGE_PACKAGES)),
):
     PackageService.delete_package(db, package_id)
     return {"message": "Package deleted successfully"}
