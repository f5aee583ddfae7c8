# services/package_service.py
import logging
from typing import List

from sqlalchemy.orm import Session

from models import Package
from services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class PackageService:
     """Service package catalogue. Names are unique among active packages."""

     @staticmethod
     def list_packages(db: Session) -> List[Package]:
          return (
               db.query(Package)
               .filter(Package.is_deleted.is_(False))
               .order_by(Package.amount, Package.id)
               .all()
          )

     @staticmethod
     def get_package(db: Session, package_id: int) -> Package:
          package = (
               db.query(Package)
               .filter(Package.id == package_id, Package.is_deleted.is_(False))
               .first()
          )
          if package is None:
               raise NotFoundError("Package not found")
          return package

     @staticmethod
     def create_package(db: Session, data) -> Package:
          """
          Create a package. A soft-deleted package with the same name is
          revived with the new amount instead of inserting a duplicate row.
          """
          name = data.name.strip()
          existing = db.query(Package).filter(Package.name == name).first()
          if existing is not None and not existing.is_deleted:
               raise ConflictError("Package name already exists")

          if existing is not None:
               existing.is_deleted = False
               existing.deleted_at = None
               existing.amount = data.amount
               existing.description = data.description
               package = existing
          else:
               package = Package(name=name, amount=data.amount, description=data.description)
               db.add(package)

          db.commit()
          db.refresh(package)
          logger.info("Package %s (%s) saved at %s", package.id, package.name, package.amount)
          return package

     @staticmethod
     def update_package(db: Session, package_id: int, data) -> Package:
          package = PackageService.get_package(db, package_id)
          name = data.name.strip()
          clash = (
               db.query(Package)
               .filter(Package.name == name, Package.id != package_id)
               .first()
          )
          if clash is not None:
               raise ConflictError("Package name already exists")

          package.name = name
          package.amount = data.amount
          package.description = data.description
          db.commit()
          db.refresh(package)
          return package

     @staticmethod
     def delete_package(db: Session, package_id: int) -> None:
          # Existing candidates keep their copied package_amount.
          package = PackageService.get_package(db, package_id)
          package.soft_delete()
          db.commit()
          logger.info("Package %s soft-deleted", package_id)
