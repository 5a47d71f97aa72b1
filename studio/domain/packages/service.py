"""Package service - Business logic for company packages and starting prices"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentAccount
from ...errors import NotFoundError
from ...models import Package
from .repository import PackageRepository
from .schemas import PackageCreate, PackageUpdate

logger = logging.getLogger(__name__)


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_package(package: Package) -> dict:
    return {
        "id": package.id,
        "companyId": package.company_id,
        "name": package.name,
        "price": _money(package.price),
        "duration": package.duration,
        "isPopular": package.is_popular,
        "features": package.features or [],
        "addons": package.addons,
        "status": package.status,
        "createdAt": package.created_at.isoformat() if package.created_at else None,
        "updatedAt": package.updated_at.isoformat() if package.updated_at else None,
    }


class PackageService:
    """Service layer for package business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PackageRepository()

    def _get_package(self, package_id: str) -> Package:
        package = self.repo.get_by_id(self.db, package_id)
        if not package:
            raise NotFoundError("Package not found")
        return package

    def create_package(self, data: PackageCreate, account: CurrentAccount) -> dict:
        account.ensure_company(data.companyId)
        account.ensure_manager()
        if not self.repo.get_company(self.db, data.companyId):
            raise NotFoundError("Company not found")

        package = self.repo.create(
            self.db,
            company_id=data.companyId,
            name=data.name.strip(),
            price=Decimal(str(data.price)),
            duration=data.duration,
            status=data.status,
            is_popular=data.isPopular,
            features=data.features or [],
            addons=data.addons,
        )
        logger.info(f"✅ Package created: {package.name} ({package.id}) for company {data.companyId}")
        return {"success": True, "message": "Package created successfully", "package": serialize_package(package)}

    def list_packages(self) -> dict:
        packages = self.repo.get_all(self.db)
        return {
            "success": True,
            "message": "Packages retrieved successfully",
            "packages": [serialize_package(p) for p in packages],
        }

    def get_package(self, package_id: str) -> dict:
        package = self._get_package(package_id)
        return {"success": True, "message": "Package retrieved successfully", "package": serialize_package(package)}

    def update_package(self, package_id: str, data: PackageUpdate, account: CurrentAccount) -> dict:
        package = self._get_package(package_id)
        account.ensure_company(package.company_id)
        account.ensure_manager()

        fields = data.model_fields_set
        if "name" in fields and data.name:
            package.name = data.name.strip()
        if "price" in fields and data.price is not None:
            package.price = Decimal(str(data.price))
        if "duration" in fields and data.duration:
            package.duration = data.duration
        if "status" in fields and data.status:
            package.status = data.status
        if "isPopular" in fields and data.isPopular is not None:
            package.is_popular = data.isPopular
        if "features" in fields:
            package.features = data.features or []
        if "addons" in fields:
            package.addons = data.addons

        package = self.repo.save(self.db, package)
        return {"success": True, "message": "Package updated successfully", "package": serialize_package(package)}

    def delete_package(self, package_id: str, account: CurrentAccount) -> dict:
        package = self._get_package(package_id)
        account.ensure_company(package.company_id)
        account.ensure_manager()
        self.repo.delete(self.db, package)
        logger.info(f"🗑️ Package deleted: {package_id}")
        return {"success": True, "message": "Package deleted successfully", "packageId": package_id}

    def list_company_packages(self, company_id: str) -> dict:
        """Packages of one company together with its starting price"""
        packages = self.repo.get_by_company(self.db, company_id)
        company = self.repo.get_company(self.db, company_id)
        return {
            "success": True,
            "message": "Packages retrieved successfully",
            "packages": [serialize_package(p) for p in packages],
            "companyPrice": _money(company.price) if company else None,
        }

    def set_company_price(
        self, company_id: str, price: Optional[float], account: CurrentAccount, message: str
    ) -> dict:
        account.ensure_company(company_id)
        account.ensure_manager()
        company = self.repo.get_company(self.db, company_id)
        if not company:
            raise NotFoundError("Company not found")

        company.price = Decimal(str(price)) if price is not None else None
        company = self.repo.save(self.db, company)
        logger.info(f"💰 Company {company_id} price set to {company.price}")
        return {
            "success": True,
            "message": message,
            "company": {"id": company.id, "name": company.name, "price": _money(company.price)},
        }
