"""Package router - FastAPI endpoints for packages and company pricing"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, get_current_account
from ...database import get_db
from .schemas import CompanyPrice, PackageCreate, PackageUpdate
from .service import PackageService

router = APIRouter(prefix="/package", tags=["Packages"])


def get_package_service(db: Session = Depends(get_db)) -> PackageService:
    """Dependency injection for PackageService"""
    return PackageService(db)


@router.post("/add", status_code=201)
async def create_package(
    data: PackageCreate,
    account: CurrentAccount = Depends(get_current_account),
    service: PackageService = Depends(get_package_service),
):
    return service.create_package(data, account)


@router.get("/getAll")
async def get_all_packages(service: PackageService = Depends(get_package_service)):
    return service.list_packages()


@router.get("/company/{company_id}")
async def get_company_packages(company_id: str, service: PackageService = Depends(get_package_service)):
    """Public listing of a company's packages with its starting price"""
    return service.list_company_packages(company_id)


@router.post("/company/{company_id}/price")
async def set_company_price(
    company_id: str,
    data: CompanyPrice,
    account: CurrentAccount = Depends(get_current_account),
    service: PackageService = Depends(get_package_service),
):
    return service.set_company_price(company_id, data.price, account, "Company price set successfully")


@router.put("/company/{company_id}/price")
async def update_company_price(
    company_id: str,
    data: CompanyPrice,
    account: CurrentAccount = Depends(get_current_account),
    service: PackageService = Depends(get_package_service),
):
    return service.set_company_price(company_id, data.price, account, "Company price updated successfully")


@router.delete("/company/{company_id}/price")
async def remove_company_price(
    company_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: PackageService = Depends(get_package_service),
):
    return service.set_company_price(company_id, None, account, "Company price removed successfully")


@router.get("/{package_id}")
async def get_package(package_id: str, service: PackageService = Depends(get_package_service)):
    return service.get_package(package_id)


@router.put("/{package_id}")
async def update_package(
    package_id: str,
    data: PackageUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: PackageService = Depends(get_package_service),
):
    return service.update_package(package_id, data, account)


@router.delete("/{package_id}")
async def delete_package(
    package_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: PackageService = Depends(get_package_service),
):
    return service.delete_package(package_id, account)
