"""Role router - FastAPI endpoints for company roles"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, get_current_account
from ...database import get_db
from .schemas import CompanyRolesRequest, RoleCreate, RoleUpdate
from .service import RoleService, serialize_role

router = APIRouter(prefix="/role", tags=["Roles"])


def get_role_service(db: Session = Depends(get_db)) -> RoleService:
    """Dependency injection for RoleService"""
    return RoleService(db)


@router.post("/company")
async def get_company_roles(
    data: CompanyRolesRequest,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    """List a company's roles with usage counts"""
    return service.list_roles(data.companyId, account)


@router.post("/defaults")
async def create_default_roles(
    data: CompanyRolesRequest,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    return service.create_default_roles(data.companyId, account)


@router.post("")
async def create_role(
    data: RoleCreate,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    return service.create_role(data, account)


@router.get("/{role_id}")
async def get_role(
    role_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    role = service.get_role(role_id, account)
    return {"success": True, "data": serialize_role(role)}


@router.get("/{role_id}/usage")
async def get_role_usage(
    role_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    return service.get_usage(role_id, account)


@router.put("/{role_id}")
async def update_role(
    role_id: str,
    data: RoleUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    return service.update_role(role_id, data, account)


@router.delete("/{role_id}")
async def delete_role(
    role_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: RoleService = Depends(get_role_service),
):
    return service.delete_role(role_id, account)
