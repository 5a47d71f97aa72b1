"""Company router - Registration, login and password reset endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import CompanyRegister, ForgotPasswordRequest, LoginRequest, ResetPasswordRequest, VerifyOtpRequest
from .service import CompanyService

router = APIRouter(prefix="/company", tags=["Companies"])
auth_router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    """Dependency injection for CompanyService"""
    return CompanyService(db)


@router.post("/register", status_code=201)
async def register_company(data: CompanyRegister, service: CompanyService = Depends(get_company_service)):
    return service.register(data)


@router.post("/login")
async def login_company(data: LoginRequest, service: CompanyService = Depends(get_company_service)):
    return service.login(data)


@auth_router.post("/forgot-password")
async def forgot_password(data: ForgotPasswordRequest, service: CompanyService = Depends(get_company_service)):
    """Send a password reset code to a company or member email"""
    return await service.forgot_password(data)


@auth_router.post("/verify-otp")
async def verify_otp(data: VerifyOtpRequest, service: CompanyService = Depends(get_company_service)):
    return service.verify_otp(data)


@auth_router.post("/reset-password")
async def reset_password(data: ResetPasswordRequest, service: CompanyService = Depends(get_company_service)):
    return service.reset_password(data)
