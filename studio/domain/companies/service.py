"""Company service - Registration, login and password reset"""

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import create_company_token
from ...config import OTP_EXPIRY_MINUTES
from ...email_service import send_password_reset_otp
from ...errors import ValidationFailed
from ...models import Company
from ...security_utils import generate_otp, hash_password, verify_password
from ..roles.repository import RoleRepository
from .repository import Account, CompanyRepository
from .schemas import CompanyRegister, ForgotPasswordRequest, LoginRequest, ResetPasswordRequest, VerifyOtpRequest

logger = logging.getLogger(__name__)


def serialize_company(company: Company) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "email": company.email,
        "country": company.country,
        "logo": company.logo,
        "price": float(company.price) if company.price is not None else None,
    }


class CompanyService:
    """Service layer for company accounts"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CompanyRepository()
        self.roles = RoleRepository()

    def register(self, data: CompanyRegister) -> dict:
        if self.repo.email_in_use(self.db, data.email):
            raise ValidationFailed("Email already in use")

        company = Company(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            country=data.country,
        )
        self.db.add(company)
        self.db.flush()
        self.roles.add_default_roles(self.db, company.id)
        self.db.commit()
        self.db.refresh(company)

        logger.info(f"✅ Company registered: {company.name} ({company.id})")
        return {
            "success": True,
            "message": "Company registered successfully",
            "data": {"token": create_company_token(company.id), "company": serialize_company(company)},
        }

    def login(self, data: LoginRequest) -> dict:
        company = self.repo.get_by_email(self.db, data.email)
        if not company or not verify_password(data.password, company.password_hash):
            logger.warning(f"⚠️ Failed company login for {data.email}")
            raise HTTPException(status_code=401, detail="Invalid email or password")

        return {
            "success": True,
            "message": "Login successful",
            "data": {"token": create_company_token(company.id), "company": serialize_company(company)},
        }

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    @staticmethod
    def _company_name(account: Account) -> str:
        if isinstance(account, Company):
            return account.name
        return account.company.name if account.company else "Studio"

    async def forgot_password(self, data: ForgotPasswordRequest) -> dict:
        """Email a one-time code. Unknown addresses get the same answer."""
        response = {"success": True, "message": "If the email exists, an OTP has been sent"}

        account = self.repo.get_account(self.db, data.email, data.userType)
        if not account:
            logger.info(f"ℹ️ Password reset requested for unknown {data.userType} email")
            return response

        otp = generate_otp()
        account.reset_otp = otp
        account.reset_otp_expires_at = datetime.utcnow() + timedelta(minutes=OTP_EXPIRY_MINUTES)
        self.db.commit()

        try:
            await send_password_reset_otp(account.email, otp, self._company_name(account))
        except Exception as e:
            logger.error(f"❌ Failed to send password reset OTP to {account.email}: {e}")

        return response

    def _check_otp(self, data: VerifyOtpRequest) -> Account:
        account = self.repo.get_account(self.db, data.email, data.userType)
        if not account or not account.reset_otp or account.reset_otp != data.otp.strip():
            raise ValidationFailed("Invalid OTP")
        if not account.reset_otp_expires_at or account.reset_otp_expires_at < datetime.utcnow():
            raise ValidationFailed("OTP has expired")
        return account

    def verify_otp(self, data: VerifyOtpRequest) -> dict:
        self._check_otp(data)
        return {"success": True, "message": "OTP verified successfully"}

    def reset_password(self, data: ResetPasswordRequest) -> dict:
        account = self._check_otp(data)
        if verify_password(data.newPassword, account.password_hash):
            raise ValidationFailed("New password must be different from current password")

        account.password_hash = hash_password(data.newPassword)
        account.reset_otp = None
        account.reset_otp_expires_at = None
        self.db.commit()

        logger.info(f"✅ Password reset for {data.userType} {account.id}")
        return {"success": True, "message": "Password reset successfully"}
