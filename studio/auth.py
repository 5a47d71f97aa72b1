import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import ForbiddenError
from .security_utils import create_jwt_token, verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer()

ACCOUNT_COMPANY = "company"
ACCOUNT_MEMBER = "member"


@dataclass
class CurrentAccount:
    """Identity decoded from a bearer token"""

    account_id: str
    company_id: str
    account_type: str
    is_admin: bool = False

    @property
    def is_company(self) -> bool:
        return self.account_type == ACCOUNT_COMPANY

    @property
    def member_id(self) -> Optional[str]:
        return self.account_id if self.account_type == ACCOUNT_MEMBER else None

    def ensure_company(self, company_id: Optional[str]) -> None:
        """Reject access to another tenant's data"""
        if company_id and company_id != self.company_id:
            logger.warning(
                f"⚠️ Account {self.account_id} attempted access to company {company_id}"
            )
            raise ForbiddenError()

    def ensure_manager(self) -> None:
        """Company accounts and admin members may manage the company"""
        if not (self.is_company or self.is_admin):
            raise ForbiddenError("Only company administrators can perform this action")


def create_company_token(company_id: str) -> str:
    return create_jwt_token({"sub": company_id, "companyId": company_id, "type": ACCOUNT_COMPANY})


def create_member_token(member_id: str, company_id: str, is_admin: bool) -> str:
    return create_jwt_token(
        {"sub": member_id, "companyId": company_id, "type": ACCOUNT_MEMBER, "isAdmin": is_admin}
    )


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentAccount:
    """Decode the bearer token into the calling account"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = verify_jwt_token(credentials.credentials)
    if not payload or not payload.get("sub") or not payload.get("companyId"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    account_type = payload.get("type")
    if account_type not in (ACCOUNT_COMPANY, ACCOUNT_MEMBER):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return CurrentAccount(
        account_id=payload["sub"],
        company_id=payload["companyId"],
        account_type=account_type,
        is_admin=bool(payload.get("isAdmin", False)),
    )
