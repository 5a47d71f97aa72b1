"""Role service - Business logic for company roles"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import CurrentAccount
from ...errors import NotFoundError, ValidationFailed
from ...models import Role
from .repository import RoleRepository
from .schemas import RoleCreate, RoleUpdate

logger = logging.getLogger(__name__)


def serialize_role(role: Role, counts: Optional[dict] = None) -> dict:
    data = {
        "id": role.id,
        "name": role.name,
        "description": role.description,
        "companyId": role.company_id,
        "createdAt": role.created_at.isoformat() if role.created_at else None,
    }
    if counts is not None:
        data.update(counts)
    return data


class RoleService:
    """Service layer for role business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RoleRepository()

    def get_role(self, role_id: str, account: CurrentAccount) -> Role:
        role = self.repo.get_role(self.db, role_id, account.company_id)
        if not role:
            raise NotFoundError("Role not found")
        return role

    def list_roles(self, company_id: str, account: CurrentAccount) -> dict:
        account.ensure_company(company_id)
        roles = self.repo.get_company_roles(self.db, company_id)
        return {
            "success": True,
            "message": "Roles retrieved successfully",
            "data": [serialize_role(r, self.repo.usage_counts(self.db, r.id, company_id)) for r in roles],
        }

    def get_usage(self, role_id: str, account: CurrentAccount) -> dict:
        role = self.get_role(role_id, account)
        counts = self.repo.usage_counts(self.db, role.id, account.company_id)
        return {
            "success": True,
            "data": {**counts, "canDelete": counts["memberCount"] == 0 and counts["assignmentCount"] == 0},
        }

    def create_role(self, data: RoleCreate, account: CurrentAccount) -> dict:
        account.ensure_company(data.companyId)
        account.ensure_manager()
        if self.repo.find_by_name(self.db, data.companyId, data.name):
            raise ValidationFailed("A role with this name already exists")

        role = self.repo.create_role(self.db, data.companyId, data.name, data.description)
        logger.info(f"✅ Role created: {role.name} ({role.id}) for company {data.companyId}")
        return {"success": True, "message": "Role created successfully", "data": serialize_role(role)}

    def update_role(self, role_id: str, data: RoleUpdate, account: CurrentAccount) -> dict:
        account.ensure_manager()
        role = self.get_role(role_id, account)
        if data.name and self.repo.find_by_name(self.db, role.company_id, data.name, exclude_id=role.id):
            raise ValidationFailed("A role with this name already exists")

        role = self.repo.update_role(self.db, role, name=data.name, description=data.description)
        return {"success": True, "message": "Role updated successfully", "data": serialize_role(role)}

    def delete_role(self, role_id: str, account: CurrentAccount) -> dict:
        account.ensure_manager()
        role = self.get_role(role_id, account)
        counts = self.repo.usage_counts(self.db, role.id, account.company_id)
        if counts["memberCount"] or counts["assignmentCount"]:
            raise ValidationFailed(
                f"Cannot delete role. It is assigned to {counts['memberCount']} member(s) "
                f"and {counts['assignmentCount']} assignment(s)"
            )
        self.repo.delete_role(self.db, role)
        logger.info(f"🗑️ Role deleted: {role_id}")
        return {"success": True, "message": "Role deleted successfully"}

    def create_default_roles(self, company_id: str, account: CurrentAccount) -> dict:
        account.ensure_company(company_id)
        account.ensure_manager()
        created = self.repo.add_default_roles(self.db, company_id)
        self.db.commit()
        return {
            "success": True,
            "message": f"Created {len(created)} default role(s)",
            "data": [serialize_role(r) for r in created],
        }
