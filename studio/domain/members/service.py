"""Member service - Business logic for company members"""

import calendar
import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, create_member_token
from ...config import MAX_MEMBERS_PER_COMPANY
from ...email_service import send_new_member_email
from ...errors import ForbiddenError, NotFoundError, ValidationFailed
from ...models import Member
from ...security_utils import generate_password, hash_password, verify_password
from ...services import storage
from ...services.calendar_sync import calendar_entries, remove_calendar_entries
from ..scheduling import SchedulingService
from ..scheduling.overlap import dates_overlap
from ..scheduling.schemas import AvailabilityRequest
from .repository import MemberRepository
from .schemas import MemberCreate, MemberLogin, MembersByCompanyRequest, MemberUpdate

logger = logging.getLogger(__name__)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_member(member: Member) -> dict:
    return {
        "id": member.id,
        "name": member.name,
        "email": member.email,
        "role": member.role.name if member.role else "No Role Assigned",
        "roleId": member.role_id or "",
        "phone": member.phone or "",
        "countryCode": member.country_code or "",
        "location": member.location or "",
        "bio": member.bio or "",
        "profilePhoto": storage.generate_presigned_url(member.profile_photo) if member.profile_photo else "",
        "ringColor": member.ring_color or "",
        "active": member.active,
        "isAdmin": member.is_admin,
        "skills": member.skills or [],
        "companyId": member.company_id,
    }


def view_range(data: MembersByCompanyRequest) -> tuple[date, date]:
    """First and last day of the requested month or ISO week"""
    if data.viewType == "month":
        last_day = calendar.monthrange(data.year, data.month)[1]
        return date(data.year, data.month, 1), date(data.year, data.month, last_day)
    try:
        start = date.fromisocalendar(data.year, data.week, 1)
    except ValueError as e:
        raise ValidationFailed(f"Week {data.week} does not exist in {data.year}") from e
    return start, start + timedelta(days=6)


class MemberService:
    """Service layer for member business logic"""

    def __init__(self, db: Session, calendar_service=None, scheduling: Optional[SchedulingService] = None):
        self.db = db
        self.repo = MemberRepository()
        self.calendar = calendar_service
        self.scheduling = scheduling or SchedulingService(db, photo_url=storage.generate_presigned_url)

    def get_member(self, member_id: str, account: CurrentAccount) -> Member:
        member = self.repo.get_member(self.db, member_id)
        if not member or member.company_id != account.company_id:
            raise NotFoundError("Member not found")
        return member

    def _ensure_self_or_manager(self, member: Member, account: CurrentAccount) -> None:
        if account.member_id != member.id and not (account.is_company or account.is_admin):
            raise ForbiddenError("You can only update your own profile")

    async def create_member(self, data: MemberCreate, account: CurrentAccount) -> dict:
        """Add a member with a generated password and email the credentials"""
        account.ensure_company(data.companyId)
        account.ensure_manager()

        company = self.repo.get_company(self.db, data.companyId)
        if not company:
            raise NotFoundError("Company not found")

        if self.repo.count_company_members(self.db, company.id) >= MAX_MEMBERS_PER_COMPANY:
            logger.warning(f"⚠️ Company {company.id} reached the member limit")
            raise ValidationFailed(
                f"Member limit reached. Maximum {MAX_MEMBERS_PER_COMPANY} members per company."
            )

        if self.repo.get_by_email(self.db, data.email):
            raise ValidationFailed("Email already exists")

        role = self.repo.get_role(self.db, data.roleId, company.id)
        if not role:
            raise ValidationFailed("Role not found or doesn't belong to your company")

        raw_password = generate_password()
        member = self.repo.create_member(
            self.db,
            company_id=company.id,
            role_id=role.id,
            name=data.name,
            email=data.email,
            password_hash=hash_password(raw_password),
            country_code=data.countryCode,
            phone=data.phone,
            location=data.location,
            bio=data.bio,
            skills=data.skills or [],
        )
        logger.info(f"✅ Member created: {member.id} in company {company.id}")

        try:
            await send_new_member_email(member.email, member.name, raw_password, company.name)
        except Exception as e:
            logger.error(f"❌ Failed to send credentials to {member.email}: {e}")

        return {"success": True, "message": "Member Created Successfully", "member": serialize_member(member)}

    def get_members_by_company(self, data: MembersByCompanyRequest, account: CurrentAccount) -> dict:
        account.ensure_company(data.companyId)
        if not self.repo.get_company(self.db, data.companyId):
            raise NotFoundError("Company not found")

        start, end = view_range(data)
        members = self.repo.get_company_members(self.db, data.companyId)
        if data.memberId and not any(m.id == data.memberId for m in members):
            raise NotFoundError("Member not found in this company")

        results = []
        for member in members:
            projects = []
            for assignment in member.project_assignments:
                project = assignment.project
                undated = project.start_date is None and project.end_date is None
                if not undated and not dates_overlap(project.start_date, project.end_date, start, end):
                    continue
                projects.append(
                    {
                        "id": project.id,
                        "name": project.name,
                        "color": project.color,
                        "startDate": _iso(project.start_date),
                        "endDate": _iso(project.end_date),
                        "startHour": project.start_hour,
                        "endHour": project.end_hour,
                        "location": project.location,
                        "description": project.description,
                        "client": project.client,
                        "brief": project.brief,
                        "logistics": project.logistics,
                        "assignedTo": member.name,
                        "newRole": assignment.role.name if assignment.role else "",
                        "roleId": assignment.role_id or "",
                    }
                )

            events = [
                {
                    "id": a.event.id,
                    "name": a.event.name,
                    "date": a.event.date.isoformat(),
                    "startHour": a.event.start_hour,
                    "endHour": a.event.end_hour,
                    "location": a.event.location,
                    "projectId": a.event.project_id,
                    "projectName": a.event.project.name if a.event.project else None,
                    "color": a.event.project.color if a.event.project else None,
                }
                for a in member.event_assignments
                if a.event and start <= a.event.date <= end
            ]
            results.append({**serialize_member(member), "projects": projects, "events": events})

        if data.memberId:
            results.sort(key=lambda m: m["id"] != data.memberId)

        period = {"month": data.month} if data.viewType == "month" else {"week": data.week}
        return {
            "success": True,
            "message": (
                f"Member details retrieved successfully for {data.viewType} view"
                if data.memberId
                else f"Members retrieved successfully for {data.viewType} view"
            ),
            "members": results,
            "totalCount": len(results),
            "viewType": data.viewType,
            **period,
            "year": data.year,
            "dateRange": {"startDate": start.isoformat(), "endDate": end.isoformat()},
        }

    def get_available_members(self, data: AvailabilityRequest, account: CurrentAccount) -> dict:
        account.ensure_company(data.companyId)
        return self.scheduling.get_available_members(data)

    def update_member(self, member_id: str, data: MemberUpdate, account: CurrentAccount) -> dict:
        member = self.get_member(member_id, account)
        self._ensure_self_or_manager(member, account)

        if data.email and data.email != member.email:
            existing = self.repo.get_by_email(self.db, data.email)
            if existing and existing.id != member.id:
                raise ValidationFailed("Email already exists")
            member.email = data.email

        if data.roleId is not None:
            if not (account.is_company or account.is_admin):
                raise ForbiddenError("Only company administrators can change roles")
            role = self.repo.get_role(self.db, data.roleId, member.company_id)
            if not role:
                raise ValidationFailed("Role not found or doesn't belong to your company")
            member.role_id = role.id

        if data.name is not None:
            if not data.name.strip():
                raise ValidationFailed("Name cannot be empty")
            member.name = data.name.strip()
        if data.phone is not None:
            member.phone = data.phone or None
        if data.countryCode is not None:
            member.country_code = data.countryCode or None
        if data.location is not None:
            member.location = data.location or None
        if data.bio is not None:
            member.bio = data.bio or None
        if data.skills is not None:
            member.skills = data.skills

        member = self.repo.save(self.db, member)
        return {"success": True, "message": "Member updated successfully", "member": serialize_member(member)}

    def update_ring_color(self, member_id: str, ring_color: str, account: CurrentAccount) -> dict:
        member = self.get_member(member_id, account)
        self._ensure_self_or_manager(member, account)
        member.ring_color = ring_color
        member = self.repo.save(self.db, member)
        return {"success": True, "message": "Ring color updated successfully", "member": serialize_member(member)}

    def toggle_status(self, member_id: str, account: CurrentAccount) -> dict:
        account.ensure_manager()
        member = self.get_member(member_id, account)
        member.active = not member.active
        member = self.repo.save(self.db, member)
        state = "activated" if member.active else "deactivated"
        logger.info(f"🔄 Member {member.id} {state}")
        return {
            "success": True,
            "message": f"Member {state} successfully",
            "member": serialize_member(member),
            "newStatus": member.active,
        }

    def toggle_admin(self, member_id: str, account: CurrentAccount) -> dict:
        account.ensure_manager()
        member = self.get_member(member_id, account)
        if member.company and member.email == member.company.email:
            raise ForbiddenError("Cannot modify admin status for the main company administrator")

        member.is_admin = not member.is_admin
        member = self.repo.save(self.db, member)
        return {
            "success": True,
            "message": "Member promoted to admin" if member.is_admin else "Admin rights removed",
            "member": serialize_member(member),
            "isAdmin": member.is_admin,
        }

    def upload_photo(
        self,
        member_id: str,
        content: bytes,
        content_type: Optional[str],
        filename: Optional[str],
        account: CurrentAccount,
    ) -> dict:
        member = self.get_member(member_id, account)
        self._ensure_self_or_manager(member, account)

        if not content:
            raise ValidationFailed("No file uploaded")
        if content_type not in storage.ALLOWED_IMAGE_TYPES:
            raise ValidationFailed(f"File type {content_type} not allowed")
        if len(content) > storage.MAX_IMAGE_SIZE:
            raise ValidationFailed(f"File too large. Maximum size: {storage.MAX_IMAGE_SIZE // (1024 * 1024)}MB")

        try:
            key = storage.upload_bytes(content, storage.build_key(f"members/{member.id}", filename), content_type)
        except Exception as e:
            raise HTTPException(status_code=500, detail="Failed to upload profile photo") from e

        previous = member.profile_photo
        member.profile_photo = key
        member = self.repo.save(self.db, member)
        if previous and previous != key:
            storage.delete_object(previous)

        return {
            "success": True,
            "message": "Profile photo uploaded successfully",
            "profilePhoto": storage.generate_presigned_url(key),
            "member": serialize_member(member),
        }

    def remove_photo(self, member_id: str, account: CurrentAccount) -> dict:
        member = self.get_member(member_id, account)
        self._ensure_self_or_manager(member, account)
        if not member.profile_photo:
            raise ValidationFailed("Member does not have a profile photo to remove")

        key = member.profile_photo
        member.profile_photo = None
        member = self.repo.save(self.db, member)
        storage.delete_object(key)
        return {"success": True, "message": "Profile photo removed successfully", "member": serialize_member(member)}

    def login(self, data: MemberLogin) -> dict:
        member = self.repo.get_by_email(self.db, data.email)
        if not member or not verify_password(data.password, member.password_hash):
            logger.warning(f"⚠️ Failed member login for {data.email}")
            raise HTTPException(status_code=401, detail="Invalid email or password")
        if not member.active:
            raise ForbiddenError("Your account has been deactivated. Please contact your administrator.")

        token = create_member_token(member.id, member.company_id, member.is_admin)
        company = member.company
        return {
            "success": True,
            "message": "Login successful",
            "token": token,
            "user": {
                "id": member.id,
                "name": member.name,
                "email": member.email,
                "role": member.role.name if member.role else None,
                "isAdmin": member.is_admin,
                "userType": "admin" if member.is_admin else "member",
                "location": member.location,
                "company": {
                    "id": company.id if company else None,
                    "name": company.name if company else None,
                    "email": company.email if company else None,
                    "country": company.country if company else None,
                },
            },
        }

    async def delete_member(self, member_id: str, account: CurrentAccount) -> dict:
        """Delete a member. Their synced calendar events are removed first, best-effort."""
        account.ensure_manager()
        member = self.get_member(member_id, account)
        if account.member_id == member.id:
            raise ValidationFailed("You cannot delete your own account")

        entries = calendar_entries(member.event_assignments)
        if entries and self.calendar is not None:
            await remove_calendar_entries(self.calendar, entries)

        photo = member.profile_photo
        self.repo.delete_member(self.db, member)
        if photo:
            storage.delete_object(photo)

        logger.info(f"🗑️ Member deleted: {member_id}")
        return {"success": True, "message": "Member deleted successfully", "memberId": member_id}
