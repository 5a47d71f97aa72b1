"""Member repository - Database operations for company members"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Company, Member, ProjectAssignment, Role
from ...models_google_calendar import GoogleToken


class MemberRepository:
    """Repository for member database operations"""

    @staticmethod
    def get_company(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def count_company_members(db: Session, company_id: str) -> int:
        return db.query(Member).filter(Member.company_id == company_id).count()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Member]:
        return (
            db.query(Member)
            .options(joinedload(Member.company), joinedload(Member.role))
            .filter(Member.email == email)
            .first()
        )

    @staticmethod
    def get_member(db: Session, member_id: str) -> Optional[Member]:
        return (
            db.query(Member)
            .options(joinedload(Member.company), joinedload(Member.role))
            .filter(Member.id == member_id)
            .first()
        )

    @staticmethod
    def get_role(db: Session, role_id: str, company_id: str) -> Optional[Role]:
        return db.query(Role).filter(Role.id == role_id, Role.company_id == company_id).first()

    @staticmethod
    def get_company_members(db: Session, company_id: str) -> list[Member]:
        """Members with their project assignments, newest first"""
        return (
            db.query(Member)
            .options(
                joinedload(Member.role),
                joinedload(Member.project_assignments).joinedload(ProjectAssignment.project),
                joinedload(Member.project_assignments).joinedload(ProjectAssignment.role),
            )
            .filter(Member.company_id == company_id)
            .order_by(Member.created_at.desc(), Member.name.asc())
            .all()
        )

    @staticmethod
    def create_member(db: Session, **member_data) -> Member:
        member = Member(**member_data)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    @staticmethod
    def save(db: Session, member: Member) -> Member:
        db.commit()
        db.refresh(member)
        return member

    @staticmethod
    def delete_member(db: Session, member: Member) -> None:
        """Delete a member with assignments and calendar tokens"""
        db.query(GoogleToken).filter(GoogleToken.member_id == member.id).delete(synchronize_session=False)
        db.delete(member)
        db.commit()
