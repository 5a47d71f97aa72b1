"""Role repository - Database operations for roles"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Event, EventAssignment, Member, Project, ProjectAssignment, Role

DEFAULT_ROLES = [
    ("Photographer", "Captures photos at events"),
    ("Videographer", "Records video coverage"),
    ("Editor", "Edits and delivers final media"),
    ("Assistant", "Supports the crew on site"),
]


class RoleRepository:
    """Repository for role database operations"""

    @staticmethod
    def get_company_roles(db: Session, company_id: str) -> list[Role]:
        return db.query(Role).filter(Role.company_id == company_id).order_by(Role.name.asc()).all()

    @staticmethod
    def get_role(db: Session, role_id: str, company_id: str) -> Optional[Role]:
        return db.query(Role).filter(Role.id == role_id, Role.company_id == company_id).first()

    @staticmethod
    def find_by_name(db: Session, company_id: str, name: str, exclude_id: Optional[str] = None) -> Optional[Role]:
        """Case-insensitive name lookup within a company"""
        query = db.query(Role).filter(
            Role.company_id == company_id, func.lower(Role.name) == name.strip().lower()
        )
        if exclude_id:
            query = query.filter(Role.id != exclude_id)
        return query.first()

    @staticmethod
    def usage_counts(db: Session, role_id: str, company_id: str) -> dict:
        member_count = (
            db.query(Member).filter(Member.role_id == role_id, Member.company_id == company_id).count()
        )
        project_assignments = (
            db.query(ProjectAssignment)
            .join(ProjectAssignment.project)
            .filter(ProjectAssignment.role_id == role_id, Project.company_id == company_id)
            .count()
        )
        event_assignments = (
            db.query(EventAssignment)
            .join(EventAssignment.event)
            .join(Event.project)
            .filter(EventAssignment.role_id == role_id, Project.company_id == company_id)
            .count()
        )
        return {
            "memberCount": member_count,
            "assignmentCount": project_assignments + event_assignments,
        }

    @staticmethod
    def create_role(db: Session, company_id: str, name: str, description: Optional[str] = None) -> Role:
        role = Role(company_id=company_id, name=name.strip(), description=description)
        db.add(role)
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def add_default_roles(db: Session, company_id: str) -> list[Role]:
        """Stage the default roles a company is missing. The caller commits."""
        existing = {r.name.lower() for r in db.query(Role).filter(Role.company_id == company_id).all()}
        created = []
        for name, description in DEFAULT_ROLES:
            if name.lower() not in existing:
                role = Role(company_id=company_id, name=name, description=description)
                db.add(role)
                created.append(role)
        return created

    @staticmethod
    def update_role(db: Session, role: Role, **updates) -> Role:
        for key, value in updates.items():
            if value is not None and hasattr(role, key):
                setattr(role, key, value)
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def delete_role(db: Session, role: Role) -> None:
        db.delete(role)
        db.commit()
