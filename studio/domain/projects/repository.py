"""Project repository - Database operations for projects, events and assignments"""

from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Company, Event, EventAssignment, Member, Project, ProjectAssignment, Role


class ProjectRepository:
    """Repository for project database operations"""

    @staticmethod
    def get_company(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_project(db: Session, project_id: str) -> Optional[Project]:
        """Project with its company, assignments and events (and their assignments) loaded"""
        return (
            db.query(Project)
            .options(
                joinedload(Project.company),
                joinedload(Project.assignments).joinedload(ProjectAssignment.member),
                joinedload(Project.assignments).joinedload(ProjectAssignment.role),
                joinedload(Project.events).joinedload(Event.assignments).joinedload(EventAssignment.member),
                joinedload(Project.events).joinedload(Event.assignments).joinedload(EventAssignment.role),
            )
            .filter(Project.id == project_id)
            .first()
        )

    @staticmethod
    def find_by_name(
        db: Session, company_id: str, name: str, exclude_id: Optional[str] = None
    ) -> Optional[Project]:
        query = db.query(Project).filter(
            Project.company_id == company_id,
            func.lower(Project.name) == name.strip().lower(),
        )
        if exclude_id:
            query = query.filter(Project.id != exclude_id)
        return query.first()

    @staticmethod
    def get_company_members(db: Session, member_ids: Iterable[str], company_id: str) -> list[Member]:
        member_ids = list(member_ids)
        if not member_ids:
            return []
        return (
            db.query(Member)
            .filter(Member.id.in_(member_ids), Member.company_id == company_id)
            .all()
        )

    @staticmethod
    def get_company_roles(db: Session, role_ids: Iterable[str], company_id: str) -> list[Role]:
        role_ids = list(role_ids)
        if not role_ids:
            return []
        return db.query(Role).filter(Role.id.in_(role_ids), Role.company_id == company_id).all()

    @staticmethod
    def get_event_assignment(db: Session, assignment_id: str) -> Optional[EventAssignment]:
        return (
            db.query(EventAssignment)
            .options(joinedload(EventAssignment.event).joinedload(Event.project))
            .filter(EventAssignment.id == assignment_id)
            .first()
        )

    @staticmethod
    def get_project_assignment(db: Session, assignment_id: str) -> Optional[ProjectAssignment]:
        return (
            db.query(ProjectAssignment)
            .options(joinedload(ProjectAssignment.project))
            .filter(ProjectAssignment.id == assignment_id)
            .first()
        )

    @staticmethod
    def save(db: Session, project: Project) -> Project:
        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def delete_project(db: Session, project: Project) -> None:
        """Delete a project. Events, their assignments and project assignments cascade."""
        db.delete(project)
        db.commit()
