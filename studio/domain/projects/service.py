"""Project service - Business logic for projects, their events and team assignments"""

import logging
from datetime import date
from typing import Iterable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import CurrentAccount
from ...email_service import send_event_assignment_email
from ...errors import NotFoundError, ScheduleConflictError, ValidationFailed
from ...models import Event, EventAssignment, Member, Project, ProjectAssignment, Role, default_reminders
from ...services import storage
from ...services.calendar_sync import calendar_entries, push_assignment, push_events, remove_calendar_entries
from ..scheduling import ProposedEvent, SchedulingService, find_batch_conflicts
from ..scheduling.conflicts import ScheduleWindow
from .repository import ProjectRepository
from .schemas import (
    AssignmentInput,
    CheckProjectName,
    EventInput,
    ProjectCreate,
    ProjectEdit,
    ProjectMemberAdd,
    ProjectMemberRemove,
    ProjectSectionsUpdate,
)

logger = logging.getLogger(__name__)

SCHEDULE_CONFLICT_MESSAGE = "Your assigned team member ain't available on this new Schedule"


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_assignment(assignment) -> dict:
    member = assignment.member
    return {
        "id": assignment.id,
        "memberId": assignment.member_id,
        "memberName": member.name if member else None,
        "memberEmail": member.email if member else None,
        "roleId": assignment.role_id,
        "role": assignment.role.name if assignment.role else None,
        "instructions": assignment.instructions,
        "googleEventId": assignment.google_event_id,
    }


def serialize_event(event: Event) -> dict:
    return {
        "id": event.id,
        "projectId": event.project_id,
        "name": event.name,
        "date": _iso(event.date),
        "startHour": event.start_hour,
        "endHour": event.end_hour,
        "location": event.location,
        "reminders": event.reminders or default_reminders(),
        "assignments": [serialize_assignment(a) for a in event.assignments],
    }


def serialize_document(document: dict) -> dict:
    return {**document, "url": storage.generate_presigned_url(document.get("key"))}


def serialize_project(project: Project) -> dict:
    return {
        "id": project.id,
        "companyId": project.company_id,
        "name": project.name,
        "color": project.color,
        "description": project.description,
        "client": project.client,
        "location": project.location,
        "startDate": _iso(project.start_date),
        "endDate": _iso(project.end_date),
        "startHour": project.start_hour,
        "endHour": project.end_hour,
        "assignments": [serialize_assignment(a) for a in project.assignments],
        "events": [serialize_event(e) for e in project.events],
        "documents": [serialize_document(d) for d in project.documents or []],
        "createdAt": project.created_at.isoformat() if project.created_at else None,
    }


def events_span(events: Iterable[EventInput]) -> ScheduleWindow:
    """Smallest window covering every event: min/max date and min start/max end hour"""
    events = list(events)
    starts = [e.startHour for e in events if e.startHour is not None]
    ends = [e.endHour for e in events if e.endHour is not None]
    return ScheduleWindow(
        min(e.date for e in events),
        max(e.date for e in events),
        min(starts) if starts else None,
        max(ends) if ends else None,
    )


def check_window(window: ScheduleWindow) -> None:
    if window.start_date and window.end_date and window.start_date > window.end_date:
        raise ValidationFailed("Start date cannot be after end date")
    if window.start_hour is not None and window.end_hour is not None and window.start_hour >= window.end_hour:
        raise ValidationFailed("Start hour must be before end hour")


def resolve_people(
    repo: ProjectRepository,
    db: Session,
    company_id: str,
    assignments: Iterable[AssignmentInput],
) -> tuple[dict[str, Member], dict[str, Role]]:
    """Load the members and roles named by assignment inputs, rejecting anything outside the company"""
    assignments = list(assignments)
    member_ids = {a.memberId for a in assignments}
    role_ids = {a.roleId for a in assignments if a.roleId}

    members = {m.id: m for m in repo.get_company_members(db, member_ids, company_id)}
    missing = member_ids - members.keys()
    if missing:
        raise ValidationFailed(f"Member {sorted(missing)[0]} not found in this company")

    roles = {r.id: r for r in repo.get_company_roles(db, role_ids, company_id)}
    if role_ids - roles.keys():
        raise ValidationFailed("Role not found or doesn't belong to your company")
    return members, roles


async def notify_assignments(assignments: Iterable[EventAssignment], project: Project) -> None:
    """Email each assigned member about their event. Failures are logged only."""
    company_name = project.company.name if project.company else ""
    for assignment in assignments:
        member = assignment.member
        if member is None:
            continue
        try:
            await send_event_assignment_email(
                member.email,
                member.name,
                assignment.event,
                project.name,
                company_name,
                instructions=assignment.instructions,
            )
        except Exception as e:
            logger.error(f"❌ Failed to send assignment email to {member.email}: {e}")


class ProjectService:
    """Service layer for project business logic"""

    def __init__(self, db: Session, calendar_service=None, scheduling: Optional[SchedulingService] = None):
        self.db = db
        self.repo = ProjectRepository()
        self.calendar = calendar_service
        self.scheduling = scheduling or SchedulingService(db)

    def get_project_for(self, project_id: str, account: CurrentAccount) -> Project:
        project = self.repo.get_project(self.db, project_id)
        if not project:
            raise NotFoundError("Project not found")
        account.ensure_company(project.company_id)
        return project

    def _event_of(self, project: Project, event_id: str) -> Event:
        event = next((e for e in project.events if e.id == event_id), None)
        if event is None:
            raise NotFoundError("Event not found in this project")
        return event

    @staticmethod
    def _ensure_project_assignment(project: Project, member_id: str, role_id: Optional[str]) -> None:
        if not any(a.member_id == member_id for a in project.assignments):
            project.assignments.append(ProjectAssignment(member_id=member_id, role_id=role_id))

    @staticmethod
    def _apply_event_assignments(event: Event, items: list[AssignmentInput]) -> list[tuple[str, str]]:
        """Make the event's assignments match `items`. Returns calendar entries of dropped rows."""
        current = {a.member_id: a for a in event.assignments}
        wanted = {}
        for item in items:
            wanted[item.memberId] = item

        dropped = [a for member_id, a in current.items() if member_id not in wanted]
        for assignment in dropped:
            event.assignments.remove(assignment)

        for member_id, item in wanted.items():
            assignment = current.get(member_id)
            if assignment is None:
                event.assignments.append(
                    EventAssignment(member_id=member_id, role_id=item.roleId, instructions=item.instructions)
                )
            else:
                if item.roleId is not None:
                    assignment.role_id = item.roleId
                if item.instructions is not None:
                    assignment.instructions = item.instructions
        return calendar_entries(dropped)

    async def _after_commit(self, removed: list[tuple[str, str]], events: Iterable[Event]) -> None:
        if self.calendar is None:
            return
        if removed:
            await remove_calendar_entries(self.calendar, removed)
        await push_events(self.db, self.calendar, events)

    async def create_project(self, data: ProjectCreate, account: CurrentAccount) -> dict:
        """Create a project with its events and event assignments in one transaction"""
        account.ensure_company(data.companyId)
        account.ensure_manager()
        company = self.repo.get_company(self.db, data.companyId)
        if not company:
            raise NotFoundError("Company not found")

        items = [a for event in data.events for a in event.assignments]
        members, _roles = resolve_people(self.repo, self.db, company.id, items)

        self.scheduling.lock_members(members.keys())
        conflicts = []
        for event in data.events:
            conflicts.extend(
                self.scheduling.find_event_schedule_conflicts(
                    event.member_ids(), event.date, event.startHour, event.endHour
                )
            )
        proposed = [
            ProposedEvent(None, e.name, tuple(e.member_ids()), e.date, e.startHour, e.endHour) for e in data.events
        ]
        conflicts.extend(
            find_batch_conflicts(proposed, {m.id: m.name for m in members.values()}, project_name=data.name)
        )
        if conflicts:
            logger.warning(f"⚠️ Project create rejected for company {company.id}: {len(conflicts)} conflict(s)")
            raise ScheduleConflictError("Schedule conflict detected", [c.to_dict() for c in conflicts])

        span = events_span(data.events)
        window = ScheduleWindow(
            data.startDate if data.startDate is not None else span.start_date,
            data.endDate if data.endDate is not None else span.end_date,
            data.startHour if data.startHour is not None else span.start_hour,
            data.endHour if data.endHour is not None else span.end_hour,
        )
        check_window(window)

        project = Project(
            company_id=company.id,
            name=data.name,
            color=data.color,
            description=data.description,
            client=data.client.model_dump() if data.client else None,
            location=data.location,
            start_date=window.start_date,
            end_date=window.end_date,
            start_hour=window.start_hour,
            end_hour=window.end_hour,
            checklist=[],
            equipments=[],
            documents=[],
        )
        for item in data.events:
            event = Event(
                name=item.name,
                date=item.date,
                start_hour=item.startHour,
                end_hour=item.endHour,
                location=item.location or data.location,
                reminders={**default_reminders(), **(item.reminders or {})},
            )
            self._apply_event_assignments(event, item.assignments)
            project.events.append(event)
            for assignment in item.assignments:
                self._ensure_project_assignment(project, assignment.memberId, assignment.roleId)

        self.db.add(project)
        self.db.commit()
        logger.info(f"✅ Project created: {project.name} ({project.id}) with {len(data.events)} event(s)")

        project = self.repo.get_project(self.db, project.id)
        await self._after_commit([], project.events)
        await notify_assignments([a for e in project.events for a in e.assignments], project)

        return {
            "success": True,
            "message": "Project created successfully",
            "projectId": project.id,
            "project": serialize_project(project),
        }

    def get_project(self, project_id: str, account: CurrentAccount) -> dict:
        project = self.get_project_for(project_id, account)
        return {"success": True, "project": serialize_project(project)}

    def _edited_window(self, project: Project, data: ProjectEdit) -> ScheduleWindow:
        """Explicit window fields win. Otherwise a new event list redefines the span."""
        current = ScheduleWindow.of(project)
        fields = data.window_fields()
        if not fields and data.events:
            return events_span(data.events)
        return ScheduleWindow(
            data.startDate if "startDate" in fields else current.start_date,
            data.endDate if "endDate" in fields else current.end_date,
            data.startHour if "startHour" in fields else current.start_hour,
            data.endHour if "endHour" in fields else current.end_hour,
        )

    def _find_edit_conflicts(
        self, project: Project, data: ProjectEdit, window: ScheduleWindow, member_ids, member_names: dict[str, str]
    ) -> list:
        conflicts = [
            c.to_dict()
            for c in self.scheduling.find_project_schedule_conflicts(
                project.id, member_ids, window, company_id=project.company_id
            )
        ]

        existing = {e.id: e for e in project.events}
        if data.events is not None:
            proposed = []
            for item in data.events:
                if item.assignments is not None:
                    ids = item.member_ids()
                elif item.id in existing:
                    ids = [a.member_id for a in existing[item.id].assignments]
                else:
                    ids = []
                proposed.append(
                    ProposedEvent(item.id, item.name, tuple(ids), item.date, item.startHour, item.endHour)
                )
        else:
            proposed = [
                ProposedEvent(
                    e.id, e.name, tuple(a.member_id for a in e.assignments), e.date, e.start_hour, e.end_hour
                )
                for e in project.events
            ]

        # rows of this project are stale: they are either replaced by `proposed` or deleted
        for event in proposed:
            if not event.member_ids:
                continue
            conflicts.extend(
                c.to_dict()
                for c in self.scheduling.find_event_schedule_conflicts(
                    event.member_ids, event.day, event.start_hour, event.end_hour, exclude_project_id=project.id
                )
            )

        if data.events is not None:
            conflicts.extend(
                c.to_dict() for c in find_batch_conflicts(proposed, member_names, project.id, project.name)
            )
        return conflicts

    async def edit_project(self, data: ProjectEdit, account: CurrentAccount) -> dict:
        """
        Update a project and, optionally, its complete event list.

        With `isScheduleUpdate` every involved member is checked against their
        other projects and events before anything is written. A conflict
        rejects the whole edit.
        """
        project = self.get_project_for(data.projectId, account)
        account.ensure_manager()
        fields = data.model_fields_set

        existing_events = {e.id: e for e in project.events}
        new_items = []
        if data.events is not None:
            for item in data.events:
                if item.id and item.id not in existing_events:
                    raise NotFoundError(f"Event {item.id} not found in this project")
                if not item.id and item.assignments is None:
                    raise ValidationFailed("Each event must have at least one assigned member")
                new_items.extend(item.assignments or [])
        members, _roles = resolve_people(self.repo, self.db, project.company_id, new_items)

        window = self._edited_window(project, data)
        check_window(window)

        involved = {a.member_id for a in project.assignments} | set(members)
        self.scheduling.lock_members(involved)

        if data.isScheduleUpdate and involved:
            names = {a.member_id: a.member.name for e in project.events for a in e.assignments if a.member}
            names.update((m.id, m.name) for m in members.values())
            conflicts = self._find_edit_conflicts(project, data, window, involved, names)
            if conflicts:
                logger.warning(f"⚠️ Schedule update rejected for project {project.id}: {len(conflicts)} conflict(s)")
                raise ScheduleConflictError(SCHEDULE_CONFLICT_MESSAGE, conflicts)

        if "name" in fields and data.name:
            project.name = data.name.strip()
        if "color" in fields and data.color:
            project.color = data.color
        if "description" in fields:
            project.description = data.description
        if "location" in fields:
            project.location = data.location
        if "client" in fields:
            project.client = data.client.model_dump() if data.client else None
        project.start_date, project.end_date = window.start_date, window.end_date
        project.start_hour, project.end_hour = window.start_hour, window.end_hour

        removed: list[tuple[str, str]] = []
        if data.events is not None:
            keep = {item.id for item in data.events if item.id}
            for event in list(project.events):
                if event.id not in keep:
                    removed.extend(calendar_entries(event.assignments))
                    project.events.remove(event)

            for item in data.events:
                event = existing_events.get(item.id) if item.id else None
                if event is None:
                    event = Event(reminders=default_reminders())
                    project.events.append(event)
                event.name = item.name
                event.date = item.date
                event.start_hour = item.startHour
                event.end_hour = item.endHour
                if item.location is not None:
                    event.location = item.location
                if item.reminders:
                    event.reminders = {**(event.reminders or default_reminders()), **item.reminders}
                if item.assignments is not None:
                    removed.extend(self._apply_event_assignments(event, item.assignments))
                    for assignment in item.assignments:
                        self._ensure_project_assignment(project, assignment.memberId, assignment.roleId)

        self.db.commit()
        logger.info(f"✅ Project updated: {project.id}")

        project = self.repo.get_project(self.db, project.id)
        if data.events is not None or data.isScheduleUpdate:
            await self._after_commit(removed, project.events)

        return {"success": True, "message": "Project updated successfully", "project": serialize_project(project)}

    async def delete_project(self, project_id: str, account: CurrentAccount) -> dict:
        project = self.get_project_for(project_id, account)
        account.ensure_manager()

        entries = calendar_entries(a for event in project.events for a in event.assignments)
        self.repo.delete_project(self.db, project)
        logger.info(f"🗑️ Project deleted: {project_id}")

        if entries and self.calendar is not None:
            await remove_calendar_entries(self.calendar, entries)
        return {"success": True, "message": "Project deleted successfully"}

    def check_name(self, data: CheckProjectName, account: CurrentAccount) -> dict:
        account.ensure_company(data.companyId)
        existing = self.repo.find_by_name(self.db, data.companyId, data.name, exclude_id=data.excludeProjectId)
        return {"success": True, "exists": existing is not None}

    async def add_member(self, data: ProjectMemberAdd, account: CurrentAccount) -> dict:
        """Assign a member to one event of the project, or to the project as a whole"""
        project = self.get_project_for(data.projectId, account)
        account.ensure_manager()
        members, roles = resolve_people(
            self.repo, self.db, project.company_id, [AssignmentInput(memberId=data.memberId, roleId=data.roleId)]
        )
        member = members[data.memberId]
        self.scheduling.lock_members([member.id])

        if data.eventId:
            event = self._event_of(project, data.eventId)
            if any(a.member_id == member.id for a in event.assignments):
                raise HTTPException(status_code=409, detail="Member is already assigned to this event")

            conflicts = self.scheduling.find_event_schedule_conflicts(
                [member.id], event.date, event.start_hour, event.end_hour, exclude_event_id=event.id
            )
            if conflicts:
                raise ScheduleConflictError("Schedule conflict detected", [c.to_dict() for c in conflicts])

            assignment = EventAssignment(member_id=member.id, role_id=data.roleId, instructions=data.instructions)
            event.assignments.append(assignment)
            self._ensure_project_assignment(project, member.id, data.roleId)
            self.db.commit()
            logger.info(f"✅ Member {member.id} assigned to event {event.id}")

            if self.calendar is not None:
                await push_assignment(self.db, self.calendar, assignment)
            await notify_assignments([assignment], project)
            return {"success": True, "message": "Member added to event successfully", "assignmentId": assignment.id}

        if any(a.member_id == member.id for a in project.assignments):
            raise HTTPException(status_code=409, detail="Member is already assigned to this project")

        conflicts = self.scheduling.find_project_schedule_conflicts(
            project.id, [member.id], ScheduleWindow.of(project), company_id=project.company_id
        )
        if conflicts:
            raise ScheduleConflictError("Schedule conflict detected", [c.to_dict() for c in conflicts])

        assignment = ProjectAssignment(member_id=member.id, role_id=data.roleId, instructions=data.instructions)
        project.assignments.append(assignment)
        self.db.commit()
        logger.info(f"✅ Member {member.id} assigned to project {project.id}")
        return {"success": True, "message": "Member added to project successfully", "assignmentId": assignment.id}

    async def remove_member(self, data: ProjectMemberRemove, account: CurrentAccount) -> dict:
        """Unassign a member. The last member of a project or event cannot be removed."""
        project = self.get_project_for(data.projectId, account)
        account.ensure_manager()

        if data.eventId:
            event = self._event_of(project, data.eventId)
            assignment = next((a for a in event.assignments if a.member_id == data.memberId), None)
            if assignment is None:
                raise NotFoundError("Member is not assigned to this event")
            if len(event.assignments) <= 1:
                raise ValidationFailed(
                    "Cannot remove the last member from an event. Events must have at least one assigned member."
                )
            entries = calendar_entries([assignment])
            event.assignments.remove(assignment)
            message = "Member removed from event successfully"
        else:
            assignment = next((a for a in project.assignments if a.member_id == data.memberId), None)
            if assignment is None:
                raise NotFoundError("Member is not assigned to this project")
            if len(project.assignments) <= 1:
                raise ValidationFailed(
                    "Cannot remove the last member from a project. Projects must have at least one assigned member."
                )

            event_rows = [(e, a) for e in project.events for a in e.assignments if a.member_id == data.memberId]
            for event, _ in event_rows:
                if len(event.assignments) <= 1:
                    raise ValidationFailed(
                        f'Cannot remove the member. They are the only member assigned to event "{event.name}".'
                    )
            entries = calendar_entries(a for _, a in event_rows)
            for event, event_assignment in event_rows:
                event.assignments.remove(event_assignment)
            project.assignments.remove(assignment)
            message = "Member removed from project successfully"

        self.db.commit()
        logger.info(f"🗑️ Member {data.memberId} removed from project {project.id}")
        if entries and self.calendar is not None:
            await remove_calendar_entries(self.calendar, entries)
        return {"success": True, "message": message}

    def get_sections(self, project_id: str, account: CurrentAccount) -> dict:
        project = self.get_project_for(project_id, account)
        return {
            "success": True,
            "sections": {
                "brief": project.brief,
                "logistics": project.logistics,
                "checklist": project.checklist or [],
                "equipments": project.equipments or [],
            },
        }

    def update_sections(self, data: ProjectSectionsUpdate, account: CurrentAccount) -> dict:
        project = self.get_project_for(data.projectId, account)
        account.ensure_manager()
        fields = data.model_fields_set

        if "brief" in fields:
            project.brief = data.brief
        if "logistics" in fields:
            project.logistics = data.logistics
        if "checklist" in fields:
            project.checklist = [item.model_dump() for item in data.checklist or []]
        if "equipments" in fields:
            project.equipments = list(data.equipments or [])

        self.repo.save(self.db, project)
        response = self.get_sections(project.id, account)
        response["message"] = "Project sections updated successfully"
        return response

    def upload_document(
        self,
        project_id: str,
        content: bytes,
        content_type: Optional[str],
        filename: Optional[str],
        title: Optional[str],
        account: CurrentAccount,
    ) -> dict:
        project = self.get_project_for(project_id, account)
        account.ensure_manager()

        if not content:
            raise ValidationFailed("No file uploaded")
        if content_type not in storage.ALLOWED_DOCUMENT_TYPES:
            raise ValidationFailed(f"File type {content_type} not allowed")
        if len(content) > storage.MAX_DOCUMENT_SIZE:
            raise ValidationFailed(
                f"File too large. Maximum size: {storage.MAX_DOCUMENT_SIZE // (1024 * 1024)}MB"
            )

        try:
            key = storage.upload_bytes(
                content, storage.build_key(f"projects/{project.id}/documents", filename), content_type
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail="Failed to upload document") from e

        document = {"title": (title or filename or "Document").strip(), "key": key}
        # JSON columns only track reassignment
        project.documents = [*(project.documents or []), document]
        self.repo.save(self.db, project)
        return {"success": True, "message": "Document uploaded successfully", "document": serialize_document(document)}

    def delete_document(self, project_id: str, key: str, account: CurrentAccount) -> dict:
        project = self.get_project_for(project_id, account)
        account.ensure_manager()

        documents = project.documents or []
        if not any(d.get("key") == key for d in documents):
            raise NotFoundError("Document not found")
        project.documents = [d for d in documents if d.get("key") != key]
        self.repo.save(self.db, project)
        storage.delete_object(key)
        return {"success": True, "message": "Document deleted successfully"}

    def update_instructions(self, assignment_id: str, instructions: Optional[str], account: CurrentAccount) -> dict:
        """Event assignment ids are tried first, then project assignment ids"""
        account.ensure_manager()
        assignment = self.repo.get_event_assignment(self.db, assignment_id)
        company_id = assignment.event.project.company_id if assignment else None
        if assignment is None:
            assignment = self.repo.get_project_assignment(self.db, assignment_id)
            company_id = assignment.project.company_id if assignment else None
        if assignment is None or company_id != account.company_id:
            raise NotFoundError("Assignment not found")

        assignment.instructions = instructions
        self.db.commit()
        return {
            "success": True,
            "message": "Instructions updated successfully",
            "assignmentId": assignment.id,
            "instructions": assignment.instructions,
        }
