"""Project router - FastAPI endpoints for projects"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ...auth import CurrentAccount, get_current_account
from ...database import get_db
from ...services.calendar_sync import get_calendar_service
from .schemas import (
    CheckProjectName,
    DocumentDelete,
    InstructionsUpdate,
    ProjectCreate,
    ProjectDelete,
    ProjectEdit,
    ProjectMemberAdd,
    ProjectMemberRemove,
    ProjectSectionsUpdate,
)
from .service import ProjectService

router = APIRouter(prefix="/project", tags=["Projects"])


def get_project_service(
    db: Session = Depends(get_db),
    calendar=Depends(get_calendar_service),
) -> ProjectService:
    """Dependency injection for ProjectService"""
    return ProjectService(db, calendar_service=calendar)


@router.post("/add", status_code=201)
async def create_project(
    data: ProjectCreate,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return await service.create_project(data, account)


@router.put("/edit")
async def edit_project(
    data: ProjectEdit,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    """Update project fields and events. `isScheduleUpdate` runs the conflict check first."""
    return await service.edit_project(data, account)


@router.delete("/delete")
async def delete_project(
    data: ProjectDelete,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return await service.delete_project(data.projectId, account)


@router.post("/check-name")
async def check_project_name(
    data: CheckProjectName,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return service.check_name(data, account)


@router.post("/add-member", status_code=201)
async def add_project_member(
    data: ProjectMemberAdd,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return await service.add_member(data, account)


@router.post("/remove-member")
async def remove_project_member(
    data: ProjectMemberRemove,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return await service.remove_member(data, account)


@router.put("/sections")
async def update_project_sections(
    data: ProjectSectionsUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return service.update_sections(data, account)


@router.patch("/assignment/{assignment_id}/instructions")
async def update_assignment_instructions(
    assignment_id: str,
    data: InstructionsUpdate,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return service.update_instructions(assignment_id, data.instructions, account)


@router.get("/{project_id}/sections")
async def get_project_sections(
    project_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_sections(project_id, account)


@router.post("/{project_id}/documents", status_code=201)
async def upload_project_document(
    project_id: str,
    document: UploadFile = File(...),
    title: Optional[str] = Form(None),
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    content = await document.read()
    return service.upload_document(project_id, content, document.content_type, document.filename, title, account)


@router.delete("/{project_id}/documents")
async def delete_project_document(
    project_id: str,
    data: DocumentDelete,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return service.delete_document(project_id, data.key, account)


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    account: CurrentAccount = Depends(get_current_account),
    service: ProjectService = Depends(get_project_service),
):
    return service.get_project(project_id, account)
