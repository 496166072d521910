"""Project creation and structure update endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from editor_activity.dependencies import get_activity_store
from editor_activity.schemas.project import (
    CreateProjectRequest,
    MessageResponse,
    ProjectResponse,
    UpdateProjectStructureRequest,
)
from editor_activity.services.activity_store import ActivityStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/project", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: CreateProjectRequest,
    response: Response,
    store: ActivityStore = Depends(get_activity_store),
):
    """
    Look up the project at ``project_path`` or create it.

    Returns 201 when the project was created by this call and 200 when it
    already existed.
    """
    result = await store.get_or_create_project(
        project_path=request.project_path,
        user_id=request.user_id,
        initial_structure=request.initial_structure,
    )
    if not result.created:
        response.status_code = status.HTTP_200_OK

    return ProjectResponse(record_id=result.record_id, project_structure=result.structure)


@router.put("/project/{record_id}", response_model=MessageResponse)
async def update_project_structure(
    record_id: UUID,
    request: UpdateProjectStructureRequest,
    store: ActivityStore = Depends(get_activity_store),
):
    """Replace a project's structure."""
    await store.update_project_structure(record_id, request.project_structure)
    return MessageResponse(message="Project structure updated successfully")
