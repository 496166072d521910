"""Authenticated activity and project summaries."""
from uuid import UUID

from fastapi import APIRouter, Depends

from editor_activity.dependencies import get_current_user_id, get_query_service
from editor_activity.schemas.activity import ActivityOverviewResponse
from editor_activity.schemas.project import ProjectSummaryResponse
from editor_activity.services.query_service import ActivityQueryService

router = APIRouter()


@router.get("/activity", response_model=ActivityOverviewResponse)
async def get_activity_overview(
    user_id: str = Depends(get_current_user_id),
    query_service: ActivityQueryService = Depends(get_query_service),
):
    """List the caller's projects with their session counters."""
    result = await query_service.list_projects_for_user(user_id)
    return ActivityOverviewResponse.model_validate(result)


@router.get(
    "/project/{record_id}",
    response_model=ProjectSummaryResponse,
    dependencies=[Depends(get_current_user_id)],
)
async def get_project_summary(
    record_id: UUID,
    query_service: ActivityQueryService = Depends(get_query_service),
):
    """Summarize a project's files and totals."""
    result = await query_service.summarize_project(record_id)
    return ProjectSummaryResponse.model_validate(result)
