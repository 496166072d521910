"""Session heartbeat endpoint."""
from fastapi import APIRouter, Depends

from editor_activity.dependencies import get_activity_store
from editor_activity.schemas.activity import HeartbeatRequest
from editor_activity.schemas.project import MessageResponse
from editor_activity.services.activity_store import ActivityStore

router = APIRouter()


@router.put("/activity", response_model=MessageResponse)
async def update_activity(
    request: HeartbeatRequest,
    store: ActivityStore = Depends(get_activity_store),
):
    """Record a heartbeat for an existing session.

    The session is created by the user's first project call; heartbeats for
    unknown users return 404.
    """
    await store.update_session_heartbeat(
        user_id=request.user_id,
        is_online=request.is_online,
        is_editor_focused=request.is_editor_focused,
        focus_duration=request.focus_duration,
        total_duration=request.total_duration,
    )
    return MessageResponse(message="User activity updated")
