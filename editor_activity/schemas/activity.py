"""Schemas for session heartbeats and the activity overview."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, NonNegativeFloat, model_validator

from editor_activity.schemas.base import BaseSchema


class HeartbeatRequest(BaseSchema):
    """Liveness update sent periodically by the editor client."""

    user_id: str = Field(min_length=1, max_length=64)
    is_online: bool
    is_editor_focused: bool
    focus_duration: NonNegativeFloat
    total_duration: NonNegativeFloat

    @model_validator(mode="after")
    def check_focus_within_total(self):
        if self.focus_duration > self.total_duration:
            raise ValueError("focus_duration cannot exceed total_duration")
        return self


class ProjectRef(BaseSchema):
    """A project linked to the user's session."""

    record_id: UUID
    project_id: str
    project_name: str


class ActivityContextResponse(BaseSchema):
    """The user's session counters."""

    linked_project_ids: List[UUID]
    is_online: bool
    is_editor_focused: bool
    focus_duration: float
    total_duration: float
    last_heartbeat: Optional[datetime] = None


class ActivityOverviewResponse(BaseSchema):
    """Projects and session counters for the authenticated user."""

    error: bool = False
    message: str = "Data Loaded Success"
    projects: List[ProjectRef]
    activity_context: ActivityContextResponse
