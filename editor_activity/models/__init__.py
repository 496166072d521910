"""Database models."""
from editor_activity.models.activity_session import ActivitySession
from editor_activity.models.project_record import ProjectRecord
from editor_activity.models.session_project_link import SessionProjectLink

__all__ = [
    "ActivitySession",
    "ProjectRecord",
    "SessionProjectLink",
]
