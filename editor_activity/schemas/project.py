"""Schemas for project creation, structure updates and summaries."""
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from editor_activity.schemas.base import BaseSchema
from editor_activity.schemas.structure import ProjectStructure


class CreateProjectRequest(BaseSchema):
    """Request to look up or create the project at ``project_path``."""

    project_path: str = Field(min_length=1)
    user_id: str = Field(min_length=1, max_length=64)
    initial_structure: Optional[ProjectStructure] = None


class ProjectResponse(BaseSchema):
    """Project id with its decrypted structure."""

    record_id: UUID
    project_structure: ProjectStructure


class UpdateProjectStructureRequest(BaseSchema):
    """Replacement structure for an existing project."""

    project_structure: ProjectStructure


class MessageResponse(BaseSchema):
    """Plain acknowledgement."""

    error: bool = False
    message: str


class FlatFileRecordResponse(BaseSchema):
    """A file's counters with its resolved folder path."""

    file_name: str
    folder_path: str
    idle_duration: float
    total_duration: float
    keystrokes_count: int
    file_switch_count: int


class ProjectTotalsResponse(BaseSchema):
    """Rolled-up counters for a project."""

    total_keystrokes_count: int
    total_file_switch_count: int
    total_idle_duration: float
    total_all_duration: float
    total_focus_duration: float
    data_integrity_warning: bool = False


class ProjectSummaryResponse(BaseSchema):
    """Summary of one project's structure."""

    record_id: UUID
    project_id: str
    project_name: str
    summary: ProjectTotalsResponse
    files: List[FlatFileRecordResponse]
