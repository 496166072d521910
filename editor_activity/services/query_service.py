"""Read-side queries combining the activity store and structure aggregator."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PureWindowsPath
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from editor_activity.services.activity_store import ActivityStore
from editor_activity.services.errors import NotFoundError
from editor_activity.services.structure_aggregator import (
    FlatFileRecord,
    StructureTotals,
    flatten,
)
from editor_activity.utils.datetime_helpers import ensure_utc

logger = logging.getLogger(__name__)


def project_display_name(project_path: str) -> str:
    """Return the last segment of a project path.

    Both ``/`` and ``\\`` separators are understood and trailing separators
    are ignored; a path with no usable segment is returned unchanged.
    """
    name = PureWindowsPath(project_path.rstrip("/\\")).name
    return name or project_path


@dataclass(frozen=True)
class ProjectSummaryRef:
    record_id: UUID
    project_id: str
    project_name: str


@dataclass(frozen=True)
class ActivityContext:
    linked_project_ids: list[UUID]
    is_online: bool
    is_editor_focused: bool
    focus_duration: float
    total_duration: float
    last_heartbeat: datetime | None


@dataclass(frozen=True)
class ProjectListResult:
    projects: list[ProjectSummaryRef]
    activity_context: ActivityContext


@dataclass(frozen=True)
class ProjectSummaryResult:
    record_id: UUID
    project_id: str
    project_name: str
    summary: StructureTotals
    files: list[FlatFileRecord] = field(default_factory=list)


class ActivityQueryService:
    """Answers "list my projects" and "summarize this project" requests."""

    def __init__(self, db: AsyncSession, store: ActivityStore | None = None):
        self.db = db
        self.store = store or ActivityStore(db)

    async def list_projects_for_user(self, user_id: str) -> ProjectListResult:
        """List the projects linked to a user's session with its counters.

        Raises:
            NotFoundError: If the user has no activity session
        """
        session = await self.store.get_session(user_id)
        if session is None:
            raise NotFoundError("No activity found")

        linked_ids = await self.store.get_linked_project_ids(user_id)
        records = await self.store.get_projects_by_ids(linked_ids)

        projects = [
            ProjectSummaryRef(
                record_id=record.record_id,
                project_id=record.project_path,
                project_name=project_display_name(record.project_path),
            )
            for record in records
        ]

        activity_context = ActivityContext(
            linked_project_ids=linked_ids,
            is_online=bool(session.is_online),
            is_editor_focused=bool(session.is_editor_focused),
            focus_duration=session.focus_duration,
            total_duration=session.total_duration,
            last_heartbeat=ensure_utc(session.last_heartbeat),
        )

        return ProjectListResult(projects=projects, activity_context=activity_context)

    async def summarize_project(self, record_id: UUID) -> ProjectSummaryResult:
        """Decrypt a project's structure and roll up its file counters.

        Raises:
            NotFoundError: If the record does not exist
            StructureDecodeError: If the stored envelope is corrupt
        """
        record = await self.store.get_project(record_id)
        if record is None:
            raise NotFoundError("Project not found")

        structure = self.store.decode_structure(record)
        files, totals = flatten(structure)

        if totals.data_integrity_warning:
            logger.warning(f"Project record {record_id} has files with idle time above total time")

        return ProjectSummaryResult(
            record_id=record.record_id,
            project_id=record.project_path,
            project_name=project_display_name(record.project_path),
            summary=totals,
            files=files,
        )
