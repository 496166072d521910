"""Persistence for activity sessions and project structure records."""
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from editor_activity.config import get_settings
from editor_activity.models import ActivitySession, ProjectRecord, SessionProjectLink
from editor_activity.schemas.structure import ProjectStructure
from editor_activity.services.errors import (
    ConflictError,
    InputValidationError,
    NotFoundError,
    StoreUnavailableError,
)
from editor_activity.services.structure_codec import StructureCodec, get_structure_codec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectCreationResult:
    """Outcome of a get-or-create call for a project path."""
    record_id: UUID
    structure: ProjectStructure
    created: bool


class ActivityStore:
    """Store for per-user activity sessions and per-project structures.

    Structures are encrypted with the structure codec before they reach the
    database and decrypted only when a caller asks for them.
    """

    def __init__(self, db: AsyncSession, codec: StructureCodec | None = None):
        """Initialize the store.

        Args:
            db: Database session
            codec: Structure codec, defaults to the process-wide codec
        """
        self.db = db
        self.codec = codec or get_structure_codec()
        self.settings = get_settings()

    @asynccontextmanager
    async def _storage_guard(self, operation: str):
        """Translate transient driver failures into StoreUnavailableError."""
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            await self.db.rollback()
            logger.error(f"Activity store unavailable during {operation}: {exc}")
            raise StoreUnavailableError("Activity store is temporarily unavailable") from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_session(self, user_id: str) -> ActivitySession | None:
        """Get the activity session for a user, or None."""
        async with self._storage_guard("get_session"):
            result = await self.db.execute(
                select(ActivitySession).where(ActivitySession.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def get_project(self, record_id: UUID) -> ProjectRecord | None:
        """Get a project record by id, or None."""
        async with self._storage_guard("get_project"):
            result = await self.db.execute(
                select(ProjectRecord).where(ProjectRecord.record_id == record_id)
            )
            return result.scalar_one_or_none()

    async def get_project_by_path(self, project_path: str) -> ProjectRecord | None:
        """Get a project record by its unique path, or None."""
        async with self._storage_guard("get_project_by_path"):
            result = await self.db.execute(
                select(ProjectRecord).where(ProjectRecord.project_path == project_path)
            )
            return result.scalar_one_or_none()

    async def get_linked_project_ids(self, user_id: str) -> list[UUID]:
        """Get the project ids linked to a user's session in link order."""
        async with self._storage_guard("get_linked_project_ids"):
            result = await self.db.execute(
                select(SessionProjectLink.record_id)
                .where(SessionProjectLink.user_id == user_id)
                .order_by(SessionProjectLink.link_id)
            )
            return list(result.scalars().all())

    async def get_projects_by_ids(self, record_ids: Sequence[UUID]) -> list[ProjectRecord]:
        """Get project records for the given ids, in the order requested.

        Ids without a matching record are skipped.
        """
        if not record_ids:
            return []

        async with self._storage_guard("get_projects_by_ids"):
            result = await self.db.execute(
                select(ProjectRecord).where(ProjectRecord.record_id.in_(list(record_ids)))
            )
            by_id = {record.record_id: record for record in result.scalars().all()}

        return [by_id[record_id] for record_id in record_ids if record_id in by_id]

    def decode_structure(self, record: ProjectRecord) -> ProjectStructure:
        """Decrypt a record's stored structure."""
        return self.codec.decrypt(record.structure_envelope)

    # ------------------------------------------------------------------
    # Project creation
    # ------------------------------------------------------------------
    async def get_or_create_project(
        self,
        project_path: str,
        user_id: str,
        initial_structure: Optional[ProjectStructure] = None,
    ) -> ProjectCreationResult:
        """Return the project for a path, creating it on first sight.

        An existing record is returned unchanged with no side effects. A new
        record is created in one transaction together with the user's session
        (upserted with zeroed counters) and the session-to-project link. If a
        concurrent request inserts the same path first, the unique constraint
        fires, this transaction is rolled back and the winner's row is
        returned instead.

        Args:
            project_path: External project identifier (unique)
            user_id: Owner of the activity session to link
            initial_structure: Structure to store; defaults to an empty tree

        Returns:
            ProjectCreationResult with the record id, decoded structure and
            whether this call created the record

        Raises:
            InputValidationError: If project_path or user_id is empty
            ConflictError: If the record could not be created or re-read
        """
        if not project_path:
            raise InputValidationError("project_path is required")
        if not user_id:
            raise InputValidationError("user_id is required")

        structure = self._initial_structure(project_path, initial_structure)
        max_attempts = self.settings.project_create_max_attempts

        async with self._storage_guard("get_or_create_project"):
            for attempt in range(1, max_attempts + 1):
                existing = await self.get_project_by_path(project_path)
                if existing is not None:
                    return ProjectCreationResult(
                        record_id=existing.record_id,
                        structure=self.decode_structure(existing),
                        created=False,
                    )

                try:
                    record_id = await self._insert_project(project_path, user_id, structure)
                    await self.db.commit()
                except IntegrityError:
                    await self.db.rollback()
                    logger.info(
                        f"Project path already created concurrently (attempt {attempt}/{max_attempts}); "
                        f"re-reading existing record"
                    )
                    continue

                logger.info(f"Created project record {record_id} for user {user_id}")
                return ProjectCreationResult(record_id=record_id, structure=structure, created=True)

        raise ConflictError("Project could not be created; please retry")

    @staticmethod
    def _initial_structure(
        project_path: str, initial_structure: Optional[ProjectStructure]
    ) -> ProjectStructure:
        if initial_structure is None:
            return ProjectStructure(project_name=project_path)
        if not initial_structure.project_name:
            return initial_structure.model_copy(update={"project_name": project_path})
        return initial_structure

    async def _insert_project(
        self, project_path: str, user_id: str, structure: ProjectStructure
    ) -> UUID:
        """Insert session (if absent), project and link. Caller commits."""
        now = datetime.now(UTC)
        record_id = uuid.uuid4()

        await self._ensure_session(user_id, now)

        await self.db.execute(
            insert(ProjectRecord).values(
                record_id=record_id,
                project_path=project_path,
                structure_envelope=self.codec.encrypt(structure),
                created_at=now,
                updated_at=now,
            )
        )
        await self.db.execute(
            insert(SessionProjectLink).values(
                user_id=user_id,
                record_id=record_id,
                linked_at=now,
            )
        )
        await self.db.execute(
            update(ActivitySession)
            .where(ActivitySession.user_id == user_id)
            .values(last_heartbeat=now)
        )
        return record_id

    async def _ensure_session(self, user_id: str, now: datetime) -> None:
        """Insert a zeroed session for the user unless one already exists."""
        values = dict(
            user_id=user_id,
            is_online=False,
            is_editor_focused=False,
            focus_duration=0.0,
            total_duration=0.0,
            last_heartbeat=now,
            created_at=now,
        )

        dialect_name = self.db.get_bind().dialect.name
        if dialect_name == "postgresql":
            stmt = pg_insert(ActivitySession).values(**values).on_conflict_do_nothing(
                index_elements=["user_id"]
            )
        elif dialect_name == "sqlite":
            stmt = sqlite_insert(ActivitySession).values(**values).on_conflict_do_nothing(
                index_elements=["user_id"]
            )
        else:
            existing = await self.db.execute(
                select(ActivitySession.user_id).where(ActivitySession.user_id == user_id)
            )
            if existing.scalar_one_or_none() is not None:
                return
            stmt = insert(ActivitySession).values(**values)

        await self.db.execute(stmt)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------
    async def update_project_structure(self, record_id: UUID, structure: ProjectStructure) -> bool:
        """Replace a project's stored structure wholesale.

        Args:
            record_id: Project record id
            structure: New structure document

        Returns:
            True on success

        Raises:
            NotFoundError: If no record has this id
        """
        envelope = self.codec.encrypt(structure)

        async with self._storage_guard("update_project_structure"):
            result = await self.db.execute(
                update(ProjectRecord)
                .where(ProjectRecord.record_id == record_id)
                .values(structure_envelope=envelope, updated_at=datetime.now(UTC))
            )
            if not result.rowcount:
                await self.db.rollback()
                raise NotFoundError("Project not found")
            await self.db.commit()

        logger.debug(f"Updated structure for project record {record_id}")
        return True

    async def update_session_heartbeat(
        self,
        user_id: str,
        is_online: bool,
        is_editor_focused: bool,
        focus_duration: float,
        total_duration: float,
    ) -> bool:
        """Overwrite a session's liveness fields and refresh its heartbeat.

        Concurrent heartbeats for the same user are last-write-wins.

        Raises:
            InputValidationError: If durations are negative or focus exceeds total
            NotFoundError: If the user has no session yet
        """
        if not user_id:
            raise InputValidationError("user_id is required")
        if focus_duration < 0 or total_duration < 0:
            raise InputValidationError("Durations must be non-negative")
        if focus_duration > total_duration:
            raise InputValidationError("focus_duration cannot exceed total_duration")

        async with self._storage_guard("update_session_heartbeat"):
            result = await self.db.execute(
                update(ActivitySession)
                .where(ActivitySession.user_id == user_id)
                .values(
                    is_online=is_online,
                    is_editor_focused=is_editor_focused,
                    focus_duration=focus_duration,
                    total_duration=total_duration,
                    last_heartbeat=datetime.now(UTC),
                )
            )
            if not result.rowcount:
                await self.db.rollback()
                raise NotFoundError("No activity session found for user")
            await self.db.commit()

        return True
