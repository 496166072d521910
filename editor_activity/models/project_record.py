"""Project record model holding the encrypted project structure."""
import uuid
from datetime import datetime, UTC
from sqlalchemy import Column, DateTime, JSON, Text
from editor_activity.database import Base
from editor_activity.models.base import get_uuid_column


class ProjectRecord(Base):
    """One row per distinct project path.

    ``structure_envelope`` only ever holds the ``{iv, ciphertext}`` envelope
    produced by the structure codec.
    """

    __tablename__ = "project_records"

    record_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    project_path = Column(Text, unique=True, nullable=False)
    structure_envelope = Column(JSON, nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self):
        return f"<{self.__class__.__name__}(record_id={self.record_id}, project_path={self.project_path})>"
