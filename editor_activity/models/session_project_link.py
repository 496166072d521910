"""Join relation between activity sessions and the projects they created."""
from datetime import datetime, UTC
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from editor_activity.database import Base
from editor_activity.models.base import get_uuid_column


class SessionProjectLink(Base):
    """Append-only link from a user's session to a project record.

    ``link_id`` increases monotonically and defines the order of a session's
    linked projects.
    """

    __tablename__ = "activity_session_projects"

    link_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(64),
        ForeignKey("activity_sessions.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    record_id = get_uuid_column(
        ForeignKey("project_records.record_id", ondelete="CASCADE"),
        nullable=False,
    )
    linked_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "record_id", name="uq_session_project_link"),
    )

    def __repr__(self):
        return f"<{self.__class__.__name__}(user_id={self.user_id}, record_id={self.record_id})>"
