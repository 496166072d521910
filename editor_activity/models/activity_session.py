"""Activity session model: one liveness/duration row per user."""
from datetime import datetime, UTC
from sqlalchemy import Boolean, Column, DateTime, Float, Index, String
from editor_activity.database import Base


class ActivitySession(Base):
    """Tracks a user's editor session state.

    ``is_online`` and ``is_editor_focused`` are refreshed by heartbeats and
    demoted by the liveness sweep once ``last_heartbeat`` goes stale.
    """

    __tablename__ = "activity_sessions"

    user_id = Column(String(64), primary_key=True)
    is_online = Column(Boolean, default=False, nullable=False)
    is_editor_focused = Column(Boolean, default=False, nullable=False)
    focus_duration = Column(Float, default=0.0, nullable=False)
    total_duration = Column(Float, default=0.0, nullable=False)
    last_heartbeat = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    __table_args__ = (
        Index("ix_activity_sessions_last_heartbeat", "last_heartbeat"),
    )

    def __repr__(self):
        return (f"<{self.__class__.__name__}(user_id={self.user_id}, is_online={self.is_online}, "
                f"last_heartbeat={self.last_heartbeat})>")
