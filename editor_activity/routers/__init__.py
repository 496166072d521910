"""API routers."""
from editor_activity.routers import activity, health, projects, summary

__all__ = [
    "activity",
    "health",
    "projects",
    "summary",
]
