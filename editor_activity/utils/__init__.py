"""Utility helpers."""
from editor_activity.utils.datetime_helpers import ensure_utc

__all__ = ["ensure_utc"]
