"""Activity tracking services."""
from editor_activity.services.errors import (
    ActivityServiceError,
    ConflictError,
    InputValidationError,
    NotFoundError,
    StoreUnavailableError,
    StructureDecodeError,
    UnauthenticatedError,
)
from editor_activity.services.structure_codec import StructureCodec, get_structure_codec
from editor_activity.services.structure_aggregator import FlatFileRecord, StructureTotals, flatten
from editor_activity.services.activity_store import ActivityStore, ProjectCreationResult
from editor_activity.services.liveness_service import LivenessService
from editor_activity.services.query_service import ActivityQueryService, project_display_name

__all__ = [
    "ActivityServiceError",
    "ConflictError",
    "InputValidationError",
    "NotFoundError",
    "StoreUnavailableError",
    "StructureDecodeError",
    "UnauthenticatedError",
    "StructureCodec",
    "get_structure_codec",
    "FlatFileRecord",
    "StructureTotals",
    "flatten",
    "ActivityStore",
    "ProjectCreationResult",
    "LivenessService",
    "ActivityQueryService",
    "project_display_name",
]
