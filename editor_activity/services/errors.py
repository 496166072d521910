"""Error taxonomy shared by the activity services.

Every error carries a stable ``kind`` and an HTTP ``status_code`` so the
transport layer can render it without inspecting the message.
"""


class ActivityServiceError(RuntimeError):
    """Base exception for activity tracking errors."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(ActivityServiceError):
    """Raised when required input is missing or malformed."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(ActivityServiceError):
    """Raised when a referenced session or project does not exist."""

    kind = "not_found"
    status_code = 404


class ConflictError(ActivityServiceError):
    """Raised when a unique-key collision could not be resolved by re-reading."""

    kind = "conflict"
    status_code = 409


class StructureDecodeError(ActivityServiceError):
    """Raised when a stored structure envelope cannot be decrypted or parsed."""

    kind = "decode_error"
    status_code = 500


class StoreUnavailableError(ActivityServiceError):
    """Raised on transient storage failures. Safe to retry with backoff."""

    kind = "store_unavailable"
    status_code = 503


class UnauthenticatedError(ActivityServiceError):
    """Raised when a bearer token is missing, malformed, expired or invalid."""

    kind = "unauthenticated"
    status_code = 401
