from secure_labs.types import ErrorCategory, ErrorResponse


class LabError(Exception):
    """Base class for errors that map to a client-visible error category."""

    category: ErrorCategory = ErrorCategory.INTERNAL_ERROR
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.category, message=self.message)


class ValidationFailed(LabError):
    category = ErrorCategory.VALIDATION_ERROR
    status_code = 400
    default_message = "Invalid request"


class TraversalDetected(LabError):
    category = ErrorCategory.TRAVERSAL_DETECTED
    status_code = 403
    default_message = "Path traversal detected"


class NotFound(LabError):
    category = ErrorCategory.NOT_FOUND
    status_code = 404
    default_message = "File not found"


class IsDirectory(LabError):
    category = ErrorCategory.IS_DIRECTORY
    status_code = 400
    default_message = "Cannot read a directory"


class InternalError(LabError):
    pass
