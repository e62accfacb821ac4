class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when input is malformed: bad time format, inverted or out-of-bounds ranges."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class NotFoundError(AppError):
    """Raised when a referenced resource is missing or inactive."""
    def __init__(self, resource_type: str, resource_id, message: str = None):
        super().__init__(
            message or f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class ConflictError(AppError):
    """Raised on overlapping bookings, duplicate keys or refused deletes."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class UniqueViolationError(ConflictError):
    """Raised when the database rejects a write on a unique constraint."""
    def __init__(self, message: str = "Uniqueness constraint violated", details: dict = None):
        super().__init__(message, details=details)
