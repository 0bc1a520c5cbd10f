"""Custom application exceptions.

The exception class is the error kind; handlers and callers discriminate on
the type, never on the message text.
"""


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        headers: dict[str, str] | None = None,
    ):
        """Initialize exception with message, status code and response headers."""
        self.message = message
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Missing or invalid bearer credentials."""

    def __init__(self, message: str = "Could not validate credentials"):
        """Initialize with 401 status code and a bearer challenge."""
        super().__init__(message, status_code=401, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class ConflictException(AppException):
    """Slot already taken or appointment in a terminal state."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class PolicyViolationException(AppException):
    """Scheduling policy breach, e.g. acting inside the cancellation window."""

    def __init__(self, message: str = "Scheduling policy violation"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)
