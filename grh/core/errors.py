"""API error classes.

Every business failure raised by the lifecycle engine is an APIError subclass.
The exception handlers in grh.main map them to HTTP status codes and the
standard error envelope.

Taxonomy:
- ValidationError (400): field or cross-field rule violated
- UnauthorizedError (401): no valid credentials
- ForbiddenError (403): actor lacks role or ownership
- NotFoundError (404): referenced entity does not exist
- ConflictError (400): illegal state for the requested operation
- DependencyFailure (500): persistence or blob store failure
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Details carry one ``{"field", "message"}`` entry per violated rule so
    clients can highlight every offending field at once.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when no valid auth credentials provided.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ForbiddenError(APIError):
    """Not allowed to perform the action (403).

    Use when auth is valid but the actor lacks the profile, role or
    ownership the authorization policy requires.
    """

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
        )


AuthorizationError = ForbiddenError


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Illegal state for the requested operation (400).

    Raised for terminal statuses, repeated validation or rejection,
    publishing an expired posting, missing CV profile, and duplicates.
    Accepts a custom code for specific conflict types.
    """

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details,
        )


class DependencyFailure(APIError):
    """Persistence or blob store failure (500)."""

    def __init__(self, message: str = "A storage dependency failed") -> None:
        super().__init__(
            code="DEPENDENCY_FAILURE",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
