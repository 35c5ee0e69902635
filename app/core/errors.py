"""API error classes.

Every failure that reaches a client is one of these kinds. Handlers in
app.main map them to the {"error": {...}} envelope.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in repositories and routers
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

    Use for request body validation errors that Pydantic cannot express.
    Pass the offending field so the client can highlight it.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
        *,
        field: str | None = None,
    ) -> None:
        if field is not None and details is None:
            details = [{"loc": ["body", field], "msg": message}]
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when no valid auth credentials provided. The message must never
    say WHY authentication failed.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class NotFoundError(APIError):
    """Resource not found (404).

    Use when requested resource doesn't exist OR doesn't belong to user.

    WHY NOT SEPARATE "FORBIDDEN" FOR WRONG OWNERSHIP:
    - Revealing "exists but not yours" leaks information
    - From user perspective, resource simply doesn't exist
    """

    def __init__(self, resource: str) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
        )


class ConflictError(APIError):
    """Duplicate or conflicting resource (409 unless overridden).

    Accepts custom code for specific conflict types. The duplicate-email
    registration path reports 400 to keep the public contract stable.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
        *,
        status_code: int = 409,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details,
        )

