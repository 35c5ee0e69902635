"""Response envelope models.

Consistent response format for all API endpoints.

WHY RESPONSE ENVELOPES:
- Consistent structure across all endpoints
- Easy to distinguish success from error responses
- Collection metadata in a predictable location
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ListMeta(BaseModel):
    """Metadata for collection responses.

    Attributes:
        total: Number of items in the collection.
    """

    total: int


class DataResponse(BaseModel, Generic[T]):
    """Standard response envelope for single resources.

    Usage:
        @router.get("/todos/{todo_id}")
        async def get_todo(...) -> DataResponse[dict]:
            return DataResponse(data=_todo_to_dict(todo))
    """

    data: T


class ListResponse(BaseModel, Generic[T]):
    """Standard response envelope for collections."""

    data: list[T]
    meta: ListMeta


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        details: Optional list of field-level errors (for validation).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=ErrorDetail(code=exc.code, message=exc.message)
            ).model_dump(),
        )
    """

    error: ErrorDetail
