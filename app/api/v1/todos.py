"""Todos API router.

Every endpoint depends on the full auth gate (CurrentUserId) and passes
the resolved owner to TodoRepository, which filters by id AND owner.

Endpoints:
- GET    /todos         - list the caller's todos, newest first
- POST   /todos         - create a todo
- GET    /todos/{id}    - fetch one todo
- PUT    /todos/{id}    - partial update (only fields present in the body)
- DELETE /todos/{id}    - delete a todo

Not-found and not-owned are the same 404. A malformed id is also a 404,
so probing ids reveals nothing.
"""

import logging
import uuid
from datetime import datetime
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.api.deps import CurrentUserId, DbSession
from app.core.errors import NotFoundError
from app.core.responses import DataResponse, ListMeta, ListResponse
from app.models.todo import (
    DEFAULT_PRIORITY,
    DESCRIPTION_MAX_LENGTH,
    PRIORITIES,
    TITLE_MAX_LENGTH,
    Todo,
)
from app.repositories.todo_repository import TodoRepository

logger = logging.getLogger(__name__)

Priority = Literal[PRIORITIES]

# Fields that may be sent as null (or "") to clear them on update.
_CLEARABLE_FIELDS: frozenset[str] = frozenset({"description", "due_date"})

router = APIRouter()


# =============================================================================
# Request Schemas
# =============================================================================


class _TodoFields(BaseModel):
    """Shared field handling for create/update bodies.

    Accepts camelCase (dueDate) as sent by the browser client, and
    snake_case for other callers.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("title", mode="before", check_fields=False)
    @classmethod
    def _strip_title(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("description", mode="before", check_fields=False)
    @classmethod
    def _blank_description_is_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("due_date", mode="before", check_fields=False)
    @classmethod
    def _blank_due_date_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CreateTodoRequest(_TodoFields):
    """Request body for creating a todo. Only title is required.

    Unknown keys (completed, userId, ...) are dropped: a new todo always
    starts incomplete and belongs to the caller.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Priority | None = None
    due_date: datetime | None = None


class UpdateTodoRequest(_TodoFields):
    """Request body for partially updating a todo.

    All fields optional; only provided fields are updated. description
    and dueDate may be null or "" to clear them; title, completed and
    priority may not be null.
    """

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    completed: bool | None = None
    priority: Priority | None = None
    due_date: datetime | None = None

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> "UpdateTodoRequest":
        for name in self.model_fields_set - _CLEARABLE_FIELDS:
            if getattr(self, name) is None:
                msg = f"{to_camel(name)} cannot be null"
                raise ValueError(msg)
        return self


# =============================================================================
# Helper Functions
# =============================================================================


def _parse_todo_id(raw: str) -> uuid.UUID:
    """Parse a path id; anything unparseable is simply not found."""
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise NotFoundError("Todo") from None


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _todo_to_dict(todo: Todo) -> dict:
    """Convert Todo model to API response dict.

    Args:
        todo: The Todo model instance.

    Returns:
        Dict with todo data for API response.
    """
    return {
        "id": str(todo.id),
        "title": todo.title,
        "description": todo.description,
        "completed": todo.completed,
        "priority": todo.priority,
        "dueDate": _isoformat(todo.due_date),
        "userId": str(todo.user_id),
        "createdAt": _isoformat(todo.created_at),
        "updatedAt": _isoformat(todo.updated_at),
    }


# =============================================================================
# Endpoints
# =============================================================================


@router.get("")
async def list_todos(user_id: CurrentUserId, db: DbSession) -> ListResponse[dict]:
    """List the caller's todos, newest first."""
    todos = await TodoRepository.list_for_user(db, user_id=user_id)
    return ListResponse(
        data=[_todo_to_dict(t) for t in todos],
        meta=ListMeta(total=len(todos)),
    )


@router.post("", status_code=201)
async def create_todo(
    body: CreateTodoRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Create a todo owned by the caller.

    priority defaults to "medium" and completed to false.
    """
    todo = await TodoRepository.create(
        db,
        user_id=user_id,
        title=body.title,
        description=body.description,
        priority=body.priority or DEFAULT_PRIORITY,
        due_date=body.due_date,
    )
    await db.commit()
    logger.debug("Created todo %s for user %s", todo.id, user_id)
    return DataResponse(data=_todo_to_dict(todo))


@router.get("/{todo_id}")
async def get_todo(
    todo_id: str,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Get a todo by ID."""
    todo = await TodoRepository.get_by_id(db, _parse_todo_id(todo_id), user_id=user_id)
    if todo is None:
        raise NotFoundError("Todo")
    return DataResponse(data=_todo_to_dict(todo))


@router.put("/{todo_id}")
async def update_todo(
    todo_id: str,
    body: UpdateTodoRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Partially update a todo.

    Only fields present in the request body change.
    """
    changes = body.model_dump(exclude_unset=True)
    todo = await TodoRepository.update(
        db, _parse_todo_id(todo_id), user_id=user_id, **changes
    )
    if todo is None:
        raise NotFoundError("Todo")
    await db.commit()
    return DataResponse(data=_todo_to_dict(todo))


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: str,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Delete a todo."""
    deleted = await TodoRepository.delete(db, _parse_todo_id(todo_id), user_id=user_id)
    if not deleted:
        raise NotFoundError("Todo")
    await db.commit()
    logger.debug("Deleted todo %s for user %s", todo_id, user_id)
    return DataResponse(data={"message": "Todo deleted successfully"})
