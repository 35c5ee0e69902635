"""Repository for Todo operations.

All read/write operations are scoped to user_id. A todo id on its own is
never enough to reach a row; not-owned and not-found both return None.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.todo import DEFAULT_PRIORITY, Todo

# Fields that may be updated via TodoRepository.update().
# Security: Never allow updating id, user_id, or timestamps.
# - id: primary key, immutable
# - user_id: FK, set at creation (changing would break ownership)
# - created_at/updated_at: server-managed timestamps
_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "completed",
        "priority",
        "due_date",
    }
)


class TodoRepository:
    """Stateless repository for Todo operations.

    All methods are static; no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
    ) -> list[Todo]:
        """Fetch all todos owned by a user, newest first.

        Args:
            db: Async database session.
            user_id: Authenticated user's UUID.

        Returns:
            List of Todo records ordered by created_at descending.
        """
        stmt = (
            select(Todo)
            .where(Todo.user_id == user_id)
            .order_by(Todo.created_at.desc(), Todo.id.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        todo_id: uuid.UUID,
        *,
        user_id: uuid.UUID,
    ) -> Todo | None:
        """Fetch a todo by ID, scoped to user.

        Args:
            db: Async database session.
            todo_id: UUID primary key.
            user_id: Authenticated user's UUID (ownership check).

        Returns:
            Todo if found and owned by user, None otherwise.
        """
        stmt = select(Todo).where(Todo.id == todo_id, Todo.user_id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        title: str,
        description: str | None = None,
        priority: str = DEFAULT_PRIORITY,
        due_date: datetime | None = None,
    ) -> Todo:
        """Create a todo owned by user_id.

        Args:
            db: Async database session.
            user_id: Owner's UUID.
            title: Required title.
            description: Optional description.
            priority: low/medium/high.
            due_date: Optional due timestamp.

        Returns:
            Created Todo with database-generated fields populated.
        """
        todo = Todo(
            user_id=user_id,
            title=title,
            description=description,
            completed=False,
            priority=priority,
            due_date=due_date,
        )
        db.add(todo)
        await db.flush()
        await db.refresh(todo)
        return todo

    @staticmethod
    async def update(
        db: AsyncSession,
        todo_id: uuid.UUID,
        *,
        user_id: uuid.UUID,
        **kwargs: Any,
    ) -> Todo | None:
        """Apply a partial update to a todo owned by user_id.

        Only the given fields change. Runs as a single UPDATE matched by
        id and owner, so at most one row is touched.

        Args:
            db: Async database session.
            todo_id: UUID of the todo.
            user_id: Authenticated user's UUID (ownership check).
            **kwargs: Field names and values to update.

        Returns:
            Updated Todo if found and owned, None otherwise.

        Raises:
            ValueError: If an unknown field name is passed.
        """
        unknown = set(kwargs) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Unknown fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        if not kwargs:
            return await TodoRepository.get_by_id(db, todo_id, user_id=user_id)

        stmt = (
            update(Todo)
            .where(Todo.id == todo_id, Todo.user_id == user_id)
            .values(**kwargs)
            .returning(Todo)
        )
        result = await db.execute(stmt)
        todo = result.scalar_one_or_none()
        if todo is not None:
            await db.refresh(todo)
        return todo

    @staticmethod
    async def delete(
        db: AsyncSession,
        todo_id: uuid.UUID,
        *,
        user_id: uuid.UUID,
    ) -> bool:
        """Delete a todo owned by user_id.

        Args:
            db: Async database session.
            todo_id: UUID of the todo.
            user_id: Authenticated user's UUID (ownership check).

        Returns:
            True if a row was deleted, False if not found or not owned.
        """
        stmt = (
            delete(Todo)
            .where(Todo.id == todo_id, Todo.user_id == user_id)
            .returning(Todo.id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None
