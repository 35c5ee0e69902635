"""Todo model - a task owned by exactly one user.

Every query against this table must filter by user_id as well as id.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"
_PRIORITY_SQL_LIST = ", ".join(f"'{p}'" for p in PRIORITIES)


class Todo(Base, TimestampMixin):
    """Task record scoped to its owner.

    Attributes:
        id: UUID primary key.
        title: Required short title.
        description: Optional longer text.
        completed: Completion flag. Defaults to False.
        priority: One of low/medium/high. Defaults to medium.
        due_date: Optional due timestamp.
        user_id: Owning user.
    """

    __tablename__ = "todos"
    __table_args__ = (
        CheckConstraint(
            f"priority IN ({_PRIORITY_SQL_LIST})",
            name="ck_todos_priority_valid",
        ),
        Index("ix_todos_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH),
        nullable=True,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=DEFAULT_PRIORITY,
        server_default=text(f"'{DEFAULT_PRIORITY}'"),
    )
    due_date: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="todos")
