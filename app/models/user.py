"""User model - authentication foundation.

Owns credentials. No FK dependencies.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.todo import Todo


class User(Base, TimestampMixin):
    """User account for authentication.

    Attributes:
        id: UUID primary key.
        name: Display name given at registration.
        email: Unique email address, stored lower-cased.
        password_hash: bcrypt hash. Never serialized to clients.
        created_at: Account creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    todos: Mapped[list["Todo"]] = relationship(
        "Todo",
        back_populates="user",
    )

    def __repr__(self) -> str:
        # password_hash deliberately omitted
        return f"User(id={self.id!r}, email={self.email!r})"
