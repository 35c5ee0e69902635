"""SQLAlchemy ORM models for the todo tracker.

All models are exported from this module for convenient imports:
    from app.models import User, Todo

- base.py: Base, TimestampMixin
- user.py: User (credential store)
- todo.py: Todo (owned by a User)
"""

from app.models.base import Base, TimestampMixin
from app.models.todo import Todo
from app.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Todo",
]
