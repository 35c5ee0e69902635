"""Shared dependencies for API endpoints.

The auth gate: every protected route depends on get_current_user_id (or
get_current_user), which receives the inbound Request explicitly.

Gate steps:
1. Read the session token from the cookie (absent: deny, no lookup)
2. Verify signature, expiry, audience, issuer (invalid: deny)
3. Resolve the claimed user in the credential store (missing: deny)

WHY DEPENDENCY INJECTION:
- Consistent auth across all endpoints
- No ambient request state; the request is a parameter
- Testable with mocked dependencies
"""

import uuid
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import read_auth_cookie
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import UnauthorizedError
from app.core.tokens import verify_token
from app.models import User
from app.repositories.user_repository import UserRepository


def get_token_user_id(request: Request) -> uuid.UUID:
    """Get the user ID claimed by the request's session token.

    Steps 1-2 of the gate. Does not touch the database.

    Args:
        request: HTTP request (injected by FastAPI).

    Returns:
        UUID from the token's sub claim.

    Raises:
        UnauthorizedError: 401 for any token failure, cause not disclosed.
    """
    token = read_auth_cookie(request)
    if not token:
        raise UnauthorizedError()

    claims = verify_token(token, secret=settings.auth_secret.get_secret_value())
    if claims is None:
        raise UnauthorizedError()

    return claims.user_id


async def get_current_user(
    user_id: Annotated[uuid.UUID, Depends(get_token_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get full User object for current user.

    Step 3 of the gate. A valid token whose user no longer exists is
    denied exactly like a missing token.

    Args:
        user_id: User ID from the verified token (injected).
        db: Database session (injected).

    Returns:
        User object for the current user.

    Raises:
        UnauthorizedError: 401 if the user record is gone.
    """
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError()
    return user


async def get_current_user_id(
    user: Annotated[User, Depends(get_current_user)],
) -> uuid.UUID:
    """Get the resolved current user's ID (full gate)."""
    return user.id


# Reusable type aliases for dependency injection
TokenUserId = Annotated[uuid.UUID, Depends(get_token_user_id)]
CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
