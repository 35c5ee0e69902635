"""Authentication endpoints for password-based auth.

register, login, logout, me.

Security considerations:
- login: unknown email and wrong password produce the same 401, and an
  unknown email still costs one bcrypt comparison (dummy_hash)
- register: bcrypt hash, email uniqueness enforced by the database
- logout: clears the cookie only; tokens are not revoked server-side
"""

import logging

from fastapi import APIRouter, Response
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlalchemy.exc import IntegrityError

from app.api.deps import DbSession, TokenUserId
from app.core.auth import clear_auth_cookie, set_auth_cookie
from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, UnauthorizedError
from app.core.passwords import (
    burn_dummy_check,
    hash_password,
    validate_password,
    verify_password,
)
from app.core.responses import DataResponse
from app.core.tokens import issue_token
from app.models.user import User
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS_MSG = "Invalid credentials"

router = APIRouter()


# ===================================================================
# Request models
# ===================================================================


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            msg = "Name must not be blank"
            raise ValueError(msg)
        return stripped


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


# ===================================================================
# Helpers
# ===================================================================


def _user_summary(user: User) -> dict:
    """Public view of a user. Never includes the password hash."""
    return {"id": str(user.id), "name": user.name, "email": user.email}


def _start_session(response: Response, user: User) -> None:
    token = issue_token(user.id, secret=settings.auth_secret.get_secret_value())
    set_auth_cookie(response, token)


def _email_taken() -> ConflictError:
    return ConflictError(
        code="EMAIL_ALREADY_EXISTS",
        message="User with this email already exists",
        details=[{"loc": ["body", "email"], "msg": "already registered"}],
        status_code=400,
    )


# ===================================================================
# POST /auth/register
# ===================================================================


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    db: DbSession,
) -> DataResponse[dict]:
    """Register a new user with name, email and password.

    Unauthenticated. The pre-check gives the common case a clean error;
    the unique constraint settles concurrent registrations for the same
    email, and the loser gets the same 400.
    """
    validate_password(body.password)

    if await UserRepository.get_by_email(db, body.email) is not None:
        raise _email_taken()

    password_hash = hash_password(body.password)

    try:
        user = await UserRepository.create(
            db, name=body.name, email=body.email, password_hash=password_hash
        )
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise _email_taken() from exc

    _start_session(response, user)
    logger.info("Registered user %s", user.id)

    return DataResponse(data=_user_summary(user))


# ===================================================================
# POST /auth/login
# ===================================================================


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    db: DbSession,
) -> DataResponse[dict]:
    """Verify email + password and issue the session cookie.

    Unauthenticated. Unknown email and wrong password are indistinguishable
    to the caller, in body and in timing.
    """
    user = await UserRepository.get_by_email(db, body.email)

    if user is None:
        burn_dummy_check(body.password)
        logger.info("Login rejected")
        raise UnauthorizedError(_INVALID_CREDENTIALS_MSG)

    if not verify_password(body.password, user.password_hash):
        logger.info("Login rejected")
        raise UnauthorizedError(_INVALID_CREDENTIALS_MSG)

    _start_session(response, user)
    logger.info("Login: %s", user.id)

    return DataResponse(data=_user_summary(user))


# ===================================================================
# GET /auth/logout
# ===================================================================


@router.get("/logout")
async def logout(response: Response) -> DataResponse[dict]:
    """Clear the session cookie.

    The token is not revoked; it remains valid until it expires.
    """
    clear_auth_cookie(response)
    logger.info("Logout")
    return DataResponse(data={"message": "Logout successful"})


# ===================================================================
# GET /auth/me
# ===================================================================


@router.get("/me")
async def me(user_id: TokenUserId, db: DbSession) -> DataResponse[dict]:
    """Return the user behind the session token.

    401 when the token is missing or invalid; 404 when the token is valid
    but its user no longer exists.
    """
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User")
    return DataResponse(data=_user_summary(user))
