"""Session cookie helpers.

Binds the session token to the transport: an httpOnly, path-scoped,
SameSite cookie whose max-age matches the token TTL.

Pipeline:
- set_auth_cookie: attach a freshly issued token to a response
- clear_auth_cookie: overwrite the cookie with an already-expired one (logout)
- read_auth_cookie: extract the token from an inbound request
"""

from datetime import UTC, datetime

from fastapi import Request, Response

from app.core.config import settings
from app.core.tokens import TOKEN_TTL

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def _cookie_secure() -> bool:
    return settings.auth_cookie_secure or settings.is_production


def set_auth_cookie(response: Response, token: str) -> None:
    """Set httpOnly session cookie on response.

    Security: httpOnly prevents XSS cookie theft. Secure flag is forced on
    in production; SameSite comes from settings (strict by default).

    Args:
        response: FastAPI response object.
        token: Session token string.
    """
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=_cookie_secure(),
        samesite=settings.auth_cookie_samesite,
        path="/",
        max_age=int(TOKEN_TTL.total_seconds()),
    )


def clear_auth_cookie(response: Response) -> None:
    """Replace the session cookie with an empty, already-expired one.

    The token itself is not revoked server-side; it stays valid until its
    own expiry if a client kept a copy.

    Args:
        response: FastAPI response object.
    """
    response.set_cookie(
        key=settings.auth_cookie_name,
        value="",
        httponly=True,
        secure=_cookie_secure(),
        samesite=settings.auth_cookie_samesite,
        path="/",
        max_age=0,
        expires=_EPOCH,
    )


def read_auth_cookie(request: Request) -> str | None:
    """Return the session token carried by the request, if any."""
    return request.cookies.get(settings.auth_cookie_name) or None
