"""Session token issuance and verification.

Tokens are HS256 JWTs carrying the user id in ``sub`` plus ``iat``,
``exp``, ``aud`` and ``iss``. verify_token() never raises: expired,
tampered and malformed tokens all come back as None so every caller
treats them as "unauthenticated" without learning which check failed.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

# Session lifetime. Cookie max-age uses the same value.
TOKEN_TTL = timedelta(days=7)

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["sub", "exp", "iat", "aud", "iss"]


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a session token."""

    user_id: uuid.UUID
    issued_at: datetime
    expires_at: datetime


def issue_token(
    user_id: uuid.UUID | str,
    *,
    secret: str,
    ttl: timedelta = TOKEN_TTL,
    now: datetime | None = None,
) -> str:
    """Create a signed session token for a user.

    Args:
        user_id: User UUID for the sub claim.
        secret: HMAC signing secret.
        ttl: Time until expiration. The application always uses TOKEN_TTL.
        now: Issue time override (tests).

    Returns:
        Encoded JWT string.
    """
    issued = now or datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "iat": issued,
        "exp": issued + ttl,
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def verify_token(token: str, *, secret: str) -> TokenClaims | None:
    """Verify a session token and return its claims.

    Checks signature, expiry, audience, issuer and claim structure.

    Args:
        token: Encoded JWT from the session cookie.
        secret: HMAC signing secret.

    Returns:
        TokenClaims if the token is valid, None otherwise.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_ALGORITHM],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer,
            options={"require": _REQUIRED_CLAIMS},
        )
        user_id = uuid.UUID(str(payload["sub"]))
        issued_at = datetime.fromtimestamp(payload["iat"], UTC)
        expires_at = datetime.fromtimestamp(payload["exp"], UTC)
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as exc:
        logger.debug("Session token rejected: %s", type(exc).__name__)
        return None

    return TokenClaims(user_id=user_id, issued_at=issued_at, expires_at=expires_at)
