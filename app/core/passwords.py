"""Password hashing and verification.

bcrypt with a per-call random salt and a configurable work factor
(PASSWORD_HASH_ROUNDS). Plaintext passwords never leave this module in
any stored form.
"""

from functools import lru_cache

import bcrypt

from app.core.config import settings
from app.core.errors import ValidationError

MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes; longer inputs are rejected up front.
MAX_PASSWORD_LENGTH = 72

# Compared against on user-not-found so the login costs one real bcrypt check.
# Security: prevents user enumeration via response time differences.
_DUMMY_PASSWORD = b"todo-tracker-dummy-password"  # nosec B105


def validate_password(password: str) -> None:
    """Check password length rules before hashing.

    Args:
        password: Plain-text password to validate.

    Raises:
        ValidationError: If the password is too short or too long.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )
    if len(password.encode()) > MAX_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_LENGTH} bytes",
            field="password",
        )


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured work factor.

    Raises:
        ValueError: From bcrypt on unusable input. Callers treat this as
            an internal failure, not a user error.
    """
    salt = bcrypt.gensalt(rounds=settings.password_hash_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str | bytes) -> bool:
    """Constant-time comparison against a bcrypt hash.

    Returns False on mismatch and on a malformed stored hash.
    """
    if isinstance(password_hash, str):
        password_hash = password_hash.encode()
    try:
        return bcrypt.checkpw(password.encode(), password_hash)
    except ValueError:
        return False


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> bytes:
    return bcrypt.hashpw(_DUMMY_PASSWORD, bcrypt.gensalt(rounds=rounds))


def dummy_hash() -> bytes:
    """bcrypt digest at the configured work factor, built once per factor.

    Must share the cost of real user hashes, otherwise unknown-email
    logins finish measurably faster or slower than wrong-password ones.
    """
    return _dummy_hash(settings.password_hash_rounds)


def burn_dummy_check(password: str) -> None:
    """Spend one bcrypt comparison when there is no user to check against."""
    verify_password(password, dummy_hash())
