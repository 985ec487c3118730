"""Credential helpers: password hashing, verification and strength rules.

Pipeline:
- hash_password / verify_password: bcrypt, the one-way credential primitive
  shared by login and the reset-token broker
- validate_password_strength: format rules (sync, no network)
- DUMMY_HASH: timing-safe constant for user enumeration defense
"""

import bcrypt

from account_auth.core.config import settings
from account_auth.core.errors import ValidationError, field_error

# bcrypt only looks at the first 72 bytes of a secret; newer releases
# raise instead of truncating, so longer input is rejected up front.
_BCRYPT_MAX_BYTES = 72

_MIN_PASSWORD_LENGTH = 8

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
# Pre-generated to avoid ~300ms bcrypt computation on every app startup.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"


def hash_password(secret: str, *, rounds: int | None = None) -> str:
    """Derive a bcrypt hash for a secret.

    Args:
        secret: Plain-text password or token.
        rounds: bcrypt cost factor. Defaults to settings.bcrypt_rounds.

    Returns:
        bcrypt hash as a str.
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(secret.encode(), salt).decode()


def verify_password(secret: str, hashed: str | bytes | None) -> bool:
    """Check a secret against a stored bcrypt hash in constant time.

    When ``hashed`` is missing the comparison still runs against
    DUMMY_HASH so callers take the same time whether or not a record
    exists.

    Args:
        secret: Plain-text value presented by the client.
        hashed: Stored bcrypt hash, or None when there is no record.

    Returns:
        True only if a real hash was given and it matches.
    """
    encoded = secret.encode()
    if len(encoded) > _BCRYPT_MAX_BYTES:
        encoded = encoded[:_BCRYPT_MAX_BYTES]
        over_limit = True
    else:
        over_limit = False

    if hashed is None:
        bcrypt.checkpw(encoded, DUMMY_HASH)
        return False

    stored = hashed.encode() if isinstance(hashed, str) else hashed
    try:
        matches = bcrypt.checkpw(encoded, stored)
    except ValueError:
        # Corrupt hash in storage; treat as a mismatch
        return False
    return matches and not over_limit


def validate_password_strength(password: str, confirmation: str | None) -> None:
    """Validate password length and confirmation.

    Args:
        password: Plain-text password to validate.
        confirmation: Value of the ``password_confirmation`` field.

    Raises:
        ValidationError: If the password is too short, too long for
            bcrypt, or the confirmation does not match.
    """
    if len(password) < _MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"The password must be at least {_MIN_PASSWORD_LENGTH} characters.",
            details=field_error("password", "PASSWORD_TOO_SHORT"),
        )
    if len(password.encode()) > _BCRYPT_MAX_BYTES:
        raise ValidationError(
            f"The password must be at most {_BCRYPT_MAX_BYTES} bytes.",
            details=field_error("password", "PASSWORD_TOO_LONG"),
        )
    if confirmation is None or confirmation != password:
        raise ValidationError(
            "The password confirmation does not match.",
            details=field_error("password", "PASSWORD_CONFIRMATION_MISMATCH"),
        )
