"""Authentication helpers for JWT issuance and password handling.

Shared utilities used by the auth endpoints and the auth dependency:
- create_jwt / decode_jwt: HS256 bearer tokens with aud/iss/exp claims
- hash_password / check_password: bcrypt (cost 12)
- validate_password_strength: format rules
- DUMMY_HASH: timing-safe constant for user enumeration defense
"""

import re
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from grh.core.config import settings
from grh.core.errors import ValidationError

# bcrypt cost factor for password hashing
_BCRYPT_ROUNDS = 12

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"


def create_jwt(
    *,
    user_id: str,
    secret: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT with standard claims.

    Args:
        user_id: User UUID string for the sub claim.
        secret: HMAC signing secret.
        expires_delta: Time until expiration. Defaults to the configured TTL.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(minutes=settings.auth_token_ttl_minutes)
    payload = {
        "sub": user_id,
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now + ttl,
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_jwt(token: str) -> dict:
    """Decode and verify a bearer token.

    Raises:
        jwt.InvalidTokenError: On bad signature, expiry, audience or issuer.
    """
    return jwt.decode(
        token,
        settings.auth_secret.get_secret_value(),
        algorithms=["HS256"],
        audience=settings.auth_audience,
        issuer=settings.auth_issuer,
    )


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)
    ).decode()


def check_password(password: str, password_hash: str | None) -> bool:
    """Compare a password against a stored hash in constant time.

    Runs a comparison against DUMMY_HASH when no hash is stored so the
    response time does not reveal whether the account exists.
    """
    if not password_hash:
        bcrypt.checkpw(password.encode(), DUMMY_HASH)
        return False
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def validate_password_strength(password: str) -> None:
    """Validate password meets strength requirements.

    8-128 chars, letter + number + special character.

    Args:
        password: Plain-text password to validate.

    Raises:
        ValidationError: If password doesn't meet requirements.
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")
    if len(password) > 128:
        raise ValidationError("Password must be at most 128 characters")
    if not re.search(r"[a-zA-Z]", password):
        raise ValidationError("Password must contain at least one letter")
    if not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one number")
    if not re.search(r"[^a-zA-Z\d]", password):
        raise ValidationError("Password must contain at least one special character")
