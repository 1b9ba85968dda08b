"""Password hashing and JWT creation/verification for access and refresh tokens."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

if TYPE_CHECKING:
    from vidtube.core.config import Settings
    from vidtube.models.user import User

# Bcrypt cost (rounds); overridable through settings.BCRYPT_ROUNDS.
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the UTF-8 encoding.
PASSWORD_MAX_BYTES = 72
PASSWORD_MAX_LEN = PASSWORD_MAX_BYTES
USERNAME_MAX_LEN = 64

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def password_byte_length_ok(plain_password: str) -> bool:
    """True if bcrypt sees the whole password (at most 72 UTF-8 bytes)."""
    return len(plain_password.encode("utf-8")) <= PASSWORD_MAX_BYTES


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a plain-text password for storage. Do not store plain passwords.
    Raises ValueError for passwords longer than 72 UTF-8 bytes instead of truncating.
    """
    if not password_byte_length_ok(plain_password):
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Never raises on mismatch."""
    if not password_byte_length_ok(plain_password):
        return False
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


def generate_jti() -> str:
    """Unique token id; keeps two tokens issued in the same second distinct."""
    return uuid.uuid4().hex


def create_access_token(user: "User", settings: "Settings") -> str:
    """Create a short-lived JWT carrying the user's id, username, email and fullname."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "fullname": user.fullname,
        "type": ACCESS_TOKEN_TYPE,
        "jti": generate_jti(),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(
        payload,
        settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def create_refresh_token(user_id: int, settings: "Settings") -> str:
    """Create a long-lived JWT carrying only the user id."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": REFRESH_TOKEN_TYPE,
        "jti": generate_jti(),
        "iat": now,
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(
        payload,
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def _decode(token: str, secret: str, algorithm: str, expected_type: str) -> dict[str, Any]:
    decoded = jwt.decode(token, secret, algorithms=[algorithm])
    if decoded.get("type") != expected_type:
        raise jwt.InvalidTokenError("Wrong token type")
    return decoded


def decode_access_token(token: str, settings: "Settings") -> dict[str, Any]:
    """
    Decode and validate an access token; return its payload.
    Raises jwt.PyJWTError on invalid, expired or wrong-type token.
    """
    return _decode(
        token,
        settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        ACCESS_TOKEN_TYPE,
    )


def decode_refresh_token(token: str, settings: "Settings") -> dict[str, Any]:
    """
    Decode and validate a refresh token; return its payload.
    Raises jwt.PyJWTError on invalid, expired or wrong-type token.
    """
    return _decode(
        token,
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        REFRESH_TOKEN_TYPE,
    )


def subject_to_user_id(payload: dict[str, Any]) -> int:
    """Parse the integer user id from a decoded token. Raises ValueError if missing or malformed."""
    sub = payload.get("sub")
    if not sub:
        raise ValueError("Token has no subject")
    return int(sub)
