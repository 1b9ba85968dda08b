"""Session issuance: token pairs, refresh-token rotation and revocation."""

import logging
import secrets
from typing import TYPE_CHECKING

import jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vidtube.core.errors import InternalError, UnauthorizedError
from vidtube.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    subject_to_user_id,
)
from vidtube.models import User
from vidtube.schemas.users import TokenPair

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)

TOKEN_GENERATION_FAILED = "Something went wrong while generating access and refresh token"


def issue_session_pair(db: Session, user_id: int, settings: "Settings") -> TokenPair:
    """
    Generate an access/refresh pair for user_id and store the refresh token on the user.

    The stored value replaces any previous refresh token, so only the newest
    pair can be refreshed. Every failure surfaces as the same InternalError.
    """
    try:
        user = db.get(User, user_id)
        if user is None:
            raise LookupError(f"user {user_id} not found")
        access_token = create_access_token(user, settings)
        refresh_token = create_refresh_token(user.id, settings)
        user.refresh_token = refresh_token
        db.commit()
    except (LookupError, SQLAlchemyError, jwt.PyJWTError) as e:
        db.rollback()
        logger.error("Token issuance failed for user_id=%s: %s", user_id, e)
        raise InternalError(TOKEN_GENERATION_FAILED) from e
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def rotate_refresh_token(db: Session, presented: str | None, settings: "Settings") -> TokenPair:
    """
    Exchange a valid, currently stored refresh token for a new pair.

    A token that verifies but no longer matches the stored value was already
    rotated out (or logged out) and is rejected.
    """
    if not presented:
        raise UnauthorizedError("Unauthorized request")
    try:
        payload = decode_refresh_token(presented, settings)
        user_id = subject_to_user_id(payload)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Refresh token is expired")
    except (jwt.PyJWTError, ValueError):
        raise UnauthorizedError("Invalid refresh token")

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Invalid refresh token")
    if not user.refresh_token or not secrets.compare_digest(
        presented.encode("utf-8"), user.refresh_token.encode("utf-8")
    ):
        logger.warning("Rejected stale refresh token for user_id=%s", user_id)
        raise UnauthorizedError("Refresh token is expired or used")

    pair = issue_session_pair(db, user.id, settings)
    logger.info("Refresh token rotated for user_id=%s", user.id)
    return pair


def revoke_refresh_token(db: Session, user: User) -> None:
    """Clear the stored refresh token so no outstanding one can be exchanged."""
    user.refresh_token = None
    db.commit()
