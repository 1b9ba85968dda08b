"""Authentication dependencies: resolve the calling user from the access token."""

from typing import Annotated

import jwt
from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from vidtube.core.config import Settings
from vidtube.core.database import get_db
from vidtube.core.errors import UnauthorizedError
from vidtube.core.security import decode_access_token, subject_to_user_id
from vidtube.models.user import User
from vidtube.services.media import MediaStorage

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Dependency: the Settings instance the running app was built with."""
    return request.app.state.settings


def get_media_storage(request: Request) -> MediaStorage:
    return request.app.state.media_storage


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    access_token: Annotated[str | None, Cookie(alias=ACCESS_TOKEN_COOKIE)] = None,
) -> User:
    """
    Dependency: require a valid access token and return the user it names.

    The token comes from the accessToken cookie or an Authorization: Bearer
    header. Raises 401 when it is missing, invalid or expired, or when the
    user no longer exists.
    """
    token = access_token or (credentials.credentials if credentials else None)
    if not token:
        raise UnauthorizedError("Unauthorized request")
    try:
        payload = decode_access_token(token, settings)
        user_id = subject_to_user_id(payload)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token is expired")
    except (jwt.PyJWTError, ValueError):
        raise UnauthorizedError("Invalid access token")

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Invalid access token")
    return user
