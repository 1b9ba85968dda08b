"""User account routes: registration, sessions, profile and the channel / history queries."""

from pathlib import PurePath
from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from sqlalchemy.orm import Session

from vidtube.api.v1.auth import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_app_settings,
    get_current_user,
    get_media_storage,
)
from vidtube.core.config import Settings
from vidtube.core.database import get_db
from vidtube.core.errors import BadRequestError
from vidtube.models.user import User
from vidtube.schemas.channels import ChannelProfile
from vidtube.schemas.common import ApiResponse, ok
from vidtube.schemas.media import UploadResult
from vidtube.schemas.users import (
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    RefreshTokenRequest,
    RegisterForm,
    TokenPair,
    UpdateAccountRequest,
    UserOut,
)
from vidtube.schemas.videos import WatchedVideo
from vidtube.services import accounts
from vidtube.services.channels import get_channel_profile
from vidtube.services.history import get_watch_history
from vidtube.services.media import MediaFile, MediaStorage
from vidtube.services.sessions import rotate_refresh_token

router = APIRouter()

MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MB
ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})

# Session cookies are only readable by the server and only sent over HTTPS.
COOKIE_OPTIONS = {"httponly": True, "secure": True}

DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Storage = Annotated[MediaStorage, Depends(get_media_storage)]
CurrentUser = Annotated[User, Depends(get_current_user)]


async def _read_image(upload: UploadFile | None, field: str) -> MediaFile | None:
    """Read an uploaded image into memory; None when the field was not sent."""
    if upload is None or not upload.filename:
        return None
    if PurePath(upload.filename).suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
        raise BadRequestError(
            f"{field} must be an image ({', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))})"
        )
    content = await upload.read()
    if not content:
        raise BadRequestError(f"{field} file is empty")
    if len(content) > MAX_IMAGE_BYTES:
        raise BadRequestError(
            f"{field} must not exceed {MAX_IMAGE_BYTES // (1024 * 1024)} MB"
        )
    return MediaFile(content=content, filename=upload.filename, content_type=upload.content_type)


def _set_session_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    response.set_cookie(ACCESS_TOKEN_COOKIE, access_token, **COOKIE_OPTIONS)
    response.set_cookie(REFRESH_TOKEN_COOKIE, refresh_token, **COOKIE_OPTIONS)


@router.post("/register", response_model=ApiResponse[UserOut], status_code=201)
async def register_user(
    db: DbSession,
    settings: AppSettings,
    storage: Storage,
    username: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    fullname: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[UserOut]:
    """
    Register a new account (multipart form).

    Text fields username, email, fullname and password are required; an
    avatar image is required and a coverImage is optional. Both images are
    uploaded to media storage before the user is created.
    """
    try:
        form = RegisterForm(
            username=username, email=email, fullname=fullname, password=password
        )
    except ValidationError as e:
        raise BadRequestError(
            "All fields are required",
            jsonable_encoder(e.errors(include_url=False)),
        ) from e
    avatar_file = await _read_image(avatar, "avatar")
    cover_file = await _read_image(cover_image, "coverImage")
    user = await accounts.register(db, form, avatar_file, cover_file, storage, settings)
    return ok(user, "User registered successfully", status_code=201)


@router.post("/login", response_model=ApiResponse[LoginData])
def login_user(
    body: LoginRequest,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> ApiResponse[LoginData]:
    """Log in with username or email plus password; sets accessToken and refreshToken cookies."""
    data = accounts.login(db, body, settings)
    _set_session_cookies(response, data.access_token, data.refresh_token)
    return ok(data, "User logged in successfully")


@router.post("/logout", response_model=ApiResponse[dict])
def logout_user(response: Response, db: DbSession, user: CurrentUser) -> ApiResponse[dict]:
    """Revoke the stored refresh token and clear both session cookies."""
    accounts.logout(db, user)
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **COOKIE_OPTIONS)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **COOKIE_OPTIONS)
    return ok({}, "User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
def refresh_access_token(
    response: Response,
    db: DbSession,
    settings: AppSettings,
    body: RefreshTokenRequest | None = None,
    refresh_cookie: Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> ApiResponse[TokenPair]:
    """
    Exchange the current refresh token (cookie or JSON body refreshToken) for a new pair.

    The presented token stops working as soon as the new pair is issued.
    """
    presented = refresh_cookie or (body.refresh_token if body else None)
    pair = rotate_refresh_token(db, presented, settings)
    _set_session_cookies(response, pair.access_token, pair.refresh_token)
    return ok(pair, "Access token refreshed")


@router.post("/change-password", response_model=ApiResponse[dict])
def change_current_password(
    body: ChangePasswordRequest,
    db: DbSession,
    settings: AppSettings,
    user: CurrentUser,
) -> ApiResponse[dict]:
    accounts.change_password(db, user, body, settings)
    return ok({}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserOut])
def get_current_user_profile(user: CurrentUser) -> ApiResponse[UserOut]:
    return ok(UserOut.model_validate(user), "Current user fetched successfully")


@router.patch("/update-accounts", response_model=ApiResponse[UserOut])
def update_account_details(
    body: UpdateAccountRequest,
    db: DbSession,
    user: CurrentUser,
) -> ApiResponse[UserOut]:
    """Update fullname and/or email of the current user."""
    updated = accounts.update_account_details(db, user, body)
    return ok(updated, "Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UploadResult])
async def update_avatar(
    db: DbSession,
    storage: Storage,
    user: CurrentUser,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse[UploadResult]:
    """Replace the avatar with the uploaded image; returns the storage result."""
    file = await _read_image(avatar, "avatar")
    result = await accounts.update_avatar(db, user, file, storage)
    return ok(result, "Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UploadResult])
async def update_cover_image(
    db: DbSession,
    storage: Storage,
    user: CurrentUser,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[UploadResult]:
    """Replace the cover image with the uploaded image; returns the storage result."""
    file = await _read_image(cover_image, "coverImage")
    result = await accounts.update_cover_image(db, user, file, storage)
    return ok(result, "Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfile])
def channel_profile(username: str, db: DbSession, user: CurrentUser) -> ApiResponse[ChannelProfile]:
    """Channel profile with subscriber counts and whether the caller is subscribed."""
    profile = get_channel_profile(db, username, viewer_id=user.id)
    return ok(profile, "Channel profile fetched successfully")


@router.get("/history", response_model=ApiResponse[list[WatchedVideo]])
def watch_history(db: DbSession, user: CurrentUser) -> ApiResponse[list[WatchedVideo]]:
    """Watched videos in history order, each with its owner's condensed profile."""
    videos = get_watch_history(db, user.id)
    return ok(videos, "Watch history fetched successfully")
