"""Account operations: register, login, logout, password change and profile updates."""

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidtube.core.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from vidtube.core.security import hash_password, verify_password
from vidtube.models import User
from vidtube.schemas.media import UploadResult
from vidtube.schemas.users import (
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    RegisterForm,
    UpdateAccountRequest,
    UserOut,
)
from vidtube.services.media import MediaFile, MediaStorage, MediaUploadError
from vidtube.services.sessions import issue_session_pair, revoke_refresh_token

if TYPE_CHECKING:
    from vidtube.core.config import Settings

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"
COVER_IMAGE_FOLDER = "cover-images"


async def _upload_or_fail(
    storage: MediaStorage, file: MediaFile, folder: str, message: str
) -> UploadResult:
    try:
        return await storage.upload(file, folder)
    except MediaUploadError as e:
        logger.error("Upload of %s to %s failed: %s", file.filename, folder, e.message)
        raise BadRequestError(message) from e


async def register(
    db: Session,
    form: RegisterForm,
    avatar: MediaFile | None,
    cover_image: MediaFile | None,
    storage: MediaStorage,
    settings: "Settings",
) -> UserOut:
    """
    Create a user after uniqueness and avatar checks; upload images first.

    Returns the created user re-read from the store, without credentials.
    """
    existing = (
        db.query(User)
        .filter(or_(User.username == form.username, User.email == form.email))
        .first()
    )
    if existing is not None:
        raise ConflictError("User with email or username already exists")

    if avatar is None:
        raise BadRequestError("Avatar file is required")

    avatar_result = await _upload_or_fail(
        storage, avatar, AVATAR_FOLDER, "Error while uploading avatar"
    )
    cover_url = ""
    if cover_image is not None:
        cover_result = await _upload_or_fail(
            storage, cover_image, COVER_IMAGE_FOLDER, "Error while uploading cover image"
        )
        cover_url = cover_result.url

    # bcrypt is CPU-bound; keep it off the event loop.
    loop = asyncio.get_running_loop()
    password_hash = await loop.run_in_executor(
        None, hash_password, form.password, settings.BCRYPT_ROUNDS
    )
    user = User(
        username=form.username.lower(),
        email=form.email,
        fullname=form.fullname,
        password_hash=password_hash,
        avatar=avatar_result.url,
        cover_image=cover_url,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("User with email or username already exists") from e

    created = db.get(User, user.id, populate_existing=True)
    if created is None:
        raise InternalError("Something went wrong while registering the user")
    logger.info("Registered user_id=%s username=%s", created.id, created.username)
    return UserOut.model_validate(created)


def login(db: Session, credentials: LoginRequest, settings: "Settings") -> LoginData:
    """Authenticate by username or email and password; issue a fresh session pair."""
    if not credentials.username and not credentials.email:
        raise BadRequestError("Username or email is required")

    conditions = []
    if credentials.username:
        conditions.append(User.username == credentials.username)
    if credentials.email:
        conditions.append(User.email == credentials.email)
    user = db.query(User).filter(or_(*conditions)).first()
    if user is None:
        raise NotFoundError("User does not exist")

    if not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login for user_id=%s", user.id)
        raise UnauthorizedError("Invalid user credentials")

    pair = issue_session_pair(db, user.id, settings)
    logger.info("User logged in: user_id=%s", user.id)
    return LoginData(
        user=UserOut.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


def logout(db: Session, user: User) -> None:
    revoke_refresh_token(db, user)
    logger.info("User logged out: user_id=%s", user.id)


def change_password(
    db: Session, user: User, body: ChangePasswordRequest, settings: "Settings"
) -> None:
    """Replace the password after checking the old one; the new one is re-hashed."""
    if not verify_password(body.old_password, user.password_hash):
        raise BadRequestError("Invalid old password")
    user.password_hash = hash_password(body.new_password, settings.BCRYPT_ROUNDS)
    db.commit()
    logger.info("Password changed for user_id=%s", user.id)


def update_account_details(db: Session, user: User, body: UpdateAccountRequest) -> UserOut:
    """Patch fullname and/or email. Email must stay unique."""
    if body.fullname is None and body.email is None:
        raise BadRequestError("Fullname or email is required")

    if body.email is not None and body.email != user.email:
        taken = (
            db.query(User.id)
            .filter(User.email == body.email, User.id != user.id)
            .first()
        )
        if taken is not None:
            raise ConflictError("Email is already in use")
        user.email = body.email
    if body.fullname is not None:
        user.fullname = body.fullname
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Email is already in use") from e
    db.refresh(user)
    return UserOut.model_validate(user)


async def update_avatar(
    db: Session, user: User, file: MediaFile | None, storage: MediaStorage
) -> UploadResult:
    if file is None:
        raise BadRequestError("Avatar file is missing")
    result = await _upload_or_fail(storage, file, AVATAR_FOLDER, "Error while uploading avatar")
    user.avatar = result.url
    db.commit()
    logger.info("Avatar updated for user_id=%s", user.id)
    return result


async def update_cover_image(
    db: Session, user: User, file: MediaFile | None, storage: MediaStorage
) -> UploadResult:
    if file is None:
        raise BadRequestError("Cover image file is missing")
    result = await _upload_or_fail(
        storage, file, COVER_IMAGE_FOLDER, "Error while uploading cover image"
    )
    user.cover_image = result.url
    db.commit()
    logger.info("Cover image updated for user_id=%s", user.id)
    return result
