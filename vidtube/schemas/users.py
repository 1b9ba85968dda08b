"""Request/response schemas for account endpoints."""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator, model_validator

from vidtube.core.security import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LEN,
    USERNAME_MAX_LEN,
    password_byte_length_ok,
)
from vidtube.schemas.common import CamelModel

FULLNAME_MAX_LEN = 255


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _lower(value: object) -> object:
    return value.strip().lower() if isinstance(value, str) else value


def _check_password_bytes(value: str) -> str:
    # Non-ASCII characters take several bytes; bcrypt would drop the tail.
    if not password_byte_length_ok(value):
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes in UTF-8")
    return value


class RegisterForm(CamelModel):
    """Multipart registration fields; every text field is required after trimming."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    email: EmailStr
    fullname: str = Field(..., min_length=1, max_length=FULLNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("username", "email", mode="before")
    @classmethod
    def normalize_identity(cls, v: object) -> object:
        return _lower(v)

    @field_validator("fullname", mode="before")
    @classmethod
    def strip_fullname(cls, v: object) -> object:
        return _strip(v)

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("password must not be blank")
        return _check_password_bytes(v)


class LoginRequest(CamelModel):
    """Credentials for login. Either username or email identifies the account."""

    username: str | None = Field(default=None, max_length=USERNAME_MAX_LEN)
    email: str | None = Field(default=None, max_length=255)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("username", "email", mode="before")
    @classmethod
    def normalize_identity(cls, v: object) -> object:
        v = _lower(v)
        return v or None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return _check_password_bytes(v)


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("new_password")
    @classmethod
    def new_password_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("newPassword must not be blank")
        return _check_password_bytes(v)

    @field_validator("old_password")
    @classmethod
    def old_password_fits_bcrypt(cls, v: str) -> str:
        return _check_password_bytes(v)


class UpdateAccountRequest(CamelModel):
    """Profile patch; at least one field must be present."""

    fullname: str | None = Field(default=None, min_length=1, max_length=FULLNAME_MAX_LEN)
    email: EmailStr | None = None

    @field_validator("fullname", mode="before")
    @classmethod
    def strip_fullname(cls, v: object) -> object:
        return _strip(v) or None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: object) -> object:
        return _lower(v) or None

    @model_validator(mode="after")
    def require_one_field(self) -> "UpdateAccountRequest":
        if self.fullname is None and self.email is None:
            raise ValueError("fullname or email is required")
        return self


class UserOut(CamelModel):
    """Public view of a user; never carries the password hash or refresh token."""

    id: int
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str = ""
    watch_history: list[int] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginData(CamelModel):
    user: UserOut
    access_token: str
    refresh_token: str
