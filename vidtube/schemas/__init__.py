"""Pydantic request/response schemas."""

from vidtube.schemas.channels import ChannelProfile
from vidtube.schemas.common import ApiResponse, CamelModel, ErrorResponse, ok
from vidtube.schemas.health import HealthResponse
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
from vidtube.schemas.videos import VideoOwner, WatchedVideo

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ChangePasswordRequest",
    "ChannelProfile",
    "ErrorResponse",
    "HealthResponse",
    "LoginData",
    "LoginRequest",
    "RefreshTokenRequest",
    "RegisterForm",
    "TokenPair",
    "UpdateAccountRequest",
    "UploadResult",
    "UserOut",
    "VideoOwner",
    "WatchedVideo",
    "ok",
]
