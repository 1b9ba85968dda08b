"""Shared schema base and the success / error response envelopes."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API schemas: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    status_code: int = Field(default=200, description="HTTP status code echoed in the body")
    data: T
    message: str = Field(default="Success")
    success: bool = Field(default=True)


class ErrorResponse(CamelModel):
    """Error envelope; errors carries field-level details when available."""

    status_code: int
    data: None = None
    message: str
    success: bool = False
    errors: list[Any] = Field(default_factory=list)


def ok(data: Any, message: str = "Success", status_code: int = 200) -> ApiResponse:
    """Build a success envelope; success is derived from the status code."""
    return ApiResponse(
        status_code=status_code,
        data=data,
        message=message,
        success=status_code < 400,
    )
