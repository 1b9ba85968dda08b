"""Response schema for image uploads."""

from pydantic import Field

from vidtube.schemas.common import CamelModel


class UploadResult(CamelModel):
    """Where the uploaded file now lives and what the storage backend reported about it."""

    url: str = Field(..., description="Public URL of the stored file.")
    public_id: str = Field(..., description="Backend identifier of the stored file.")
    resource_type: str = "image"
    format: str | None = None
    bytes: int | None = Field(default=None, ge=0)
    width: int | None = None
    height: int | None = None
