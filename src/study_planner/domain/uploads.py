"""Models for the direct-to-storage upload flow."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class UploadSlot(BaseModel):
    """Short-lived pre-signed upload target issued by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    sas_url: str = Field(alias="sasUrl")
    file_url: str = Field(alias="fileUrl")


@dataclass(frozen=True)
class UploadFile:
    """File selected by the user for upload."""

    name: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def declared_type(self) -> str:
        return self.content_type or DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class UploadOutcome:
    """Result of an upload attempt as shown to the user."""

    ok: bool
    alert: str | None = None
    file_url: str | None = None
