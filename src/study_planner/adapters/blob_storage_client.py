"""Direct-to-storage blob upload client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class BlobUploadError(Exception):
    """Raised when blob storage rejects a transfer."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlobStorageClient(Protocol):
    """Interface for writing bytes to a pre-signed blob URL."""

    async def put_blob(self, sas_url: str, content: bytes, content_type: str) -> None:
        """Upload raw bytes to the SAS URL as a block blob."""


@dataclass
class HttpxBlobStorageClient(BlobStorageClient):
    """Blob storage client using httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 60

    @classmethod
    def create(cls, timeout: float = 60) -> "HttpxBlobStorageClient":
        """Create a blob client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), timeout=timeout)

    async def put_blob(self, sas_url: str, content: bytes, content_type: str) -> None:
        """PUT the bytes; any non-success response fails the transfer."""
        try:
            response = await self.http_client.put(
                sas_url,
                content=content,
                headers={
                    "x-ms-blob-type": "BlockBlob",
                    "Content-Type": content_type,
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise BlobUploadError(f"Upload failed: {exc}") from exc
        if not response.is_success:
            raise BlobUploadError("Upload failed", status_code=response.status_code)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
