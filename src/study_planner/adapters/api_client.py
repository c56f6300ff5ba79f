"""Study planner REST API client."""

from dataclasses import dataclass, replace
from typing import Protocol

import httpx


class ApiError(Exception):
    """Raised when a backend call fails."""

    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class ApiClient(Protocol):
    """Interface for authenticated backend calls."""

    async def get(self, path: str, query: dict[str, str] | None = None) -> object:
        """Issue a GET request and return the decoded body."""

    async def post(
        self,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        """Issue a POST request and return the decoded body."""

    async def put(
        self,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        """Issue a PUT request and return the decoded body."""

    async def delete(self, path: str, query: dict[str, str] | None = None) -> object:
        """Issue a DELETE request and return the decoded body."""


@dataclass
class HttpxApiClient(ApiClient):
    """HTTPX-backed API client attaching the session bearer token."""

    base_url: str
    http_client: httpx.AsyncClient
    access_token: str | None = None
    timeout: float = 15

    @classmethod
    def create(cls, base_url: str, timeout: float = 15) -> "HttpxApiClient":
        """Create an API client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    def with_token(self, access_token: str | None) -> "HttpxApiClient":
        """Return a client sharing this HTTP session but sending another token."""
        return replace(self, access_token=access_token)

    async def get(self, path: str, query: dict[str, str] | None = None) -> object:
        return await self._request("GET", path, query=query)

    async def post(
        self,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        return await self._request("POST", path, body=body, query=query)

    async def put(
        self,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        return await self._request("PUT", path, body=body, query=query)

    async def delete(self, path: str, query: dict[str, str] | None = None) -> object:
        return await self._request("DELETE", path, query=query)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            response = await self.http_client.request(
                method,
                url,
                params=query,
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(
                exc.response.status_code, describe_error(exc.response)
            ) from exc
        except httpx.HTTPError as exc:
            raise ApiError(None, str(exc) or type(exc).__name__) from exc
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


def describe_error(response: httpx.Response) -> str:
    """Extract a readable error message from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or "Request failed"
