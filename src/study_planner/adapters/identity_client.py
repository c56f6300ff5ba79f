"""Identity provider client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from study_planner.adapters.api_client import describe_error
from study_planner.domain.sessions import Identity


class IdentityError(Exception):
    """Raised when the identity provider refuses or fails a sign-in."""


@dataclass(frozen=True)
class ProviderGrant:
    """Identity and access token issued by a successful sign-in."""

    identity: Identity
    access_token: str


class _UserPayload(BaseModel):
    name: str | None = None
    email: str | None = None
    image: str | None = None


class _GrantPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: _UserPayload
    access_token: str = Field(alias="accessToken")


class IdentityProvider(Protocol):
    """Interface for the external identity provider."""

    async def sign_in_with_credentials(self, email: str) -> ProviderGrant:
        """Sign in with a direct credential and return the grant."""

    def authorization_url(self, provider: str, callback_url: str, state: str) -> str:
        """Return the URL that starts a federated sign-in."""

    async def exchange_code(
        self, provider: str, code: str, callback_url: str
    ) -> ProviderGrant:
        """Complete a federated sign-in with the authorization code."""


@dataclass
class HttpxIdentityProvider(IdentityProvider):
    """Identity provider client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10

    @classmethod
    def create(cls, base_url: str, timeout: float = 10) -> "HttpxIdentityProvider":
        """Create an identity client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def sign_in_with_credentials(self, email: str) -> ProviderGrant:
        """Sign in through the provider's credentials endpoint."""
        return await self._grant("signin/credentials", {"email": email})

    def authorization_url(self, provider: str, callback_url: str, state: str) -> str:
        query = urlencode({"callbackUrl": callback_url, "state": state})
        return f"{self.base_url.rstrip('/')}/signin/{provider}?{query}"

    async def exchange_code(
        self, provider: str, code: str, callback_url: str
    ) -> ProviderGrant:
        """Exchange an authorization code for a grant."""
        return await self._grant(
            f"callback/{provider}", {"code": code, "callbackUrl": callback_url}
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _grant(self, path: str, payload: dict[str, str]) -> ProviderGrant:
        url = f"{self.base_url.rstrip('/')}/{path}"
        try:
            response = await self.http_client.post(
                url, json=payload, timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            raise IdentityError(str(exc) or type(exc).__name__) from exc
        if not response.is_success:
            raise IdentityError(describe_error(response))
        try:
            grant = _GrantPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise IdentityError("Malformed identity provider response") from exc
        return ProviderGrant(
            identity=Identity(
                name=grant.user.name,
                email=grant.user.email,
                image=grant.user.image,
            ),
            access_token=grant.access_token,
        )
