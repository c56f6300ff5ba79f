"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from study_planner.adapters.api_client import ApiClient, ApiError
from study_planner.adapters.blob_storage_client import (
    BlobStorageClient,
    BlobUploadError,
)
from study_planner.adapters.identity_client import (
    IdentityError,
    IdentityProvider,
    ProviderGrant,
)
from study_planner.adapters.signed_session_store import SignedCookieSessionStore
from study_planner.api.app import create_app
from study_planner.config import Settings, callback_url
from study_planner.containers import AppContainer
from study_planner.domain.sessions import CREDENTIALS_METHOD, Identity
from study_planner.services.sessions import SessionService

Call = tuple[str, str, dict[str, object] | None, dict[str, str] | None]


def resource_payload(resource_id: str = "res-1", **overrides: object) -> dict:
    payload: dict[str, object] = {
        "id": resource_id,
        "fileName": "notes.pdf",
        "fileSize": 2048,
        "fileType": "application/pdf",
        "fileUrl": f"https://blob.test/files/{resource_id}",
        "uploadedAt": "2024-03-02T10:00:00Z",
        "scheduleId": "sched-1",
    }
    payload.update(overrides)
    return payload


def schedule_payload(schedule_id: str = "sched-1", **overrides: object) -> dict:
    payload: dict[str, object] = {
        "id": schedule_id,
        "title": "Calculus review",
        "description": "Limits and derivatives",
        "startDate": "2024-03-01T00:00:00.000Z",
        "endDate": "2024-03-15T00:00:00.000Z",
        "status": "pending",
        "userId": "user-1",
        "resources": [resource_payload(scheduleId=schedule_id)],
    }
    payload.update(overrides)
    return payload


@dataclass
class FakeApiClient(ApiClient):
    """Fake backend that records calls and replays canned responses."""

    calls: list[Call] = field(default_factory=list)
    responses: dict[tuple[str, str], object] = field(default_factory=dict)
    failures: dict[tuple[str, str], ApiError] = field(default_factory=dict)

    async def get(self, path: str, query: dict[str, str] | None = None) -> object:
        return self._handle("GET", path, None, query)

    async def post(
        self,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        return self._handle("POST", path, body, query)

    async def put(
        self,
        path: str,
        body: dict[str, object] | None = None,
        query: dict[str, str] | None = None,
    ) -> object:
        return self._handle("PUT", path, body, query)

    async def delete(self, path: str, query: dict[str, str] | None = None) -> object:
        return self._handle("DELETE", path, None, query)

    def requests(self, method: str | None = None) -> list[tuple[str, str]]:
        return [
            (call_method, path)
            for call_method, path, _, _ in self.calls
            if method is None or call_method == method
        ]

    def bodies(self, method: str) -> list[dict[str, object] | None]:
        return [body for call_method, _, body, _ in self.calls if call_method == method]

    def _handle(
        self,
        method: str,
        path: str,
        body: dict[str, object] | None,
        query: dict[str, str] | None,
    ) -> object:
        self.calls.append((method, path, body, query))
        failure = self.failures.get((method, path))
        if failure is not None:
            raise failure
        return self.responses.get((method, path))


@dataclass
class FakeBlobStorageClient(BlobStorageClient):
    """Fake blob storage sharing the API fake's call log."""

    calls: list[Call]
    fail: bool = False
    uploads: list[tuple[str, bytes, str]] = field(default_factory=list)

    async def put_blob(self, sas_url: str, content: bytes, content_type: str) -> None:
        self.calls.append(("PUT", sas_url, None, None))
        if self.fail:
            raise BlobUploadError("Upload failed", status_code=403)
        self.uploads.append((sas_url, content, content_type))


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Fake identity provider with configurable outcomes."""

    rejected_emails: set[str] = field(default_factory=set)
    valid_codes: set[str] = field(default_factory=lambda: {"good-code"})
    authorizations: list[tuple[str, str, str]] = field(default_factory=list)

    async def sign_in_with_credentials(self, email: str) -> ProviderGrant:
        if email in self.rejected_emails:
            raise IdentityError("CredentialsSignin")
        return ProviderGrant(
            identity=Identity(name="Demo User", email=email, image=None),
            access_token=f"token-{email}",
        )

    def authorization_url(self, provider: str, callback_url: str, state: str) -> str:
        self.authorizations.append((provider, callback_url, state))
        return f"https://id.test/signin/{provider}?state={state}"

    async def exchange_code(
        self, provider: str, code: str, callback_url: str
    ) -> ProviderGrant:
        if code not in self.valid_codes:
            raise IdentityError("OAuthCallback")
        return ProviderGrant(
            identity=Identity(
                name="Federated User",
                email="federated@example.com",
                image="https://id.test/avatar.png",
            ),
            access_token="federated-token",
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base_url="https://api.test",
        identity_base_url="https://id.test",
        session_secret_key="test-secret",
        environment="local",
    )


@pytest.fixture
def api_client() -> FakeApiClient:
    client = FakeApiClient()
    client.responses[("GET", "/schedules")] = [
        schedule_payload("sched-1"),
        schedule_payload(
            "sched-2",
            title="Physics lab",
            status="completed",
            resources=[
                resource_payload(
                    "res-2",
                    fileName="lab-report.docx",
                    fileSize=4096,
                    uploadedAt="2024-04-01T09:00:00Z",
                    scheduleId="sched-2",
                )
            ],
        ),
    ]
    client.responses[("GET", "/schedules/sched-1")] = schedule_payload("sched-1")
    client.responses[("GET", "/upload/sas")] = {
        "sasUrl": "https://blob.test/upload?sig=abc",
        "fileUrl": "https://blob.test/files/new.pdf",
    }
    return client


@pytest.fixture
def blob_client(api_client: FakeApiClient) -> FakeBlobStorageClient:
    return FakeBlobStorageClient(calls=api_client.calls)


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def session_service(
    settings: Settings, identity_provider: FakeIdentityProvider
) -> SessionService:
    return SessionService(
        identity_provider=identity_provider,
        store=SignedCookieSessionStore(
            secret_key=settings.session_secret_key,
            ttl_seconds=settings.session_ttl_seconds,
        ),
        federated_provider=settings.federated_provider,
        callback_url_for=lambda provider: callback_url(settings, provider),
    )


@pytest.fixture
def container(
    settings: Settings,
    api_client: FakeApiClient,
    blob_client: FakeBlobStorageClient,
    session_service: SessionService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_service=session_service,
        api_client_factory=lambda access_token: api_client,
        blob_client=blob_client,
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    """Test client carrying a signed-in session cookie."""
    result = asyncio.run(
        container.session_service.sign_in(
            CREDENTIALS_METHOD, {"email": "demo@example.com"}
        )
    )
    test_client = TestClient(create_app(container), follow_redirects=False)
    test_client.cookies.set(
        container.settings.session_cookie_name, result.session_token
    )
    return test_client
