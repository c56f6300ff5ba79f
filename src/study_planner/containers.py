"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from study_planner.adapters.api_client import ApiClient, HttpxApiClient
from study_planner.adapters.blob_storage_client import (
    BlobStorageClient,
    HttpxBlobStorageClient,
)
from study_planner.adapters.identity_client import HttpxIdentityProvider
from study_planner.adapters.signed_session_store import SignedCookieSessionStore
from study_planner.config import Settings, callback_url
from study_planner.services.resources import ResourceListService
from study_planner.services.schedules import ScheduleEditor, ScheduleService
from study_planner.services.sessions import SessionService
from study_planner.services.uploads import UploadService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    api_client_factory: Callable[[str | None], ApiClient]
    blob_client: BlobStorageClient
    close_resources: Callable[[], Awaitable[None]]

    def schedule_service(self, access_token: str | None) -> ScheduleService:
        return ScheduleService(self.api_client_factory(access_token))

    def upload_service(self, access_token: str | None) -> UploadService:
        return UploadService(
            api_client=self.api_client_factory(access_token),
            blob_client=self.blob_client,
        )

    def resource_list_service(self, access_token: str | None) -> ResourceListService:
        return ResourceListService(self.schedule_service(access_token))

    def schedule_editor(
        self, schedule_id: str, access_token: str | None
    ) -> ScheduleEditor:
        """Build the state holder for one schedule page view."""
        return ScheduleEditor(
            schedule_service=self.schedule_service(access_token),
            upload_service=self.upload_service(access_token),
            schedule_id=schedule_id,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    api_client = HttpxApiClient.create(
        resolved_settings.api_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    blob_client = HttpxBlobStorageClient.create()
    identity_provider = HttpxIdentityProvider.create(
        resolved_settings.identity_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    session_service = SessionService(
        identity_provider=identity_provider,
        store=SignedCookieSessionStore(
            secret_key=resolved_settings.session_secret_key,
            ttl_seconds=resolved_settings.session_ttl_seconds,
        ),
        federated_provider=resolved_settings.federated_provider,
        callback_url_for=partial(callback_url, resolved_settings),
    )

    async def close_resources() -> None:
        await api_client.close()
        await blob_client.close()
        await identity_provider.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        api_client_factory=api_client.with_token,
        blob_client=blob_client,
        close_resources=close_resources,
    )
