"""Tests for the server-rendered routes."""

from dataclasses import replace
from urllib.parse import parse_qs, urlsplit

from fastapi.testclient import TestClient

from study_planner.adapters.api_client import ApiError
from study_planner.adapters.signed_session_store import SignedCookieSessionStore
from study_planner.api.app import create_app
from study_planner.api.pages import safe_url
from study_planner.config import Settings, callback_url
from study_planner.containers import AppContainer
from study_planner.services.sessions import SessionService
from tests.conftest import (
    FakeApiClient,
    FakeBlobStorageClient,
    FakeIdentityProvider,
    resource_payload,
    schedule_payload,
)


def _anonymous_client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container), follow_redirects=False)


def test_health_endpoint(container: AppContainer) -> None:
    response = _anonymous_client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_protected_page_redirects_to_login(
    container: AppContainer, api_client: FakeApiClient
) -> None:
    response = _anonymous_client(container).get("/dashboard")

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert api_client.calls == []


def test_login_page_redirects_when_signed_in(client: TestClient) -> None:
    response = client.get("/login")

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_login_page_renders_demo_options(container: AppContainer) -> None:
    response = _anonymous_client(container).get("/login")

    assert response.status_code == 200
    assert "Quick Login (Demo)" in response.text
    assert 'value="demo@example.com"' in response.text


def test_quick_login_sets_session_cookie(container: AppContainer) -> None:
    client = _anonymous_client(container)

    response = client.post("/login/quick")

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    cookie = response.cookies.get(container.settings.session_cookie_name)
    assert cookie
    assert container.session_service.get_session(cookie).is_authenticated


def test_failed_credential_login_shows_alert(
    container: AppContainer, identity_provider: FakeIdentityProvider
) -> None:
    identity_provider.rejected_emails.add("bad@example.com")

    response = _anonymous_client(container).post(
        "/login/credentials", data={"email": "bad@example.com"}
    )

    assert response.status_code == 200
    assert "Login failed: CredentialsSignin" in response.text


def test_federated_login_round_trip(container: AppContainer) -> None:
    client = _anonymous_client(container)

    started = client.post("/login/federated")
    assert started.status_code == 303
    location = started.headers["location"]
    assert location.startswith("https://id.test/signin/azure-ad")
    state = parse_qs(urlsplit(location).query)["state"][0]

    pending = client.get("/dashboard")
    assert pending.status_code == 200
    assert "Signing you in" in pending.text

    finished = client.get(
        "/auth/callback/azure-ad", params={"code": "good-code", "state": state}
    )
    assert finished.status_code == 303
    assert finished.headers["location"] == "/dashboard"

    dashboard = client.get("/dashboard")
    assert dashboard.status_code == 200
    assert "federated@example.com" in dashboard.text


def test_logout_clears_session(client: TestClient, container: AppContainer) -> None:
    token = client.cookies.get(container.settings.session_cookie_name)

    response = client.post("/logout")

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert token
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{container.settings.session_cookie_name}=")
    assert "max-age=0" in set_cookie.lower()


def test_dashboard_lists_schedules(client: TestClient) -> None:
    response = client.get("/dashboard")

    assert response.status_code == 200
    assert "Total schedules: 2" in response.text
    assert "Pending: 1" in response.text
    assert "Calculus review" in response.text
    assert "March 1, 2024" in response.text
    assert '<a href="/dashboard" class="active">Dashboard</a>' in response.text


def test_dashboard_reports_backend_failure(
    client: TestClient, api_client: FakeApiClient
) -> None:
    api_client.failures[("GET", "/schedules")] = ApiError(500, "down")

    response = client.get("/dashboard")

    assert response.status_code == 200
    assert "Failed to load schedules" in response.text


def test_schedule_detail_renders(client: TestClient) -> None:
    response = client.get("/schedules/sched-1")

    assert response.status_code == 200
    assert "Calculus review" in response.text
    assert "Mark Complete" in response.text
    assert "notes.pdf" in response.text
    assert "2.00 KB" in response.text
    assert "Mar 2, 2024" in response.text


def test_missing_schedule_returns_not_found(
    client: TestClient, api_client: FakeApiClient
) -> None:
    api_client.failures[("GET", "/schedules/gone")] = ApiError(404, "Not found")

    response = client.get("/schedules/gone")

    assert response.status_code == 404
    assert "Schedule not found" in response.text


def test_edit_form_is_prefilled(client: TestClient) -> None:
    response = client.get("/schedules/sched-1/edit")

    assert response.status_code == 200
    assert "Edit Schedule" in response.text
    assert 'value="2024-03-01"' in response.text


def test_edit_submit_saves_and_redirects(
    client: TestClient, api_client: FakeApiClient
) -> None:
    response = client.post(
        "/schedules/sched-1/edit",
        data={
            "title": "New title",
            "description": "New description",
            "start_date": "2024-03-05",
            "end_date": "2024-03-20",
        },
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/schedules/sched-1"
    assert api_client.bodies("PUT")[0] == {
        "title": "New title",
        "description": "New description",
        "startDate": "2024-03-05",
        "endDate": "2024-03-20",
        "userId": "user-1",
        "status": "pending",
    }


def test_edit_submit_with_missing_title_rerenders(
    client: TestClient, api_client: FakeApiClient
) -> None:
    response = client.post(
        "/schedules/sched-1/edit",
        data={
            "title": "",
            "description": "Desc",
            "start_date": "2024-03-05",
            "end_date": "2024-03-20",
        },
    )

    assert response.status_code == 200
    assert "Title is required" in response.text
    assert 'value="2024-03-05"' in response.text
    assert api_client.requests() == []


def test_complete_route_updates_status(
    client: TestClient, api_client: FakeApiClient
) -> None:
    response = client.post("/schedules/sched-1/complete")

    assert response.status_code == 303
    assert api_client.bodies("PUT")[0]["status"] == "completed"


def test_complete_route_ignores_completed_schedule(
    client: TestClient, api_client: FakeApiClient
) -> None:
    api_client.responses[("GET", "/schedules/sched-1")] = schedule_payload(
        status="completed"
    )

    response = client.post("/schedules/sched-1/complete")

    assert response.status_code == 200
    assert api_client.requests("PUT") == []


def test_delete_requires_confirmation(
    client: TestClient, api_client: FakeApiClient
) -> None:
    prompt = client.post("/schedules/sched-1/delete")

    assert prompt.status_code == 200
    assert "Are you sure you want to delete this schedule?" in prompt.text
    assert api_client.requests("DELETE") == []

    confirmed = client.post("/schedules/sched-1/delete", data={"confirm": "yes"})

    assert confirmed.status_code == 303
    assert confirmed.headers["location"] == "/schedules"
    assert api_client.requests("DELETE") == [("DELETE", "/schedules/sched-1")]


def test_upload_page_lists_resources(client: TestClient) -> None:
    response = client.get("/upload", params={"sort": "name"})

    assert response.status_code == 200
    text = response.text
    assert text.index("lab-report.docx") < text.index("notes.pdf")
    assert "Physics lab" in text
    assert '<option value="sched-1" selected>' in text


def test_upload_page_filters_by_search(client: TestClient) -> None:
    response = client.get("/upload", params={"q": "lab"})

    assert "lab-report.docx" in response.text
    assert "notes.pdf" not in response.text


def test_upload_submits_file(
    client: TestClient,
    api_client: FakeApiClient,
    blob_client: FakeBlobStorageClient,
) -> None:
    response = client.post(
        "/upload",
        data={"schedule_id": "sched-1"},
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 200
    assert "File uploaded successfully!" in response.text
    assert blob_client.uploads == [
        ("https://blob.test/upload?sig=abc", b"hello", "text/plain")
    ]
    assert api_client.bodies("POST")[0]["fileSize"] == 5


def test_upload_without_schedule_is_rejected(
    client: TestClient, api_client: FakeApiClient
) -> None:
    response = client.post(
        "/upload",
        data={"schedule_id": ""},
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert "Please select a schedule first" in response.text
    assert ("GET", "/upload/sas") not in api_client.requests()


def test_upload_resource_delete_confirms(
    client: TestClient, api_client: FakeApiClient
) -> None:
    prompt = client.get("/upload/resources/res-1/delete")
    assert "Are you sure you want to delete this file?" in prompt.text

    response = client.post("/upload/resources/res-1/delete", data={"confirm": "yes"})

    assert response.status_code == 303
    assert response.headers["location"] == "/upload"
    assert api_client.requests("DELETE") == [("DELETE", "/resources/res-1")]


def test_detail_drops_non_http_file_links(
    client: TestClient, api_client: FakeApiClient
) -> None:
    api_client.responses[("GET", "/schedules/sched-1")] = schedule_payload(
        resources=[resource_payload(fileUrl="javascript:alert(1)")]
    )

    response = client.get("/schedules/sched-1")

    assert response.status_code == 200
    assert "notes.pdf" in response.text
    assert "javascript:" not in response.text
    assert "View</a>" not in response.text


def test_safe_url_allows_only_web_schemes() -> None:
    assert safe_url("https://blob.test/a?x=1&y=2") == "https://blob.test/a?x=1&amp;y=2"
    assert safe_url("http://blob.test/a") == "http://blob.test/a"
    assert safe_url("javascript:alert(1)") is None
    assert safe_url(" JavaScript:alert(1)") is None
    assert safe_url("data:text/html;base64,PHNjcmlwdD4=") is None
    assert safe_url(None) is None


def test_session_survives_across_app_instances(
    container: AppContainer,
    settings: Settings,
    identity_provider: FakeIdentityProvider,
) -> None:
    first = _anonymous_client(container)
    signed_in = first.post("/login/quick")
    token = signed_in.cookies.get(settings.session_cookie_name)
    other_container = replace(
        container,
        session_service=SessionService(
            identity_provider=identity_provider,
            store=SignedCookieSessionStore(
                secret_key=settings.session_secret_key,
                ttl_seconds=settings.session_ttl_seconds,
            ),
            federated_provider=settings.federated_provider,
            callback_url_for=lambda provider: callback_url(settings, provider),
        ),
    )
    second = _anonymous_client(other_container)
    second.cookies.set(settings.session_cookie_name, token)

    response = second.get("/dashboard")

    assert response.status_code == 200
    assert "demo@example.com" in response.text


def test_failed_federated_callback_drops_pending_session(
    container: AppContainer,
) -> None:
    client = _anonymous_client(container)
    started = client.post("/login/federated")
    state = parse_qs(urlsplit(started.headers["location"]).query)["state"][0]

    failed = client.get(
        "/auth/callback/azure-ad", params={"code": "bad-code", "state": state}
    )

    assert failed.status_code == 200
    assert "Login failed: OAuthCallback" in failed.text
    assert client.get("/dashboard").headers["location"] == "/login"
