"""Domain models for browser sessions."""

from dataclasses import dataclass

UNAUTHENTICATED = "unauthenticated"
LOADING = "loading"
AUTHENTICATED = "authenticated"

CREDENTIALS_METHOD = "credentials"


@dataclass(frozen=True)
class Identity:
    """Identity data returned by the identity provider."""

    name: str | None
    email: str | None
    image: str | None = None


@dataclass(frozen=True)
class SessionState:
    """Client-side view of the current session."""

    status: str
    identity: Identity | None = None
    access_token: str | None = None
    provider: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status == AUTHENTICATED


ANONYMOUS = SessionState(status=UNAUTHENTICATED)


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a sign-in attempt."""

    ok: bool
    error: str | None = None
    session_token: str | None = None
    redirect_url: str | None = None


@dataclass(frozen=True)
class StoredSession:
    """Session plus the OAuth state of a pending federated sign-in."""

    session: SessionState
    oauth_state: str | None = None
