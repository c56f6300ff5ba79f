"""Session lifecycle and route gating."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from study_planner.adapters.identity_client import (
    IdentityError,
    IdentityProvider,
    ProviderGrant,
)
from study_planner.domain.sessions import (
    ANONYMOUS,
    AUTHENTICATED,
    CREDENTIALS_METHOD,
    LOADING,
    UNAUTHENTICATED,
    SessionState,
    SignInResult,
    StoredSession,
)

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/dashboard"

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Persistence for session state, addressed by an opaque token."""

    def save(self, session: SessionState, oauth_state: str | None = None) -> str:
        """Persist a session and return the token that resolves it."""

    def load(self, token: str) -> StoredSession | None:
        """Return the session for a token, or None if it is unknown or expired."""


@dataclass
class SessionService:
    """Mirror of the identity provider's session, keyed by an opaque token.

    Tokens are immutable: every state change issues a new token, and the
    caller replaces the browser cookie with it. Dropping the cookie resolves
    the session to unauthenticated.
    """

    identity_provider: IdentityProvider
    store: SessionStore
    federated_provider: str
    callback_url_for: Callable[[str], str]

    def get_session(self, token: str | None) -> SessionState:
        """Return the session for a token; unknown tokens are unauthenticated."""
        stored = self.store.load(token) if token else None
        if stored is None:
            return ANONYMOUS
        return stored.session

    async def sign_in(self, method: str, params: dict[str, str]) -> SignInResult:
        """Start a sign-in with the given method.

        Credential sign-ins resolve immediately. Federated sign-ins create a
        loading session and return the provider URL to redirect to. A failed
        attempt issues no token, so any existing session stays untouched.
        """
        if method == CREDENTIALS_METHOD:
            email = params.get("email", "").strip()
            if not email:
                return SignInResult(ok=False, error="Email is required")
            try:
                grant = await self.identity_provider.sign_in_with_credentials(email)
            except IdentityError as exc:
                logger.exception("Credential sign-in failed", extra={"email": email})
                return SignInResult(ok=False, error=str(exc) or "Sign-in failed")
            session_token = self._authenticate(grant, method)
            return SignInResult(ok=True, session_token=session_token)

        if method == self.federated_provider:
            oauth_state = secrets.token_urlsafe(16)
            new_token = self.store.save(
                SessionState(status=LOADING, provider=method),
                oauth_state=oauth_state,
            )
            redirect_url = self.identity_provider.authorization_url(
                method, self.callback_url_for(method), oauth_state
            )
            return SignInResult(
                ok=True, session_token=new_token, redirect_url=redirect_url
            )

        return SignInResult(ok=False, error=f"Unsupported sign-in method: {method}")

    async def complete_sign_in(
        self, token: str | None, provider: str, code: str, oauth_state: str
    ) -> SignInResult:
        """Resolve a loading session once the provider redirects back.

        On failure no token is issued and the caller drops the loading
        session.
        """
        stored = self.store.load(token) if token else None
        if (
            stored is None
            or stored.session.status != LOADING
            or stored.session.provider != provider
        ):
            return SignInResult(ok=False, error="No sign-in in progress")
        expected_state = (stored.oauth_state or "").encode()
        state_matches = secrets.compare_digest(expected_state, oauth_state.encode())
        if not code or not state_matches:
            return SignInResult(ok=False, error="Sign-in was not completed")
        try:
            grant = await self.identity_provider.exchange_code(
                provider, code, self.callback_url_for(provider)
            )
        except IdentityError as exc:
            logger.exception("Federated sign-in failed", extra={"provider": provider})
            return SignInResult(ok=False, error=str(exc) or "Sign-in failed")
        return SignInResult(ok=True, session_token=self._authenticate(grant, provider))

    def sign_out(self, token: str | None, redirect_target: str = LOGIN_ROUTE) -> str:
        """End the local session and return where to send the user.

        The caller discards the token; the provider session is not revoked.
        """
        if token and self.get_session(token).is_authenticated:
            logger.info("Signed out")
        return redirect_target

    def _authenticate(self, grant: ProviderGrant, provider: str) -> str:
        return self.store.save(
            SessionState(
                status=AUTHENTICATED,
                identity=grant.identity,
                access_token=grant.access_token,
                provider=provider,
            )
        )


def guard_redirect(session: SessionState, path: str) -> str | None:
    """Return the redirect target for a route, or None to render it."""
    if path == LOGIN_ROUTE:
        return HOME_ROUTE if session.status == AUTHENTICATED else None
    if session.status == UNAUTHENTICATED:
        return LOGIN_ROUTE
    return None
