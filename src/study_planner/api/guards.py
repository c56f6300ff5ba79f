"""Session dependencies that gate protected pages before rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Request

from study_planner.domain.sessions import LOADING, SessionState
from study_planner.services.sessions import guard_redirect

if TYPE_CHECKING:
    from study_planner.containers import AppContainer


class RedirectRequired(Exception):
    """Raised by a guard when the route must not render for this session."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


class SessionPending(Exception):
    """Raised while a federated sign-in has not resolved yet."""


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def session_token(request: Request) -> str | None:
    container = get_container(request)
    return request.cookies.get(container.settings.session_cookie_name)


def current_session(request: Request) -> SessionState:
    """Return the session mirrored for the request's cookie."""
    container = get_container(request)
    return container.session_service.get_session(session_token(request))


async def require_session(
    request: Request, session: SessionState = Depends(current_session)
) -> SessionState:
    """Ensure the request belongs to a signed-in user."""
    location = guard_redirect(session, request.url.path)
    if location is not None:
        raise RedirectRequired(location)
    if session.status == LOADING:
        raise SessionPending
    return session
