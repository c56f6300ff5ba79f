"""Sign-in and sign-out routes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from study_planner.api.guards import (
    RedirectRequired,
    SessionPending,
    current_session,
    get_container,
    session_token,
)
from study_planner.api.pages import render_login
from study_planner.domain.sessions import (
    CREDENTIALS_METHOD,
    LOADING,
    SessionState,
    SignInResult,
)
from study_planner.services.sessions import HOME_ROUTE, LOGIN_ROUTE, guard_redirect

if TYPE_CHECKING:
    from study_planner.containers import AppContainer

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)

QUICK_LOGIN_ERROR = "Login failed. Please try again."


@router.get(LOGIN_ROUTE, response_class=HTMLResponse)
async def login_page(
    request: Request, session: SessionState = Depends(current_session)
) -> HTMLResponse:
    """Show the sign-in options, or move signed-in users to the dashboard."""
    location = guard_redirect(session, LOGIN_ROUTE)
    if location is not None:
        raise RedirectRequired(location)
    if session.status == LOADING:
        raise SessionPending
    return _login_response(get_container(request))


@router.post(f"{LOGIN_ROUTE}/credentials")
async def login_with_email(request: Request, email: str = Form("")) -> Response:
    """Sign in with a custom email address."""
    container = get_container(request)
    result = await container.session_service.sign_in(
        CREDENTIALS_METHOD,
        {"email": email or container.settings.demo_email},
    )
    if not result.ok:
        return _login_response(container, f"Login failed: {result.error}")
    return _signed_in_response(container, result)


@router.post(f"{LOGIN_ROUTE}/quick")
async def quick_login(request: Request) -> Response:
    """Sign in instantly with the configured demo account."""
    container = get_container(request)
    result = await container.session_service.sign_in(
        CREDENTIALS_METHOD,
        {"email": container.settings.demo_email},
    )
    if not result.ok:
        return _login_response(container, QUICK_LOGIN_ERROR)
    return _signed_in_response(container, result)


@router.post(f"{LOGIN_ROUTE}/federated")
async def federated_login(request: Request) -> Response:
    """Start a sign-in with the external identity provider."""
    container = get_container(request)
    result = await container.session_service.sign_in(
        container.settings.federated_provider, {}
    )
    if not result.ok or result.redirect_url is None:
        return _login_response(container, f"Login failed: {result.error}")
    response = RedirectResponse(result.redirect_url, status.HTTP_303_SEE_OTHER)
    _set_session_cookie(response, container, result.session_token)
    return response


@router.get("/auth/callback/{provider}")
async def federated_callback(
    provider: str, request: Request, code: str = "", state: str = ""
) -> Response:
    """Finish a federated sign-in when the provider redirects back."""
    container = get_container(request)
    token = session_token(request)
    pending = container.session_service.get_session(token).status == LOADING
    result = await container.session_service.complete_sign_in(
        token, provider, code, state
    )
    if not result.ok:
        response = _login_response(container, f"Login failed: {result.error}")
        if pending:
            response.delete_cookie(container.settings.session_cookie_name)
        return response
    return _signed_in_response(container, result)


@router.post("/logout")
async def logout(request: Request) -> RedirectResponse:
    container = get_container(request)
    target = container.session_service.sign_out(session_token(request), LOGIN_ROUTE)
    response = RedirectResponse(target, status.HTTP_303_SEE_OTHER)
    response.delete_cookie(container.settings.session_cookie_name)
    return response


def _login_response(container: AppContainer, alert: str | None = None) -> HTMLResponse:
    if alert:
        logger.warning("Sign-in failed: %s", alert)
    return HTMLResponse(
        render_login(
            dev_login_enabled=container.settings.dev_login_enabled,
            demo_email=container.settings.demo_email,
            alert=alert,
        )
    )


def _signed_in_response(
    container: AppContainer, result: SignInResult
) -> RedirectResponse:
    response = RedirectResponse(HOME_ROUTE, status.HTTP_303_SEE_OTHER)
    _set_session_cookie(response, container, result.session_token)
    return response


def _set_session_cookie(
    response: Response, container: AppContainer, token: str | None
) -> None:
    if token is None:
        return
    response.set_cookie(
        container.settings.session_cookie_name,
        token,
        max_age=container.settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=container.settings.environment != "local",
    )
