"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from study_planner.api.auth import router as auth_router
from study_planner.api.guards import RedirectRequired, SessionPending
from study_planner.api.pages import render_loading
from study_planner.api.schedules import router as schedules_router
from study_planner.api.uploads import router as uploads_router
from study_planner.app_logging import configure_logging
from study_planner.containers import AppContainer
from study_planner.services.sessions import HOME_ROUTE


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(schedules_router)
    app.include_router(uploads_router)

    @app.exception_handler(RedirectRequired)
    async def redirect_required(
        request: Request, exc: RedirectRequired
    ) -> RedirectResponse:
        return RedirectResponse(exc.location, status.HTTP_303_SEE_OTHER)

    @app.exception_handler(SessionPending)
    async def session_pending(request: Request, exc: SessionPending) -> HTMLResponse:
        return HTMLResponse(render_loading())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def index() -> RedirectResponse:
        return RedirectResponse(HOME_ROUTE, status.HTTP_303_SEE_OTHER)

    return app
