"""Upload page with the aggregated resource list."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from study_planner.adapters.api_client import ApiError
from study_planner.api.guards import get_container, require_session
from study_planner.api.pages import (
    render_confirmation,
    render_shell,
    render_upload_page,
)
from study_planner.domain.resources import ResourceListing
from study_planner.domain.sessions import SessionState
from study_planner.domain.uploads import UploadFile as SelectedFile
from study_planner.services.resources import SORT_NEWEST

router = APIRouter(tags=["uploads"])
logger = logging.getLogger(__name__)

UPLOAD_ROUTE = "/upload"
UPLOAD_SUCCESS_MESSAGE = "File uploaded successfully!"


async def read_upload(file: UploadFile | None) -> SelectedFile | None:
    """Convert a multipart file field into the upload model."""
    if file is None or not file.filename:
        return None
    content = await file.read()
    return SelectedFile(
        name=file.filename, content=content, content_type=file.content_type
    )


@router.get(UPLOAD_ROUTE, response_class=HTMLResponse)
async def upload_page(  # noqa: PLR0913
    request: Request,
    schedule: str | None = None,
    q: str | None = None,
    sort: str = SORT_NEWEST,
    selected: str | None = None,
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    """Show the upload form and every resource across schedules."""
    return await _page(request, session, schedule, q, sort, selected)


@router.post(UPLOAD_ROUTE, response_class=HTMLResponse)
async def upload_resource(
    request: Request,
    schedule_id: str = Form(""),
    file: UploadFile | None = File(None),
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    """Run the upload sequence for the selected schedule, then refresh."""
    service = get_container(request).upload_service(session.access_token)
    outcome = await service.upload(schedule_id or None, await read_upload(file))
    return await _page(
        request,
        session,
        selected=schedule_id,
        alert=outcome.alert,
        notice=UPLOAD_SUCCESS_MESSAGE if outcome.ok else None,
    )


@router.get(
    UPLOAD_ROUTE + "/resources/{resource_id}/delete", response_class=HTMLResponse
)
async def confirm_resource_delete(
    resource_id: str, session: SessionState = Depends(require_session)
) -> HTMLResponse:
    content = render_confirmation(
        "Are you sure you want to delete this file?",
        f"{UPLOAD_ROUTE}/resources/{resource_id}/delete",
        UPLOAD_ROUTE,
    )
    return HTMLResponse(render_shell("Delete file", content, session, UPLOAD_ROUTE))


@router.post(UPLOAD_ROUTE + "/resources/{resource_id}/delete")
async def delete_resource(
    resource_id: str,
    request: Request,
    confirm: str = Form(""),
    session: SessionState = Depends(require_session),
) -> Response:
    if confirm != "yes":
        return await confirm_resource_delete(resource_id, session)
    service = get_container(request).resource_list_service(session.access_token)
    alert = await service.delete_resource(resource_id, confirmed=True)
    if alert is None:
        return RedirectResponse(UPLOAD_ROUTE, status.HTTP_303_SEE_OTHER)
    return await _page(request, session, alert=alert)


async def _page(  # noqa: PLR0913
    request: Request,
    session: SessionState,
    schedule_filter: str | None = None,
    search: str | None = None,
    sort: str = SORT_NEWEST,
    selected: str | None = None,
    alert: str | None = None,
    notice: str | None = None,
) -> HTMLResponse:
    service = get_container(request).resource_list_service(session.access_token)
    try:
        listing = await service.list_resources(
            schedule_id=schedule_filter,
            search=search,
            sort=sort,
            selected_schedule_id=selected,
        )
    except (ApiError, ValueError):
        logger.exception("Failed to load resources")
        listing = ResourceListing()
        alert = alert or "Failed to load resources"
    content = render_upload_page(listing, schedule_filter, search, sort)
    return HTMLResponse(
        render_shell(
            "Upload Resources", content, session, UPLOAD_ROUTE, alert, notice
        )
    )
