"""Dashboard, schedule list and schedule detail pages."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from study_planner.adapters.api_client import ApiError
from study_planner.api.guards import get_container, require_session
from study_planner.api.pages import (
    render_confirmation,
    render_dashboard,
    render_profile,
    render_schedule_detail,
    render_schedule_list,
    render_shell,
)
from study_planner.api.uploads import read_upload
from study_planner.domain.schedules import Schedule, ScheduleForm
from study_planner.domain.sessions import SessionState
from study_planner.services.schedules import (
    NOT_FOUND,
    SCHEDULES_ROUTE,
    ScheduleEditor,
)

router = APIRouter(tags=["schedules"])
logger = logging.getLogger(__name__)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request, session: SessionState = Depends(require_session)
) -> HTMLResponse:
    schedules, alert = await _list_schedules(request, session)
    return HTMLResponse(
        render_shell(
            "Dashboard", render_dashboard(schedules), session, "/dashboard", alert
        )
    )


@router.get(SCHEDULES_ROUTE, response_class=HTMLResponse)
async def schedule_list(
    request: Request, session: SessionState = Depends(require_session)
) -> HTMLResponse:
    schedules, alert = await _list_schedules(request, session)
    content = f"<h1>My Schedules</h1>\n{render_schedule_list(schedules)}"
    return HTMLResponse(
        render_shell("My Schedules", content, session, SCHEDULES_ROUTE, alert)
    )


@router.get("/profile", response_class=HTMLResponse)
async def profile(session: SessionState = Depends(require_session)) -> HTMLResponse:
    return HTMLResponse(
        render_shell("Profile", render_profile(session), session, "/profile")
    )


@router.get(SCHEDULES_ROUTE + "/{schedule_id}", response_class=HTMLResponse)
async def schedule_detail(
    schedule_id: str,
    request: Request,
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    editor = _editor(request, session, schedule_id)
    await editor.load()
    return _detail_response(editor, session)


@router.get(SCHEDULES_ROUTE + "/{schedule_id}/edit", response_class=HTMLResponse)
async def edit_schedule_form(
    schedule_id: str,
    request: Request,
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    editor = _editor(request, session, schedule_id)
    if await editor.load():
        editor.begin_edit()
    return _detail_response(editor, session)


@router.post(SCHEDULES_ROUTE + "/{schedule_id}/edit")
async def submit_schedule_edit(  # noqa: PLR0913
    schedule_id: str,
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    session: SessionState = Depends(require_session),
) -> Response:
    """Save the edit form; invalid or failed saves re-render the form."""
    editor = _editor(request, session, schedule_id)
    form = ScheduleForm(
        title=title,
        description=description,
        start_date=start_date,
        end_date=end_date,
    )
    if not editor.check_form(form):
        return _detail_response(editor, session)
    if not await editor.load():
        return _detail_response(editor, session)
    editor.begin_edit()
    if await editor.submit(form):
        return _redirect(_detail_path(schedule_id))
    return _detail_response(editor, session)


@router.post(SCHEDULES_ROUTE + "/{schedule_id}/cancel", response_class=HTMLResponse)
async def cancel_schedule_edit(
    schedule_id: str,
    request: Request,
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    editor = _editor(request, session, schedule_id)
    await editor.cancel_edit()
    return _detail_response(editor, session)


@router.post(SCHEDULES_ROUTE + "/{schedule_id}/complete")
async def complete_schedule(
    schedule_id: str,
    request: Request,
    session: SessionState = Depends(require_session),
) -> Response:
    editor = _editor(request, session, schedule_id)
    if await editor.load() and await editor.mark_complete():
        return _redirect(_detail_path(schedule_id))
    return _detail_response(editor, session)


@router.get(SCHEDULES_ROUTE + "/{schedule_id}/delete", response_class=HTMLResponse)
async def confirm_schedule_delete(
    schedule_id: str, session: SessionState = Depends(require_session)
) -> HTMLResponse:
    path = _detail_path(schedule_id)
    content = render_confirmation(
        "Are you sure you want to delete this schedule?", f"{path}/delete", path
    )
    return HTMLResponse(render_shell("Delete schedule", content, session, path))


@router.post(SCHEDULES_ROUTE + "/{schedule_id}/delete")
async def delete_schedule(
    schedule_id: str,
    request: Request,
    confirm: str = Form(""),
    session: SessionState = Depends(require_session),
) -> Response:
    """Delete after confirmation and leave the detail page on success."""
    if confirm != "yes":
        return await confirm_schedule_delete(schedule_id, session)
    editor = _editor(request, session, schedule_id)
    if await editor.load() and await editor.delete(confirmed=True):
        return _redirect(SCHEDULES_ROUTE)
    return _detail_response(editor, session)


@router.post(SCHEDULES_ROUTE + "/{schedule_id}/resources", response_class=HTMLResponse)
async def upload_schedule_resource(
    schedule_id: str,
    request: Request,
    file: UploadFile | None = File(None),
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    editor = _editor(request, session, schedule_id)
    if await editor.load():
        await editor.upload(await read_upload(file))
    return _detail_response(editor, session)


@router.get(
    SCHEDULES_ROUTE + "/{schedule_id}/resources/{resource_id}/delete",
    response_class=HTMLResponse,
)
async def confirm_resource_delete(
    schedule_id: str,
    resource_id: str,
    session: SessionState = Depends(require_session),
) -> HTMLResponse:
    path = _detail_path(schedule_id)
    content = render_confirmation(
        "Are you sure you want to delete this resource?",
        f"{path}/resources/{resource_id}/delete",
        path,
    )
    return HTMLResponse(render_shell("Delete resource", content, session, path))


@router.post(SCHEDULES_ROUTE + "/{schedule_id}/resources/{resource_id}/delete")
async def delete_schedule_resource(
    schedule_id: str,
    resource_id: str,
    request: Request,
    confirm: str = Form(""),
    session: SessionState = Depends(require_session),
) -> Response:
    if confirm != "yes":
        return await confirm_resource_delete(schedule_id, resource_id, session)
    editor = _editor(request, session, schedule_id)
    if await editor.delete_resource(resource_id, confirmed=True):
        return _redirect(_detail_path(schedule_id))
    if editor.schedule is None:
        await editor.load()
    return _detail_response(editor, session)


def _editor(
    request: Request, session: SessionState, schedule_id: str
) -> ScheduleEditor:
    return get_container(request).schedule_editor(schedule_id, session.access_token)


def _detail_path(schedule_id: str) -> str:
    return f"{SCHEDULES_ROUTE}/{schedule_id}"


def _detail_response(editor: ScheduleEditor, session: SessionState) -> HTMLResponse:
    title = editor.schedule.title if editor.schedule else "Schedule"
    return HTMLResponse(
        render_shell(
            title,
            render_schedule_detail(editor),
            session,
            _detail_path(editor.schedule_id),
            alert=editor.alert,
        ),
        status_code=(
            status.HTTP_404_NOT_FOUND
            if editor.state == NOT_FOUND
            else status.HTTP_200_OK
        ),
    )


def _redirect(location: str) -> RedirectResponse:
    return RedirectResponse(location, status.HTTP_303_SEE_OTHER)


async def _list_schedules(
    request: Request, session: SessionState
) -> tuple[list[Schedule], str | None]:
    service = get_container(request).schedule_service(session.access_token)
    try:
        return await service.list_schedules(), None
    except (ApiError, ValueError):
        logger.exception("Failed to load schedules")
        return [], "Failed to load schedules"
