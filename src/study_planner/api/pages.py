"""HTML rendering for the dashboard pages."""

from datetime import datetime
from html import escape
from urllib.parse import urlsplit

from study_planner.domain.resources import ResourceEntry, ResourceListing
from study_planner.domain.schedules import Schedule, ScheduleForm, parse_day
from study_planner.domain.sessions import SessionState
from study_planner.services.navigation import (
    SidebarEntry,
    navbar_identity,
    sidebar_entries,
)
from study_planner.services.resources import SORT_OPTIONS
from study_planner.services.schedules import EDITING, NOT_FOUND, ScheduleEditor

_STYLE = """
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 0; }
      .sidebar { width: 16rem; position: fixed; top: 0; bottom: 0; left: 0;
        border-right: 1px solid #e5e7eb; display: flex; flex-direction: column; }
      .sidebar h1 { padding: 1.5rem; margin: 0; border-bottom: 1px solid #e5e7eb; }
      .sidebar nav { flex: 1; padding: 1rem; }
      .sidebar a { display: block; padding: 0.75rem 1rem; color: #374151;
        text-decoration: none; border-radius: 0.5rem; }
      .sidebar a.active { background: #eff6ff; color: #2563eb; font-weight: 600; }
      .navbar { margin-left: 16rem; height: 4rem; border-bottom: 1px solid #e5e7eb;
        display: flex; align-items: center; justify-content: flex-end;
        padding: 0 1.5rem; gap: 0.75rem; }
      .navbar img { width: 32px; height: 32px; border-radius: 50%; }
      main { margin-left: 16rem; padding: 1.5rem; max-width: 56rem; }
      .alert { padding: 0.75rem 1rem; border-radius: 0.5rem; background: #fef2f2;
        color: #991b1b; margin-bottom: 1rem; }
      .notice { padding: 0.75rem 1rem; border-radius: 0.5rem; background: #f0fdf4;
        color: #166534; margin-bottom: 1rem; }
      .card { border: 1px solid #e5e7eb; border-radius: 0.75rem; padding: 1.25rem;
        margin-bottom: 1.5rem; }
      .row { display: flex; justify-content: space-between; align-items: center;
        padding: 0.75rem; border: 1px solid #e5e7eb; border-radius: 0.5rem;
        margin-bottom: 0.5rem; }
      .muted { color: #6b7280; font-size: 0.875rem; }
      .error { color: #dc2626; font-size: 0.875rem; }
      .status { padding: 0.25rem 0.75rem; border-radius: 9999px; }
      .status-completed { background: #dcfce7; color: #166534; }
      .status-pending { background: #fef9c3; color: #854d0e; }
      form.inline { display: inline; }
"""


def render_document(title: str, body: str) -> str:
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(title)} · Study Planner</title>
    <style>{_STYLE}</style>
  </head>
  <body>
{body}
  </body>
</html>
"""


def render_shell(
    title: str,
    content: str,
    session: SessionState,
    current_path: str,
    alert: str | None = None,
    notice: str | None = None,
) -> str:
    """Wrap page content in the sidebar and navbar layout."""
    entries = sidebar_entries(current_path)
    links = "\n".join(_render_nav_link(entry) for entry in entries)
    sidebar = f"""<div class="sidebar">
  <h1>Study Planner</h1>
  <nav>
{links}
  </nav>
  <form method="post" action="/logout" style="padding: 1rem;">
    <button type="submit">Logout</button>
  </form>
</div>"""
    return render_document(
        title,
        f"{sidebar}\n{_render_navbar(session)}\n<main>\n"
        f"{_render_messages(alert, notice)}{content}\n</main>",
    )


def render_loading() -> str:
    return render_document(
        "Loading",
        '<meta http-equiv="refresh" content="2" />'
        '<p class="muted" role="status">Signing you in...</p>',
    )


def render_login(
    dev_login_enabled: bool, demo_email: str, alert: str | None = None
) -> str:
    """Render the sign-in page."""
    if dev_login_enabled:
        methods = f"""<div class="notice">
  <strong>Demo Mode:</strong> Click the button below to login instantly.
</div>
<form method="post" action="/login/quick">
  <button type="submit">Quick Login (Demo)</button>
</form>
<p class="muted">Or use custom email:</p>
<form method="post" action="/login/credentials">
  <input type="email" name="email" value="{escape(demo_email)}"
    placeholder="your@email.com" />
  <button type="submit">Sign In</button>
</form>"""
    else:
        methods = """<form method="post" action="/login/federated">
  <button type="submit">Sign in with Microsoft</button>
</form>"""
    return render_document(
        "Sign in",
        f"""<div class="card" style="max-width: 28rem; margin: 4rem auto;">
  <h1>Study Planner</h1>
  <p class="muted">Sign in to manage your study schedules</p>
  {_render_messages(alert, None)}{methods}
</div>""",
    )


def render_dashboard(schedules: list[Schedule]) -> str:
    pending = sum(1 for schedule in schedules if schedule.is_pending)
    completed = len(schedules) - pending
    return f"""<h1>Dashboard</h1>
<div class="card">
  <p>Total schedules: {len(schedules)}</p>
  <p>Pending: {pending}</p>
  <p>Completed: {completed}</p>
</div>
{render_schedule_list(schedules)}"""


def render_schedule_list(schedules: list[Schedule]) -> str:
    if not schedules:
        return '<div class="card"><p class="muted">No schedules yet</p></div>'
    rows = "\n".join(
        f"""<div class="row">
  <div>
    <a href="/schedules/{escape(schedule.id)}">{escape(schedule.title)}</a>
    <p class="muted">{format_long_date(schedule.start_date)} -
      {format_long_date(schedule.end_date)}</p>
  </div>
  {_render_status(schedule.status)}
</div>"""
        for schedule in schedules
    )
    return f'<div class="card">\n{rows}\n</div>'


def render_schedule_detail(editor: ScheduleEditor) -> str:
    """Render the detail page for the editor's current state."""
    schedule = editor.schedule
    if editor.state == EDITING and editor.form is not None and schedule is None:
        path = f"/schedules/{escape(editor.schedule_id)}"
        return f"""<a href="{path}">&larr; Back</a>
<div class="card">
<h2>Edit Schedule</h2>
{_render_edit_form(path, editor.form, editor.errors)}
</div>"""
    if editor.state == NOT_FOUND or schedule is None:
        return """<div class="card">
  <p class="muted">Schedule not found</p>
  <a href="/schedules">Back to Schedules</a>
</div>"""

    base = f"/schedules/{escape(schedule.id)}"
    if editor.state == EDITING and editor.form is not None:
        header = ""
        card = f"""<h2>Edit Schedule</h2>
{_render_edit_form(base, editor.form, editor.errors)}"""
    else:
        complete = (
            f"""<form class="inline" method="post" action="{base}/complete">
  <button type="submit">Mark Complete</button>
</form>"""
            if schedule.is_pending
            else ""
        )
        header = f"""<div>
  <a href="{base}/edit">Edit</a>
  {complete}
  <a href="{base}/delete">Delete</a>
</div>"""
        card = f"""<div class="row" style="border: none;">
  <h2>{escape(schedule.title)}</h2>
  {_render_status(schedule.status)}
</div>
<h3 class="muted">Description</h3>
<p>{escape(schedule.description)}</p>
<h3 class="muted">Start Date</h3>
<p>{format_long_date(schedule.start_date)}</p>
<h3 class="muted">End Date</h3>
<p>{format_long_date(schedule.end_date)}</p>"""

    resources = [
        ResourceEntry(resource=resource, schedule_id=schedule.id, schedule_title="")
        for resource in schedule.resources
    ]
    resource_rows = _render_resource_rows(
        resources, base + "/resources", show_schedule=False
    )
    return f"""<a href="/schedules">&larr; Back</a>
{header}
<div class="card">
{card}
</div>
<div class="card">
  <h2>Resources</h2>
  <form method="post" action="{base}/resources" enctype="multipart/form-data">
    <input type="file" name="file" />
    <button type="submit">Upload File</button>
  </form>
  {resource_rows}
</div>"""


def render_upload_page(
    listing: ResourceListing,
    schedule_filter: str | None,
    search: str | None,
    sort: str,
) -> str:
    """Render the upload form and the aggregated resource list."""
    selected = listing.selected_schedule_id
    options = "\n".join(
        f'<option value="{escape(schedule.id)}"'
        f'{" selected" if schedule.id == selected else ""}>'
        f"{escape(schedule.title)}</option>"
        for schedule in listing.schedules
    )
    filter_options = "\n".join(
        f'<option value="{escape(schedule.id)}"'
        f'{" selected" if schedule.id == schedule_filter else ""}>'
        f"{escape(schedule.title)}</option>"
        for schedule in listing.schedules
    )
    sort_options = "\n".join(
        f'<option value="{option}"{" selected" if option == sort else ""}>'
        f"{option.title()}</option>"
        for option in SORT_OPTIONS
    )
    hint = "" if selected else '<p class="muted">Please select a schedule first</p>'
    resource_rows = _render_resource_rows(
        listing.entries, "/upload/resources", show_schedule=True
    )
    return f"""<h1>Upload Resources</h1>
<p class="muted">Upload study materials and resources</p>
<div class="card">
  <h2>Upload New File</h2>
  <form method="post" action="/upload" enctype="multipart/form-data">
    <label>Select Schedule
      <select name="schedule_id">
        <option value="">Select a schedule</option>
{options}
      </select>
    </label>
    <label>Choose File <input type="file" name="file" /></label>
    <button type="submit">Upload File</button>
    {hint}
  </form>
</div>
<div class="card">
  <h2>All Uploaded Resources</h2>
  <form method="get" action="/upload">
    <input type="search" name="q" value="{escape(search or '')}"
      placeholder="Search files" />
    <select name="schedule">
      <option value="">All schedules</option>
{filter_options}
    </select>
    <select name="sort">
{sort_options}
    </select>
    <button type="submit">Apply</button>
  </form>
  {resource_rows}
</div>"""


def render_confirmation(question: str, action: str, cancel_href: str) -> str:
    """Render an explicit confirmation step for a destructive action."""
    return f"""<div class="card">
  <p>{escape(question)}</p>
  <form class="inline" method="post" action="{escape(action)}">
    <input type="hidden" name="confirm" value="yes" />
    <button type="submit">Confirm</button>
  </form>
  <a href="{escape(cancel_href)}">Cancel</a>
</div>"""


def render_profile(session: SessionState) -> str:
    identity = navbar_identity(session)
    if identity is None:
        return '<p class="muted">Not signed in</p>'
    return f"""<h1>Profile</h1>
<div class="card">
  <p>Name: {escape(identity.name or '')}</p>
  <p>Email: {escape(identity.email or '')}</p>
</div>"""


def format_long_date(value: str) -> str:
    """Format an ISO date as ``Month d, yyyy``."""
    day = parse_day(value)
    if day is None:
        return escape(value)
    return f"{day:%B} {day.day}, {day.year}"


def format_short_date(value: datetime) -> str:
    """Format a timestamp as ``Mon d, yyyy``."""
    return f"{value:%b} {value.day}, {value.year}"


def safe_url(value: str | None) -> str | None:
    """Return the escaped URL if it uses http or https, otherwise None."""
    if not value:
        return None
    if urlsplit(value.strip()).scheme.lower() not in {"http", "https"}:
        return None
    return escape(value.strip())


def format_size(size: int) -> str:
    return f"{size / 1024:.2f} KB"


def _render_nav_link(entry: SidebarEntry) -> str:
    css = ' class="active"' if entry.active else ""
    return f'<a href="{escape(entry.link.href)}"{css}>{escape(entry.link.name)}</a>'


def _render_navbar(session: SessionState) -> str:
    identity = navbar_identity(session)
    if identity is None:
        return '<div class="navbar"></div>'
    avatar = ""
    image = safe_url(identity.image)
    if image is not None:
        alt = escape(identity.name or "User")
        avatar = f'<img src="{image}" alt="{alt}" />'
    return f"""<div class="navbar">
  {avatar}
  <div>
    <div>{escape(identity.name or '')}</div>
    <div class="muted">{escape(identity.email or '')}</div>
  </div>
</div>"""


def _render_messages(alert: str | None, notice: str | None) -> str:
    parts = []
    if alert:
        parts.append(f'<div class="alert" role="alert">{escape(alert)}</div>\n')
    if notice:
        parts.append(f'<div class="notice" role="status">{escape(notice)}</div>\n')
    return "".join(parts)


def _render_status(status: str) -> str:
    css = "status-completed" if status == "completed" else "status-pending"
    return f'<span class="status {css}">{escape(status)}</span>'


def _render_edit_form(base: str, form: ScheduleForm, errors: dict[str, str]) -> str:
    def field_error(name: str) -> str:
        message = errors.get(name)
        return f'<p class="error">{escape(message)}</p>' if message else ""

    return f"""<form method="post" action="{base}/edit">
  <label>Title *
    <input type="text" name="title" value="{escape(form.title)}" />
  </label>
  {field_error('title')}
  <label>Description *
    <textarea name="description" rows="4">{escape(form.description)}</textarea>
  </label>
  {field_error('description')}
  <label>Start Date *
    <input type="date" name="start_date" value="{escape(form.start_date)}" />
  </label>
  {field_error('start_date')}
  <label>End Date *
    <input type="date" name="end_date" value="{escape(form.end_date)}" />
  </label>
  {field_error('end_date')}
  <button type="submit">Save Changes</button>
</form>
<form method="post" action="{base}/cancel">
  <button type="submit">Cancel</button>
</form>"""


def _render_resource_rows(
    entries: list[ResourceEntry], delete_base: str, show_schedule: bool
) -> str:
    if not entries:
        return '<p class="muted">No resources uploaded yet</p>'
    rows = []
    for entry in entries:
        resource = entry.resource
        details = [
            format_size(resource.file_size),
            format_short_date(resource.uploaded_at),
        ]
        if show_schedule and entry.schedule_title:
            details.append(escape(entry.schedule_title))
        delete_href = f"{delete_base}/{escape(resource.id)}/delete"
        summary = " &bull; ".join(details)
        file_href = safe_url(resource.file_url)
        view = (
            f'<a href="{file_href}" target="_blank" rel="noopener noreferrer">View</a>'
            if file_href is not None
            else ""
        )
        rows.append(
            f"""<div class="row">
  <div>
    <p>{escape(resource.file_name)}</p>
    <p class="muted">{summary}</p>
  </div>
  <div>
    {view}
    <a href="{delete_href}">Delete</a>
  </div>
</div>"""
        )
    return "\n".join(rows)
