"""Schedule access and the per-page view/edit state machine."""

import logging
from dataclasses import dataclass, field

from study_planner.adapters.api_client import ApiClient, ApiError
from study_planner.domain.schedules import COMPLETED, Schedule, ScheduleForm
from study_planner.domain.uploads import UploadFile, UploadOutcome
from study_planner.services.uploads import UploadService

LOADING = "loading"
VIEWING = "viewing"
EDITING = "editing"
SUBMITTING = "submitting"
NOT_FOUND = "not_found"

SCHEDULES_ROUTE = "/schedules"

logger = logging.getLogger(__name__)


@dataclass
class ScheduleService:
    """Backend operations on schedules and their resources."""

    api_client: ApiClient

    async def list_schedules(self) -> list[Schedule]:
        """Return every schedule visible to the current user."""
        payload = await self.api_client.get("/schedules")
        if not isinstance(payload, list):
            return []
        return [Schedule.model_validate(item) for item in payload]

    async def get_schedule(self, schedule_id: str) -> Schedule:
        payload = await self.api_client.get(f"/schedules/{schedule_id}")
        return Schedule.model_validate(payload)

    async def update_schedule(
        self, schedule_id: str, payload: dict[str, object]
    ) -> None:
        """Replace the full schedule record."""
        await self.api_client.put(f"/schedules/{schedule_id}", payload)

    async def delete_schedule(self, schedule_id: str) -> None:
        await self.api_client.delete(f"/schedules/{schedule_id}")

    async def delete_resource(self, resource_id: str) -> None:
        await self.api_client.delete(f"/resources/{resource_id}")


@dataclass
class ScheduleEditor:
    """State of one schedule detail page.

    Transitions: ``loading -> viewing | not_found``, ``viewing -> editing``,
    ``editing -> submitting -> viewing`` on a successful save and
    ``editing -> viewing`` on cancel. Every successful mutation re-fetches the
    record and replaces the cached copy wholesale.
    """

    schedule_service: ScheduleService
    upload_service: UploadService
    schedule_id: str
    state: str = LOADING
    schedule: Schedule | None = None
    form: ScheduleForm | None = None
    errors: dict[str, str] = field(default_factory=dict)
    alert: str | None = None

    async def load(self) -> bool:
        """Fetch the canonical record and show it."""
        self.state = LOADING
        try:
            schedule = await self.schedule_service.get_schedule(self.schedule_id)
        except (ApiError, ValueError):
            logger.exception(
                "Failed to load schedule", extra={"schedule_id": self.schedule_id}
            )
            self.schedule = None
            self.form = None
            self.state = NOT_FOUND
            self.alert = "Failed to load schedule"
            return False
        self.schedule = schedule
        self.form = ScheduleForm.from_schedule(schedule)
        self.errors = {}
        self.state = VIEWING
        return True

    def begin_edit(self) -> bool:
        """Switch to editing with the form filled from the loaded record."""
        if self.schedule is None or self.state != VIEWING:
            return False
        self.form = ScheduleForm.from_schedule(self.schedule)
        self.errors = {}
        self.state = EDITING
        return True

    async def cancel_edit(self) -> bool:
        """Discard unsaved edits and restore the canonical record."""
        self.form = None
        self.errors = {}
        return await self.load()

    def check_form(self, form: ScheduleForm) -> bool:
        """Validate a submitted form without touching the backend.

        Invalid input leaves the editor in editing with field messages.
        """
        self.form = form
        self.errors = form.validate()
        if self.errors:
            self.state = EDITING
            return False
        return True

    async def submit(self, form: ScheduleForm) -> bool:
        """Validate and save the edit form.

        Invalid input issues no request and keeps the page in editing with
        field messages. A failed save keeps the entered values for retry.
        """
        if self.schedule is None or self.state != EDITING:
            return False
        if not self.check_form(form):
            return False

        self.state = SUBMITTING
        try:
            await self.schedule_service.update_schedule(
                self.schedule.id, form.to_update_payload(self.schedule)
            )
        except ApiError:
            logger.exception(
                "Failed to update schedule", extra={"schedule_id": self.schedule.id}
            )
            self.alert = "Failed to update schedule"
            self.state = EDITING
            return False
        return await self.load()

    async def mark_complete(self) -> bool:
        """Save the last fetched record with its status set to completed."""
        if (
            self.schedule is None
            or self.state != VIEWING
            or not self.schedule.is_pending
        ):
            return False
        payload = self.schedule.to_payload()
        payload["status"] = COMPLETED
        try:
            await self.schedule_service.update_schedule(self.schedule.id, payload)
        except ApiError:
            logger.exception(
                "Failed to complete schedule", extra={"schedule_id": self.schedule.id}
            )
            self.alert = "Failed to update schedule"
            return False
        return await self.load()

    async def delete(self, confirmed: bool) -> bool:
        """Delete the schedule once the user has confirmed."""
        if self.schedule is None or not confirmed:
            return False
        try:
            await self.schedule_service.delete_schedule(self.schedule.id)
        except ApiError:
            logger.exception(
                "Failed to delete schedule", extra={"schedule_id": self.schedule.id}
            )
            self.alert = "Failed to delete schedule"
            return False
        return True

    async def upload(self, file: UploadFile | None) -> UploadOutcome:
        """Attach a file to this schedule and refresh on success."""
        schedule_id = self.schedule.id if self.schedule else None
        outcome = await self.upload_service.upload(schedule_id, file)
        if outcome.ok:
            await self.load()
        else:
            self.alert = outcome.alert
        return outcome

    async def delete_resource(self, resource_id: str, confirmed: bool) -> bool:
        """Remove an attached resource once the user has confirmed."""
        if not confirmed:
            return False
        try:
            await self.schedule_service.delete_resource(resource_id)
        except ApiError:
            logger.exception(
                "Failed to delete resource", extra={"resource_id": resource_id}
            )
            self.alert = "Failed to delete resource"
            return False
        return await self.load()
