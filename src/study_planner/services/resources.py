"""Aggregated view of resources across all schedules."""

import logging
from dataclasses import dataclass

from study_planner.adapters.api_client import ApiError
from study_planner.domain.resources import ResourceEntry, ResourceListing
from study_planner.domain.schedules import Schedule
from study_planner.services.schedules import ScheduleService

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_NAME = "name"
SORT_SIZE = "size"
SORT_OPTIONS = (SORT_NEWEST, SORT_OLDEST, SORT_NAME, SORT_SIZE)

logger = logging.getLogger(__name__)


@dataclass
class ResourceListService:
    """Flatten the resources embedded in every schedule into one list.

    The whole schedule collection is fetched on every call, so the cost grows
    with the total number of resources.
    """

    schedule_service: ScheduleService

    async def list_resources(
        self,
        schedule_id: str | None = None,
        search: str | None = None,
        sort: str = SORT_NEWEST,
        selected_schedule_id: str | None = None,
    ) -> ResourceListing:
        """Fetch schedules once and return the filtered, sorted resources."""
        schedules = await self.schedule_service.list_schedules()
        entries = filter_entries(flatten_resources(schedules), schedule_id, search)
        return ResourceListing(
            schedules=schedules,
            entries=sort_entries(entries, sort),
            selected_schedule_id=_default_selection(schedules, selected_schedule_id),
        )

    async def delete_resource(self, resource_id: str, confirmed: bool) -> str | None:
        """Delete a resource once confirmed; return an alert on failure."""
        if not confirmed:
            return None
        try:
            await self.schedule_service.delete_resource(resource_id)
        except ApiError:
            logger.exception(
                "Failed to delete resource", extra={"resource_id": resource_id}
            )
            return "Failed to delete resource"
        return None


def flatten_resources(schedules: list[Schedule]) -> list[ResourceEntry]:
    """Annotate each embedded resource with its owning schedule."""
    return [
        ResourceEntry(
            resource=resource,
            schedule_id=schedule.id,
            schedule_title=schedule.title,
        )
        for schedule in schedules
        for resource in schedule.resources
    ]


def filter_entries(
    entries: list[ResourceEntry], schedule_id: str | None, search: str | None
) -> list[ResourceEntry]:
    """Keep entries of one schedule and/or whose file name contains a term."""
    needle = (search or "").strip().lower()
    return [
        entry
        for entry in entries
        if (not schedule_id or entry.schedule_id == schedule_id)
        and (not needle or needle in entry.resource.file_name.lower())
    ]


def sort_entries(entries: list[ResourceEntry], sort: str) -> list[ResourceEntry]:
    """Order entries; unknown sort keys fall back to newest first."""
    if sort == SORT_OLDEST:
        return sorted(entries, key=lambda entry: entry.resource.uploaded_at)
    if sort == SORT_NAME:
        return sorted(entries, key=lambda entry: entry.resource.file_name.lower())
    if sort == SORT_SIZE:
        return sorted(entries, key=lambda entry: entry.resource.file_size, reverse=True)
    return sorted(entries, key=lambda entry: entry.resource.uploaded_at, reverse=True)


def _default_selection(
    schedules: list[Schedule], selected_schedule_id: str | None
) -> str | None:
    if selected_schedule_id is not None:
        return selected_schedule_id or None
    return schedules[0].id if schedules else None
