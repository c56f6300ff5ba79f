"""Models for the aggregated resource list."""

from dataclasses import dataclass, field

from study_planner.domain.schedules import Resource, Schedule


@dataclass(frozen=True)
class ResourceEntry:
    """Resource annotated with its owning schedule."""

    resource: Resource
    schedule_id: str
    schedule_title: str


@dataclass(frozen=True)
class ResourceListing:
    """Schedules and their flattened resources for one page view."""

    schedules: list[Schedule] = field(default_factory=list)
    entries: list[ResourceEntry] = field(default_factory=list)
    selected_schedule_id: str | None = None
