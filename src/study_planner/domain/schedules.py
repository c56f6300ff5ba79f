"""Models for schedules and their attached resources."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

PENDING = "pending"
COMPLETED = "completed"


class Resource(BaseModel):
    """File attached to a schedule and stored in blob storage."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    file_name: str = Field(alias="fileName")
    file_size: int = Field(default=0, alias="fileSize", ge=0)
    file_type: str | None = Field(default=None, alias="fileType")
    file_url: str = Field(alias="fileUrl")
    uploaded_at: datetime = Field(alias="uploadedAt")
    schedule_id: str | None = Field(default=None, alias="scheduleId")

    @field_validator("uploaded_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Schedule(BaseModel):
    """User-owned study plan as returned by the backend."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    title: str
    description: str = ""
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    status: str = PENDING
    owner_id: str | None = Field(default=None, alias="userId")
    resources: list[Resource] = Field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING

    def to_payload(self) -> dict[str, object]:
        """Return the full schedule record in the backend wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude={"resources"})


@dataclass(frozen=True)
class ScheduleForm:
    """Editable schedule fields as submitted by the edit form."""

    title: str
    description: str
    start_date: str
    end_date: str

    @classmethod
    def from_schedule(cls, schedule: Schedule) -> "ScheduleForm":
        """Pre-populate the form, keeping only the calendar date of each bound."""
        return cls(
            title=schedule.title,
            description=schedule.description,
            start_date=calendar_date(schedule.start_date),
            end_date=calendar_date(schedule.end_date),
        )

    def validate(self) -> dict[str, str]:
        """Return field-level validation messages keyed by field name."""
        errors: dict[str, str] = {}
        if not self.title.strip():
            errors["title"] = "Title is required"
        if not self.description.strip():
            errors["description"] = "Description is required"
        start = _validate_date(errors, "start_date", self.start_date, "Start date")
        end = _validate_date(errors, "end_date", self.end_date, "End date")
        if start is not None and end is not None and end < start:
            errors["end_date"] = "End date must be on or after the start date"
        return errors

    def to_update_payload(self, schedule: Schedule) -> dict[str, object]:
        """Build the full-record update, carrying owner and status forward."""
        return {
            "title": self.title,
            "description": self.description,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "userId": schedule.owner_id,
            "status": schedule.status,
        }


def calendar_date(value: str) -> str:
    """Truncate an ISO timestamp to its ``YYYY-MM-DD`` part."""
    return value.split("T")[0]


def parse_day(value: str) -> date | None:
    """Parse the calendar date of an ISO string, if it has one."""
    try:
        return date.fromisoformat(calendar_date(value.strip()))
    except ValueError:
        return None


def _validate_date(
    errors: dict[str, str], field: str, value: str, label: str
) -> date | None:
    if not value.strip():
        errors[field] = f"{label} is required"
        return None
    parsed = parse_day(value)
    if parsed is None:
        errors[field] = f"{label} must be a valid date (YYYY-MM-DD)"
    return parsed
