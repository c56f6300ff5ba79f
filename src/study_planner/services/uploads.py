"""Three-phase resource upload through a pre-signed blob URL."""

import logging
from dataclasses import dataclass

from study_planner.adapters.api_client import ApiClient, ApiError
from study_planner.adapters.blob_storage_client import (
    BlobStorageClient,
    BlobUploadError,
)
from study_planner.domain.uploads import UploadFile, UploadOutcome, UploadSlot

SELECT_SCHEDULE_MESSAGE = "Please select a schedule first"
UPLOAD_FAILED_MESSAGE = "Failed to upload file"

logger = logging.getLogger(__name__)


@dataclass
class UploadService:
    """Request a slot, transfer the bytes, then confirm the metadata.

    Phases run in order and none is retried. A failed transfer never reaches
    the confirmation call, so no Resource record is created; a blob that was
    written before a failed confirmation is left in storage. ``uploading`` lives
    as long as the instance, which the web app builds per request.
    """

    api_client: ApiClient
    blob_client: BlobStorageClient
    uploading: bool = False

    async def upload(
        self, schedule_id: str | None, file: UploadFile | None
    ) -> UploadOutcome:
        """Upload a file to a schedule and report the outcome."""
        if not schedule_id or file is None:
            self.uploading = False
            return UploadOutcome(ok=False, alert=SELECT_SCHEDULE_MESSAGE)

        self.uploading = True
        try:
            slot = await self.request_slot(schedule_id, file)
            await self.blob_client.put_blob(
                slot.sas_url, file.content, file.declared_type
            )
            await self.confirm(schedule_id, file, slot)
        except (ApiError, BlobUploadError, ValueError):
            logger.exception(
                "Failed to upload file",
                extra={"schedule_id": schedule_id, "file_name": file.name},
            )
            return UploadOutcome(ok=False, alert=UPLOAD_FAILED_MESSAGE)
        finally:
            self.uploading = False

        logger.info(
            "Uploaded resource",
            extra={"schedule_id": schedule_id, "file_name": file.name},
        )
        return UploadOutcome(ok=True, file_url=slot.file_url)

    async def request_slot(self, schedule_id: str, file: UploadFile) -> UploadSlot:
        """Ask the backend for a single-use SAS upload target."""
        payload = await self.api_client.get(
            "/upload/sas", query={"fileName": file.name, "scheduleId": schedule_id}
        )
        return UploadSlot.model_validate(payload)

    async def confirm(
        self, schedule_id: str, file: UploadFile, slot: UploadSlot
    ) -> None:
        """Record the uploaded file's metadata against the schedule."""
        await self.api_client.post(
            "/upload/finish",
            {
                "scheduleId": schedule_id,
                "fileName": file.name,
                "fileSize": file.size,
                "fileType": file.declared_type,
                "fileUrl": slot.file_url,
            },
        )
