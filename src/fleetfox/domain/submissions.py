"""Domain models for submission batches."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from fleetfox.domain.slots import UploadedImageRecord

DEFAULT_VEHICLE_ID = "UNKNOWN"


@dataclass(frozen=True)
class SubmissionMetadata:
    """Identifiers entered or generated for one upload session."""

    task_id: str
    fox_id: str
    client_id: str
    vehicle_id: str = DEFAULT_VEHICLE_ID


class BatchImage(UploadedImageRecord):
    """Uploaded image stamped with the batch identifiers."""

    task_id: str
    client_id: str
    vehicle_id: str


class SubmissionBatch(BaseModel):
    """Snapshot of a complete session as sent to the workflow webhook."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    fox_id: str
    client_id: str
    vehicle_id: str
    images: tuple[BatchImage, ...]

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body for the webhook."""
        return self.model_dump(mode="json")
