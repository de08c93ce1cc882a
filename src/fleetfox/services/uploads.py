"""Photo uploads into session slots."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from fleetfox.domain.slots import PhotoSlot, UploadedImageRecord
from fleetfox.services.identifiers import generate_image_id
from fleetfox.services.slot_store import SlotStore

logger = logging.getLogger(__name__)


class ImageStorage(Protocol):
    """Durable storage for uploaded photos."""

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store a file and return its public URL."""


class ImageRecordRepository(Protocol):
    """Reporting table for uploaded photo metadata."""

    def create_image_record(self, record: UploadedImageRecord) -> bool:
        """Insert a metadata row; return whether it was stored."""


@dataclass
class UploadService:
    """Uploads a photo and fills its slot."""

    storage: ImageStorage
    image_records: ImageRecordRepository

    async def upload_slot(
        self,
        store: SlotStore,
        slot: PhotoSlot,
        content: bytes,
        user_id: str | None = None,
    ) -> UploadedImageRecord:
        """Store the photo, fill the slot and record its metadata.

        Storage failures fall back to an inline data URL so the slot still
        fills.
        """
        if not content:
            raise ValueError("Uploaded image is empty")
        image_id = generate_image_id()
        path = storage_path(image_id, slot)
        try:
            image_url = await asyncio.to_thread(
                self.storage.upload, path, content, detect_mime_type(content)
            )
        except Exception:
            logger.warning(
                "Storage upload failed; embedding image inline",
                extra={"slot": slot.value, "image_id": image_id},
                exc_info=True,
            )
            image_url = to_data_url(content)

        record = UploadedImageRecord(
            image_id=image_id,
            image_url=image_url,
            image_type=slot,
            fox_id=user_id,
        )
        store.put(slot, record)
        await self._save_record(record)
        return record

    async def _save_record(self, record: UploadedImageRecord) -> None:
        if not record.fox_id:
            logger.debug("Skipping image metadata without a user id")
            return
        try:
            await asyncio.to_thread(self.image_records.create_image_record, record)
        except Exception:
            logger.warning(
                "Failed to save image metadata",
                extra={"image_id": record.image_id},
                exc_info=True,
            )


def storage_path(image_id: str, slot: PhotoSlot) -> str:
    """Return the object path for an uploaded photo."""
    return f"uploads/{image_id}_{slot.value}.jpg"


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
