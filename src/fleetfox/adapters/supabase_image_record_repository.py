"""Supabase-backed image metadata repository."""

import logging
from dataclasses import dataclass

from postgrest import APIError
from supabase import Client

from fleetfox.domain.slots import UploadedImageRecord
from fleetfox.services.uploads import ImageRecordRepository

_FOREIGN_KEY_CODES = {"23503"}
_PERMISSION_CODES = {"42501", "PGRST301"}

logger = logging.getLogger(__name__)


@dataclass
class SupabaseImageRecordRepository(ImageRecordRepository):
    """Writes uploaded photo metadata to the qa_images table."""

    client: Client

    def create_image_record(self, record: UploadedImageRecord) -> bool:
        """Insert a metadata row; expected rejections return False."""
        try:
            response = (
                self.client.table("qa_images")
                .insert(record.model_dump(mode="json"))
                .execute()
            )
        except APIError as exc:
            message = (exc.message or "").lower()
            if exc.code in _FOREIGN_KEY_CODES or "foreign key" in message:
                logger.debug("Image metadata not saved: user not in users table")
                return False
            if (
                exc.code in _PERMISSION_CODES
                or "rls" in message
                or "permission" in message
            ):
                logger.debug("Image metadata not saved: RLS or permission denied")
                return False
            logger.warning(
                "Unexpected error saving image metadata",
                extra={"code": exc.code, "reason": exc.message},
            )
            return False
        return bool(response.data)
