"""Adapters used when Supabase is not configured."""

from dataclasses import dataclass

from fleetfox.domain.slots import UploadedImageRecord
from fleetfox.services.clients import ClientRepository
from fleetfox.services.identity import IdentityProvider
from fleetfox.services.uploads import ImageRecordRepository, ImageStorage, to_data_url


@dataclass
class InlineImageStorage(ImageStorage):
    """Keeps photos inline as data URLs."""

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        return to_data_url(content)


@dataclass
class DiscardingImageRecordRepository(ImageRecordRepository):
    def create_image_record(self, record: UploadedImageRecord) -> bool:
        return False


@dataclass
class GuestIdentityProvider(IdentityProvider):
    """Treats every token as anonymous."""

    def get_user_id(self, access_token: str) -> str | None:
        return None

    def get_profile(self, user_id: str) -> dict[str, object] | None:
        return None


@dataclass
class EmptyClientRepository(ClientRepository):
    def list_active_clients(self) -> list[dict[str, object]]:
        return []
