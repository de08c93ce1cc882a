"""Supabase Storage bucket for uploaded photos."""

from dataclasses import dataclass

from supabase import Client

from fleetfox.services.uploads import ImageStorage


@dataclass
class SupabaseImageStorage(ImageStorage):
    """Stores photos in a public Supabase Storage bucket."""

    client: Client
    bucket: str = "vehicle-qa-images"

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Upload a file without overwriting and return its public URL."""
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(
            path,
            content,
            file_options={
                "cache-control": "3600",
                "upsert": "false",
                "content-type": content_type,
            },
        )
        return bucket.get_public_url(path)
