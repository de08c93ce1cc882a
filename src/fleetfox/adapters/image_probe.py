"""Reachability checks for stored images."""

import base64
import binascii
from dataclasses import dataclass

import httpx

from fleetfox.services.slot_store import ImageProbe


@dataclass
class HttpxImageProbe(ImageProbe):
    """Image probe using httpx for remote URLs."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImageProbe":
        """Create a probe with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def is_reachable(self, url: str) -> bool:
        """Return True when the image loads."""
        if url.startswith("data:"):
            return _is_valid_data_url(url)
        if not url.startswith(("http://", "https://")):
            return False
        try:
            response = await self.http_client.head(url, timeout=10)
            if response.status_code in {405, 501}:
                response = await self.http_client.get(url, timeout=10)
        except httpx.HTTPError:
            return False
        return response.is_success

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _is_valid_data_url(url: str) -> bool:
    header, _, data = url.partition(",")
    if not data or not header.endswith(";base64"):
        return False
    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True
