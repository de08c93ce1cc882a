"""Configuration sources for the runtime config loader."""

import json
import time
from dataclasses import dataclass
from pathlib import Path

import httpx

from fleetfox.config import Settings, public_config
from fleetfox.services.runtime_config import (
    ConfigFallback,
    ConfigLoadError,
    ConfigSource,
)


@dataclass
class HttpxConfigSource(ConfigSource):
    """Fetches configuration from a config-proxy endpoint."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxConfigSource":
        """Create a config source with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def fetch(self) -> dict[str, object]:
        """GET the configuration, bypassing caches."""
        try:
            response = await self.http_client.get(
                self.url,
                params={"t": int(time.time() * 1000)},
                headers={"Cache-Control": "no-cache"},
                timeout=10,
            )
        except httpx.HTTPError as exc:
            raise ConfigLoadError(f"Config request failed: {exc}") from exc
        if response.is_error:
            raise ConfigLoadError(
                f"Config endpoint failed with status {response.status_code}: "
                f"{response.text[:200]}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ConfigLoadError("Config endpoint returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise ConfigLoadError("Config endpoint returned an unexpected payload")
        return data

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


@dataclass
class SettingsConfigSource(ConfigSource):
    """Serves configuration straight from the process settings."""

    settings: Settings

    async def fetch(self) -> dict[str, object]:
        """Return the same payload the config-proxy endpoint would."""
        return dict(public_config(self.settings))


@dataclass
class JsonFileConfigFallback(ConfigFallback):
    """Developer config stored as a JSON file."""

    path: Path

    def load(self) -> dict[str, object] | None:
        """Return the file contents, or None when the file is absent or invalid."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
