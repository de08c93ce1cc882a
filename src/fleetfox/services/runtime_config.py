"""Runtime configuration loaded before submissions."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from fleetfox.services.deployment import DeploymentContext, is_loopback_url

logger = logging.getLogger(__name__)


class ConfigLoadError(Exception):
    """Raised when a configuration source cannot provide usable values."""


class ConfigSource(Protocol):
    """Provides the public configuration payload."""

    async def fetch(self) -> dict[str, object]:
        """Return the raw configuration payload."""


class ConfigFallback(Protocol):
    """Developer-only configuration used when the source fails locally."""

    def load(self) -> dict[str, object] | None:
        """Return a raw configuration payload, if one is available."""


@dataclass(frozen=True)
class RuntimeConfig:
    """Validated public configuration."""

    supabase_url: str
    supabase_anon_key: str
    webhook_url: str | None


def parse_runtime_config(data: dict[str, object]) -> RuntimeConfig:
    """Validate a raw configuration payload."""
    error = data.get("error")
    if error:
        raise ConfigLoadError(str(error))
    supabase_url = str(data.get("SUPABASE_URL") or "")
    supabase_anon_key = str(data.get("SUPABASE_ANON_KEY") or "")
    if not supabase_url or not supabase_anon_key:
        raise ConfigLoadError(
            "Missing required environment variables. "
            "Please set SUPABASE_URL and SUPABASE_ANON_KEY."
        )
    webhook_url = str(data.get("N8N_WEBHOOK_URL") or "") or None
    return RuntimeConfig(
        supabase_url=supabase_url,
        supabase_anon_key=supabase_anon_key,
        webhook_url=webhook_url,
    )


@dataclass
class ConfigLoader:
    """Loads configuration once and shares it with every session."""

    source: ConfigSource
    deployment: DeploymentContext
    fallback: ConfigFallback | None = None
    _config: RuntimeConfig | None = field(default=None, init=False)
    _loaded: bool = field(default=False, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    @property
    def loaded(self) -> bool:
        """Whether a load attempt has finished."""
        return self._loaded

    @property
    def config(self) -> RuntimeConfig | None:
        """Return the loaded configuration, if any."""
        return self._config

    async def load(self) -> RuntimeConfig | None:
        """Load configuration; concurrent callers share one attempt."""
        async with self._lock:
            if self._loaded:
                return self._config
            try:
                self._config = parse_runtime_config(await self.source.fetch())
            except ConfigLoadError as exc:
                logger.error("Failed to load config", extra={"reason": str(exc)})
                self._config = self._load_fallback()
            else:
                self._warn_about_webhook(self._config)
            self._loaded = True
            return self._config

    async def wait_for_load(self) -> bool:
        """Wait until configuration is loaded; return whether it is usable."""
        return await self.load() is not None

    def reset(self) -> None:
        """Forget the loaded configuration so the next load refetches it."""
        self._config = None
        self._loaded = False

    def _load_fallback(self) -> RuntimeConfig | None:
        if not self.deployment.is_local:
            logger.error(
                "Config endpoint failed outside local development; "
                "check the deployment environment variables"
            )
            return None
        if self.fallback is None:
            return None
        try:
            data = self.fallback.load()
        except Exception:
            logger.exception("Failed to read local development config")
            return None
        if data is None:
            logger.error("No configuration available")
            return None
        try:
            config = parse_runtime_config(data)
        except ConfigLoadError as exc:
            logger.error("Invalid local development config", extra={"reason": str(exc)})
            return None
        logger.info("Using local development config")
        return config

    def _warn_about_webhook(self, config: RuntimeConfig) -> None:
        if not self.deployment.is_local:
            return
        if config.webhook_url is None:
            logger.warning("N8N_WEBHOOK_URL is not set")
        elif is_loopback_url(config.webhook_url):
            logger.warning("N8N_WEBHOOK_URL points to localhost")
