"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from fleetfox.adapters.config_source import (
    HttpxConfigSource,
    JsonFileConfigFallback,
    SettingsConfigSource,
)
from fleetfox.adapters.image_probe import HttpxImageProbe
from fleetfox.adapters.json_slot_persistence import profile_persistence_factory
from fleetfox.adapters.offline import (
    DiscardingImageRecordRepository,
    EmptyClientRepository,
    GuestIdentityProvider,
    InlineImageStorage,
)
from fleetfox.adapters.supabase_client_repository import SupabaseClientRepository
from fleetfox.adapters.supabase_identity_provider import SupabaseIdentityProvider
from fleetfox.adapters.supabase_image_record_repository import (
    SupabaseImageRecordRepository,
)
from fleetfox.adapters.supabase_image_storage import SupabaseImageStorage
from fleetfox.adapters.webhook_client import HttpxWebhookClient
from fleetfox.config import Settings
from fleetfox.services.clients import ClientRepository, ClientService
from fleetfox.services.deployment import DeploymentContext
from fleetfox.services.identity import IdentityProvider, IdentityService
from fleetfox.services.notifications import NotificationHub
from fleetfox.services.runtime_config import ConfigLoader
from fleetfox.services.sessions import SessionRegistry
from fleetfox.services.submissions import SubmissionCoordinator
from fleetfox.services.uploads import (
    ImageRecordRepository,
    ImageStorage,
    UploadService,
)

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    config_loader: ConfigLoader
    session_registry: SessionRegistry
    identity_service: IdentityService
    client_service: ClientService
    notification_hub: NotificationHub
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class SupabaseServices:
    """Supabase-backed adapters, or offline stand-ins when unconfigured."""

    storage: ImageStorage
    image_records: ImageRecordRepository
    identity_provider: IdentityProvider
    client_repository: ClientRepository


def build_supabase_services(settings: Settings) -> SupabaseServices:
    """Create Supabase adapters when the project URL and key are set."""
    if not settings.supabase_url or not settings.supabase_anon_key:
        logger.error(
            "Supabase is not configured; photos stay inline and users are guests"
        )
        return SupabaseServices(
            storage=InlineImageStorage(),
            image_records=DiscardingImageRecordRepository(),
            identity_provider=GuestIdentityProvider(),
            client_repository=EmptyClientRepository(),
        )
    supabase_client = create_client(settings.supabase_url, settings.supabase_anon_key)
    return SupabaseServices(
        storage=SupabaseImageStorage(supabase_client, bucket=settings.storage_bucket),
        image_records=SupabaseImageRecordRepository(supabase_client),
        identity_provider=SupabaseIdentityProvider(supabase_client),
        client_repository=SupabaseClientRepository(supabase_client),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase = build_supabase_services(resolved_settings)
    deployment = DeploymentContext.from_url(resolved_settings.public_base_url)

    config_source: HttpxConfigSource | SettingsConfigSource
    if resolved_settings.config_url:
        config_source = HttpxConfigSource.create(resolved_settings.config_url)
    else:
        config_source = SettingsConfigSource(resolved_settings)
    config_loader = ConfigLoader(
        source=config_source,
        deployment=deployment,
        fallback=JsonFileConfigFallback(Path(resolved_settings.dev_config_path)),
    )

    webhook_client = HttpxWebhookClient.create()
    image_probe = HttpxImageProbe.create()
    coordinator = SubmissionCoordinator(
        webhook_client=webhook_client,
        config_loader=config_loader,
        deployment=deployment,
        timeout_seconds=resolved_settings.submission_timeout_seconds,
    )
    upload_service = UploadService(
        storage=supabase.storage, image_records=supabase.image_records
    )
    notification_hub = NotificationHub()
    session_registry = SessionRegistry(
        persistence_factory=profile_persistence_factory(
            Path(resolved_settings.session_storage_dir)
        ),
        probe=image_probe,
        coordinator=coordinator,
        upload_service=upload_service,
        hub=notification_hub,
    )
    identity_service = IdentityService(supabase.identity_provider)
    client_service = ClientService(supabase.client_repository)

    async def close_resources() -> None:
        await webhook_client.close()
        await image_probe.close()
        if isinstance(config_source, HttpxConfigSource):
            await config_source.close()

    return AppContainer(
        settings=resolved_settings,
        config_loader=config_loader,
        session_registry=session_registry,
        identity_service=identity_service,
        client_service=client_service,
        notification_hub=notification_hub,
        close_resources=close_resources,
    )
