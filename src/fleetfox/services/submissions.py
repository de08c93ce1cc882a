"""Submission coordinator for complete upload sessions."""

import asyncio
import logging
from dataclasses import dataclass

from fleetfox.adapters.webhook_client import WebhookClient
from fleetfox.domain.outcomes import (
    ConfigurationError,
    MissingSlotsError,
    SubmissionOutcome,
    TransportError,
    TransportErrorKind,
    WebhookTransportError,
)
from fleetfox.domain.slots import REQUIRED_SLOTS
from fleetfox.domain.submissions import (
    DEFAULT_VEHICLE_ID,
    BatchImage,
    SubmissionBatch,
    SubmissionMetadata,
)
from fleetfox.services.deployment import DeploymentContext, is_loopback_url
from fleetfox.services.responses import interpret_response
from fleetfox.services.runtime_config import ConfigLoader
from fleetfox.services.slot_store import SlotStore

SUBMISSION_TIMEOUT_SECONDS = 30.0

logger = logging.getLogger(__name__)


@dataclass
class SubmissionCoordinator:
    """Validates, assembles and sends batches to the workflow webhook."""

    webhook_client: WebhookClient
    config_loader: ConfigLoader
    deployment: DeploymentContext
    timeout_seconds: float = SUBMISSION_TIMEOUT_SECONDS

    async def submit(
        self,
        store: SlotStore,
        metadata: SubmissionMetadata,
        user_id: str | None = None,
    ) -> SubmissionOutcome:
        """Submit a session; raises ``MissingSlotsError`` before any I/O."""
        batch = self.build_batch(store, metadata, user_id)
        return await self.dispatch(batch)

    def build_batch(
        self,
        store: SlotStore,
        metadata: SubmissionMetadata,
        user_id: str | None = None,
    ) -> SubmissionBatch:
        """Snapshot a complete session into a batch.

        The authenticated user id, when present, replaces the locally entered
        fox id on the batch and on every image.
        """
        missing = store.missing_slots()
        if missing:
            raise MissingSlotsError(missing)

        submitter_id = user_id or metadata.fox_id
        vehicle_id = metadata.vehicle_id or DEFAULT_VEHICLE_ID
        records = store.records
        images = tuple(
            BatchImage(
                **records[slot].model_dump(exclude={"fox_id"}),
                fox_id=submitter_id,
                task_id=metadata.task_id,
                client_id=metadata.client_id,
                vehicle_id=vehicle_id,
            )
            for slot in REQUIRED_SLOTS
        )
        return SubmissionBatch(
            task_id=metadata.task_id,
            fox_id=submitter_id,
            client_id=metadata.client_id,
            vehicle_id=vehicle_id,
            images=images,
        )

    async def dispatch(self, batch: SubmissionBatch) -> SubmissionOutcome:
        """Send a batch once and classify the result."""
        destination = await self._resolve_destination()
        if isinstance(destination, ConfigurationError):
            logger.error(
                "Submission blocked by configuration",
                extra={"task_id": batch.task_id, "reason": destination.message},
            )
            return destination

        payload = batch.to_payload()
        logger.info(
            "Submitting batch to webhook",
            extra={"task_id": batch.task_id, "image_count": len(batch.images)},
        )
        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await self.webhook_client.post_batch(
                    destination, payload, timeout=self.timeout_seconds
                )
        except TimeoutError:
            logger.error("Webhook timed out", extra={"task_id": batch.task_id})
            return TransportError(
                kind=TransportErrorKind.TIMEOUT,
                message="Request timed out. The webhook took too long to respond.",
            )
        except WebhookTransportError as exc:
            logger.error(
                "Webhook delivery failed",
                extra={"task_id": batch.task_id, "kind": exc.kind.value},
            )
            return TransportError(kind=exc.kind, message=str(exc))

        return interpret_response(
            response.status_code, response.content_type, response.text
        )

    async def _resolve_destination(self) -> str | ConfigurationError:
        await self.config_loader.wait_for_load()
        config = self.config_loader.config
        webhook_url = config.webhook_url if config else None
        if not webhook_url:
            return ConfigurationError(
                message="Webhook URL not configured.",
                details=(
                    "Please ensure N8N_WEBHOOK_URL is set in the environment "
                    "variables of this deployment."
                ),
            )
        if self.deployment.is_production and is_loopback_url(webhook_url):
            return ConfigurationError(
                message="Webhook URL points to localhost.",
                details=(
                    "In production the workflow must be publicly reachable. "
                    f"Current URL: {webhook_url}"
                ),
            )
        return webhook_url
