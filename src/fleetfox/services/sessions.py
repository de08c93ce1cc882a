"""Per-profile upload sessions."""

import logging
import re
from collections import OrderedDict, deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field

from fleetfox.domain.quality import QualityCheckResult
from fleetfox.domain.slots import REQUIRED_SLOTS, PhotoSlot, UploadedImageRecord
from fleetfox.services.identity import GUEST, Identity
from fleetfox.services.notifications import (
    NotificationBanner,
    NotificationHub,
    build_banner,
)
from fleetfox.services.reconciler import PresentationReconciler
from fleetfox.services.rendering import ResultView
from fleetfox.services.slot_store import ImageProbe, SlotPersistence, SlotStore
from fleetfox.services.submissions import SubmissionCoordinator
from fleetfox.services.uploads import UploadService

PROFILE_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"
_PROFILE_ID_RE = re.compile(PROFILE_ID_PATTERN)

MAX_BANNERS = 20
MAX_SESSIONS = 256

logger = logging.getLogger(__name__)


@dataclass
class UploadSessionManager:
    """One profile's upload session: slots, result panel and notifications."""

    profile_id: str
    store: SlotStore
    reconciler: PresentationReconciler
    upload_service: UploadService
    hub: NotificationHub
    identity: Identity = GUEST
    banners: deque[NotificationBanner] = field(
        default_factory=lambda: deque(maxlen=MAX_BANNERS)
    )

    async def upload(
        self, slot: PhotoSlot, content: bytes, identity: Identity = GUEST
    ) -> UploadedImageRecord:
        """Upload a photo into a slot."""
        self.attach(identity)
        return await self.upload_service.upload_slot(
            self.store, slot, content, user_id=identity.user_id
        )

    def remove(self, slot: PhotoSlot) -> None:
        """Empty a slot."""
        self.store.remove(slot)

    def restore(self) -> list[PhotoSlot]:
        """Reload persisted slots; unreachable images are evicted later."""
        return self.store.restore()

    async def submit(  # noqa: PLR0913
        self,
        client_id: str,
        vehicle_id: str | None = None,
        task_id: str | None = None,
        fox_id: str | None = None,
        identity: Identity = GUEST,
    ) -> ResultView:
        """Submit the session and subscribe to results for the submitter.

        The subscription is in place before the request goes out, so a verdict
        pushed while the webhook call is still open reaches the session.
        """
        self.attach(identity)
        if self.reconciler.submit_enabled:
            self._subscribe(
                identity.user_id or fox_id or self.reconciler.identifiers.fox_id
            )
        view = await self.reconciler.submit(
            client_id=client_id,
            vehicle_id=vehicle_id,
            task_id=task_id,
            fox_id=fox_id,
            user_id=identity.user_id,
        )
        batch = self.reconciler.submitted_batch
        if batch is not None:
            self._subscribe(batch.fox_id)
        return view

    def attach(self, identity: Identity) -> None:
        """Record who uses the session and keep its subscription current."""
        if identity == self.identity and self.hub.is_subscribed(self.profile_id):
            return
        self.identity = identity
        self._subscribe(identity.user_id)

    def handle_notification(self, result: QualityCheckResult) -> None:
        """Callback for pushed results."""
        self.banners.append(build_banner(result))
        if self.reconciler.on_notification(result):
            logger.info(
                "Pushed verdict resolved pending submission",
                extra={"profile_id": self.profile_id, "task_id": result.task_id},
            )

    def snapshot(self) -> dict[str, object]:
        """Return the session state for clients."""
        records = self.store.records
        view = self.reconciler.view
        return {
            "profile_id": self.profile_id,
            "task_id": self.reconciler.identifiers.task_id,
            "fox_id": self.reconciler.identifiers.fox_id,
            "slots": {
                slot.value: {
                    "label": slot.label,
                    "record": (
                        records[slot].model_dump(mode="json")
                        if slot in records
                        else None
                    ),
                }
                for slot in REQUIRED_SLOTS
            },
            "filled_count": self.store.filled_count,
            "required_count": len(REQUIRED_SLOTS),
            "is_complete": self.store.is_complete(),
            "state": self.reconciler.state.value,
            "submit_enabled": self.reconciler.submit_enabled,
            "result": asdict(view) if view is not None else None,
            "notifications": [asdict(banner) for banner in self.banners],
        }

    def _subscribe(self, user_id: str | None) -> None:
        self.hub.subscribe(
            self.profile_id,
            self.handle_notification,
            role=self.identity.role,
            user_id=user_id,
            client_id=self.identity.client_id,
        )


@dataclass
class SessionRegistry:
    """Creates and caches one session per profile.

    At most ``max_sessions`` sessions are kept; the least recently used idle one
    is dropped, with its subscription, to make room. Its slots stay persisted and
    come back on the next access.
    """

    persistence_factory: Callable[[str], SlotPersistence]
    probe: ImageProbe
    coordinator: SubmissionCoordinator
    upload_service: UploadService
    hub: NotificationHub
    max_sessions: int = MAX_SESSIONS
    _sessions: OrderedDict[str, UploadSessionManager] = field(
        default_factory=OrderedDict
    )

    def get(self, profile_id: str) -> UploadSessionManager:
        """Return the profile's session, restoring it on first access."""
        if not _PROFILE_ID_RE.match(profile_id):
            raise ValueError(f"Invalid profile id: {profile_id!r}")
        manager = self._sessions.get(profile_id)
        if manager is not None:
            self._sessions.move_to_end(profile_id)
            return manager
        self._evict_idle()
        store = SlotStore(
            persistence=self.persistence_factory(profile_id), probe=self.probe
        )
        manager = UploadSessionManager(
            profile_id=profile_id,
            store=store,
            reconciler=PresentationReconciler(
                store=store, coordinator=self.coordinator
            ),
            upload_service=self.upload_service,
            hub=self.hub,
        )
        self._sessions[profile_id] = manager
        manager.restore()
        return manager

    def _evict_idle(self) -> None:
        # sessions with a submission in flight are never evicted
        idle = [
            key
            for key, session in self._sessions.items()
            if session.reconciler.submit_enabled
        ]
        for key in idle:
            if len(self._sessions) < self.max_sessions:
                return
            logger.info("Evicting idle session", extra={"profile_id": key})
            self.discard(key)

    def discard(self, profile_id: str) -> None:
        """Forget a cached session and its subscription."""
        self._sessions.pop(profile_id, None)
        self.hub.unsubscribe(profile_id)
