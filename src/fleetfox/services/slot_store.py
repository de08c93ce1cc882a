"""Slot store for in-progress upload sessions."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from fleetfox.domain.slots import (
    REQUIRED_SLOTS,
    PhotoSlot,
    UploadedImageRecord,
    parse_slot,
)

PERSISTENCE_KEY = "qa_uploaded_images"

logger = logging.getLogger(__name__)


class SlotPersistence(Protocol):
    """Durable key-value storage for serialized sessions."""

    def load(self, key: str) -> str | None:
        """Return the stored blob for a key, if present."""

    def save(self, key: str, blob: str) -> None:
        """Store a blob under a key, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove the blob stored under a key."""


class ImageProbe(Protocol):
    """Checks whether a stored image can still be loaded."""

    async def is_reachable(self, url: str) -> bool:
        """Return True when the image behind the URL loads."""


@dataclass
class SlotStore:
    """Mapping of filled photo slots, persisted after every mutation."""

    persistence: SlotPersistence
    probe: ImageProbe
    key: str = PERSISTENCE_KEY
    _records: dict[PhotoSlot, UploadedImageRecord] = field(
        default_factory=dict, init=False
    )
    _unverified: dict[PhotoSlot, str] = field(default_factory=dict, init=False)
    _verification: asyncio.Task | None = field(default=None, init=False)

    @property
    def filled_count(self) -> int:
        """Number of slots currently holding an image."""
        return len(self._records)

    @property
    def records(self) -> dict[PhotoSlot, UploadedImageRecord]:
        """Return a copy of the filled slots."""
        return dict(self._records)

    def get(self, slot: PhotoSlot) -> UploadedImageRecord | None:
        """Return the record for a slot, if filled."""
        return self._records.get(slot)

    def put(self, slot: PhotoSlot, record: UploadedImageRecord) -> None:
        """Fill a slot, replacing any previous image."""
        if record.image_type != slot:
            raise ValueError(
                f"Record for {record.image_type.value} cannot fill {slot.value}"
            )
        self._records[slot] = record
        self._unverified.pop(slot, None)
        self._persist()

    def remove(self, slot: PhotoSlot) -> None:
        """Empty a slot; removing an empty slot is a no-op."""
        self._records.pop(slot, None)
        self._unverified.pop(slot, None)
        self._persist()

    def is_complete(self) -> bool:
        """Whether every required slot is filled."""
        return all(slot in self._records for slot in REQUIRED_SLOTS)

    def missing_slots(self) -> list[PhotoSlot]:
        """Return unfilled slots in their canonical order."""
        return [slot for slot in REQUIRED_SLOTS if slot not in self._records]

    def clear(self) -> None:
        """Drop every slot and the persisted copy."""
        self._records.clear()
        self._unverified.clear()
        if self._verification is not None and not self._verification.done():
            self._verification.cancel()
        self._verification = None
        try:
            self.persistence.delete(self.key)
        except Exception:
            logger.warning("Failed to remove persisted slots", exc_info=True)

    def restore(self) -> list[PhotoSlot]:
        """Load persisted slots and schedule their reachability checks.

        Restored slots count as filled right away. When an event loop is
        running, each image is probed in the background and evicted if it no
        longer loads; otherwise call ``verify_restored`` explicitly.
        """
        restored = self._load_persisted()
        for slot, record in restored.items():
            if slot in self._records:
                continue
            self._records[slot] = record
            self._unverified[slot] = record.image_id
        if restored:
            logger.info("Restored uploaded images", extra={"count": len(restored)})
        if self._unverified:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return list(restored)
            self._verification = loop.create_task(self.verify_restored())
        return list(restored)

    async def verify_restored(self) -> list[PhotoSlot]:
        """Probe restored images and evict the ones that fail to load."""
        pending = dict(self._unverified)
        if not pending:
            return []
        slots = list(pending)
        results = await asyncio.gather(
            *(self._probe_slot(slot) for slot in slots), return_exceptions=True
        )
        evicted: list[PhotoSlot] = []
        for slot, reachable in zip(slots, results, strict=True):
            if self._unverified.get(slot) != pending[slot]:
                continue
            self._unverified.pop(slot, None)
            if reachable is True:
                continue
            if isinstance(reachable, BaseException):
                logger.warning(
                    "Image probe failed",
                    extra={"slot": slot.value},
                    exc_info=reachable,
                )
            current = self._records.get(slot)
            if current is not None and current.image_id == pending[slot]:
                del self._records[slot]
                evicted.append(slot)
        if evicted:
            logger.info(
                "Evicted unreachable images",
                extra={"slots": [slot.value for slot in evicted]},
            )
            self._persist()
        return evicted

    async def wait_until_verified(self) -> None:
        """Wait for a background verification started by ``restore``."""
        if self._verification is not None:
            await asyncio.shield(self._verification)

    async def _probe_slot(self, slot: PhotoSlot) -> bool:
        record = self._records.get(slot)
        if record is None:
            return True
        return await self.probe.is_reachable(record.image_url)

    def _load_persisted(self) -> dict[PhotoSlot, UploadedImageRecord]:
        try:
            blob = self.persistence.load(self.key)
        except Exception:
            logger.warning("Failed to read persisted slots", exc_info=True)
            return {}
        if not blob:
            return {}
        try:
            raw = json.loads(blob)
        except ValueError:
            raw = None
        if not isinstance(raw, dict):
            logger.warning("Discarding corrupt persisted slots")
            self._discard_persisted()
            return {}

        restored: dict[PhotoSlot, UploadedImageRecord] = {}
        for raw_slot, raw_record in raw.items():
            slot = parse_slot(str(raw_slot))
            if slot is None:
                continue
            try:
                record = UploadedImageRecord.model_validate(raw_record)
            except ValidationError:
                logger.warning(
                    "Skipping invalid persisted slot", extra={"slot": slot.value}
                )
                continue
            if record.image_type != slot:
                continue
            restored[slot] = record
        return restored

    def _discard_persisted(self) -> None:
        try:
            self.persistence.delete(self.key)
        except Exception:
            logger.warning("Failed to remove corrupt slots", exc_info=True)

    def _persist(self) -> None:
        blob = json.dumps(
            {
                slot.value: record.model_dump(mode="json")
                for slot, record in self._records.items()
            }
        )
        try:
            self.persistence.save(self.key, blob)
        except Exception:
            logger.warning("Failed to persist uploaded images", exc_info=True)
