"""File-backed persistence for upload sessions."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from fleetfox.services.slot_store import SlotPersistence


@dataclass
class JsonFileSlotPersistence(SlotPersistence):
    """Stores each key as a JSON file inside a profile directory."""

    directory: Path

    def load(self, key: str) -> str | None:
        """Return the stored blob, if the file exists."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, blob: str) -> None:
        """Write the blob atomically."""
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(blob, encoding="utf-8")
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        """Remove the file for a key."""
        self._path(key).unlink(missing_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"


def profile_persistence_factory(
    base_dir: Path,
) -> Callable[[str], JsonFileSlotPersistence]:
    """Return a factory creating one persistence directory per profile."""

    def factory(profile_id: str) -> JsonFileSlotPersistence:
        return JsonFileSlotPersistence(directory=base_dir / profile_id)

    return factory
