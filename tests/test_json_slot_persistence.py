"""Tests for file-backed slot persistence."""

import json
from pathlib import Path

from fleetfox.adapters.json_slot_persistence import (
    JsonFileSlotPersistence,
    profile_persistence_factory,
)
from fleetfox.domain.slots import PhotoSlot
from fleetfox.services.slot_store import PERSISTENCE_KEY, SlotStore
from tests.conftest import FakeImageProbe, fill_store


def test_save_load_and_delete(tmp_path: Path) -> None:
    persistence = JsonFileSlotPersistence(directory=tmp_path / "profile")

    assert persistence.load("key") is None

    persistence.save("key", '{"a": 1}')
    persistence.save("key", '{"a": 2}')

    assert persistence.load("key") == '{"a": 2}'
    assert not (tmp_path / "profile" / "key.tmp").exists()

    persistence.delete("key")
    persistence.delete("key")

    assert persistence.load("key") is None


def test_profiles_are_isolated(tmp_path: Path) -> None:
    factory = profile_persistence_factory(tmp_path)
    first = SlotStore(persistence=factory("alice"), probe=FakeImageProbe())
    second = SlotStore(persistence=factory("bob"), probe=FakeImageProbe())

    fill_store(first, (PhotoSlot.EXTERIOR_FRONT,))

    assert second.restore() == []
    saved = json.loads((tmp_path / "alice" / f"{PERSISTENCE_KEY}.json").read_text())
    assert list(saved) == ["exterior_front"]


def test_session_survives_restart(tmp_path: Path) -> None:
    factory = profile_persistence_factory(tmp_path)
    fill_store(SlotStore(persistence=factory("alice"), probe=FakeImageProbe()))

    restored = SlotStore(persistence=factory("alice"), probe=FakeImageProbe())

    assert len(restored.restore()) == 7
    assert restored.is_complete()
