import json

import pytest

from conftest import MemoryStore
from kbchat.core.models.generation import GenerationSettings
from kbchat.core.services.settings_service import SETTINGS_KEY, SettingsService


def test_defaults_when_nothing_stored(
    store: MemoryStore, generation_settings: GenerationSettings
) -> None:
    service = SettingsService(store, generation_settings)

    assert service.load() == generation_settings


def test_update_persists_changes(
    store: MemoryStore, generation_settings: GenerationSettings
) -> None:
    service = SettingsService(store, generation_settings)

    service.update(temperature=0.9, model="other-model")

    stored = json.loads(store.data[SETTINGS_KEY])
    assert stored["temperature"] == 0.9
    assert stored["model"] == "other-model"
    reloaded = SettingsService(store, generation_settings).load()
    assert reloaded.model == "other-model"
    assert reloaded.system_instruction == generation_settings.system_instruction


def test_out_of_range_temperature_is_rejected(
    store: MemoryStore, generation_settings: GenerationSettings
) -> None:
    service = SettingsService(store, generation_settings)

    with pytest.raises(ValueError):
        service.update(temperature=1.5)
    assert SETTINGS_KEY not in store.data


def test_corrupt_stored_settings_fall_back_to_defaults(
    store: MemoryStore, generation_settings: GenerationSettings
) -> None:
    store.set(SETTINGS_KEY, "{not json")

    assert SettingsService(store, generation_settings).load() == generation_settings


def test_reset_removes_stored_settings(
    store: MemoryStore, generation_settings: GenerationSettings
) -> None:
    service = SettingsService(store, generation_settings)
    service.update(model="x")

    assert service.reset() == generation_settings
    assert SETTINGS_KEY not in store.data
