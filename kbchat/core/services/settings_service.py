"""Persisted generation settings."""

import json
import logging
from dataclasses import asdict, replace

from ..exceptions import StorageError
from ..models.generation import GenerationSettings
from ..protocols.storage import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

SETTINGS_KEY = "chatSettings"


class SettingsService:
    """Load and save the user's model settings."""

    def __init__(self, store: KeyValueStoreProtocol, defaults: GenerationSettings):
        self._store = store
        self._defaults = defaults
        self._current = defaults

    @property
    def current(self) -> GenerationSettings:
        return self._current

    def load(self) -> GenerationSettings:
        """Read stored settings, falling back to defaults."""
        try:
            raw = self._store.get(SETTINGS_KEY)
        except StorageError as e:
            logger.error(f"Failed to read settings from storage: {e}")
            raw = None

        if raw:
            try:
                data = json.loads(raw)
                self._current = GenerationSettings(
                    model=data.get("model", self._defaults.model),
                    temperature=float(
                        data.get("temperature", self._defaults.temperature)
                    ),
                    system_instruction=data.get(
                        "system_instruction", self._defaults.system_instruction
                    ),
                )
            except (ValueError, TypeError, AttributeError) as e:
                logger.error(f"Failed to parse stored settings: {e}")
                self._current = self._defaults

        return self._current

    def update(self, **changes) -> GenerationSettings:
        """Apply partial changes and persist.

        Raises:
            ValueError: Invalid value, e.g. temperature out of range.
        """
        self._current = replace(self._current, **changes)
        self.save()
        return self._current

    def save(self) -> None:
        self._store.set(SETTINGS_KEY, json.dumps(asdict(self._current)))

    def reset(self) -> GenerationSettings:
        self._current = self._defaults
        self._store.delete(SETTINGS_KEY)
        return self._current
