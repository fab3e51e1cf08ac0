import logging
from typing import Optional

from kbchat.core.protocols.storage import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

API_KEY_KEY = "kbchat-api-key"


class KeyValueCredentialStore:
    """API key kept in the key/value store, with a configured fallback."""

    def __init__(self, store: KeyValueStoreProtocol, fallback: Optional[str] = None):
        """Initialize credential store.

        Args:
            store: Key/value persistence.
            fallback: Key from configuration, used when none was entered.
        """
        self._store = store
        self._fallback = fallback

    def get(self) -> Optional[str]:
        return self._store.get(API_KEY_KEY) or self._fallback

    def set(self, key: str) -> None:
        self._store.set(API_KEY_KEY, key.strip())

    def clear(self) -> None:
        self._store.delete(API_KEY_KEY)
        self._fallback = None
        logger.info("Stored API key discarded, re-entry required")
