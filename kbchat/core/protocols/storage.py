"""Persistence protocols for dependency injection."""
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Protocol for string key/value persistence."""

    def get(self, key: str) -> Optional[str]:
        """Return stored value or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key."""
        ...

    def delete(self, key: str) -> None:
        """Remove key if present."""
        ...


@runtime_checkable
class CredentialStoreProtocol(Protocol):
    """Protocol for provider credential storage."""

    def get(self) -> Optional[str]:
        ...

    def set(self, key: str) -> None:
        ...

    def clear(self) -> None:
        """Forget the credential so it must be entered again."""
        ...
