"""Persistence implementations."""
from .json_store import JsonFileStore
from .credential_store import KeyValueCredentialStore

__all__ = ["JsonFileStore", "KeyValueCredentialStore"]
