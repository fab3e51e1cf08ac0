"""Protocol interfaces for dependency injection."""
from .llm import GenerationClientProtocol
from .storage import KeyValueStoreProtocol, CredentialStoreProtocol
from .extractor import TextExtractorProtocol, RemoteTextLoaderProtocol

__all__ = [
    "GenerationClientProtocol",
    "KeyValueStoreProtocol",
    "CredentialStoreProtocol",
    "TextExtractorProtocol",
    "RemoteTextLoaderProtocol",
]
