"""Text extraction protocol for dependency injection."""
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class TextExtractorProtocol(Protocol):
    """Protocol for document-to-text extraction."""

    def supports(self, file_path: Path) -> bool:
        ...

    def load(self, file_path: Path) -> str:
        """Extract plain text.

        Raises:
            PasswordProtectedError: Encrypted document.
            ExtractionError: Any other extraction failure.
        """
        ...


@runtime_checkable
class RemoteTextLoaderProtocol(Protocol):
    """Protocol for loading a document behind a URL."""

    def load(self, url: str) -> str:
        """Download and extract text.

        Raises:
            ExtractionError: Download or extraction failed.
        """
        ...
