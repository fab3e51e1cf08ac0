"""Typed failures raised by the pipeline and its collaborators."""
from typing import Optional

MISSING_CREDENTIAL_SENTINEL = "API_KEY_MISSING"


class KBChatError(Exception):
    """Base class for all pipeline errors."""

    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Raw error text (uses default_message if None).
            details: Additional context, e.g. the offending file name.
        """
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ExtractionError(KBChatError):
    """Text could not be extracted from one document."""

    default_message = "Text extraction failed"


class PasswordProtectedError(ExtractionError):
    """The document is encrypted."""

    default_message = "Document is password protected"


class MissingCredentialError(KBChatError):
    """No provider credential is available."""

    default_message = MISSING_CREDENTIAL_SENTINEL


class GenerationError(KBChatError):
    """Transport or provider failure while generating."""

    default_message = "Generation request failed"


class StorageError(KBChatError):
    """Key/value persistence failure."""

    default_message = "Storage operation failed"
