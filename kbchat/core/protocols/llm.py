"""Generation client protocol for dependency injection."""
from typing import AsyncIterator, Protocol, runtime_checkable

from ..models.generation import GenerationChunk, GenerationRequest


@runtime_checkable
class GenerationClientProtocol(Protocol):
    """Protocol for a streaming text-generation endpoint."""

    def open_stream(self, request: GenerationRequest) -> AsyncIterator[GenerationChunk]:
        """Open a streaming generation call.

        The returned async generator performs the request on first
        iteration. Closing it early (``aclose``) aborts the call.

        Args:
            request: Assembled generation request.

        Yields:
            Provider chunks; the last one carries usage metadata.

        Raises:
            MissingCredentialError: No key available.
            GenerationError: Transport or provider failure.
        """
        ...
