"""Domain models."""
from .document import Chunk, ScoredChunk, SearchResponse, ExtractionFailure, IngestReport
from .chat import Role, Source, Message, MessageCatalog, Conversation
from .generation import (
    GenerationSettings,
    GenerationRequest,
    GenerationChunk,
    UsageMetadata,
    TextDelta,
    StreamState,
    StreamResult,
)

__all__ = [
    "Chunk",
    "ScoredChunk",
    "SearchResponse",
    "ExtractionFailure",
    "IngestReport",
    "Role",
    "Source",
    "Message",
    "MessageCatalog",
    "Conversation",
    "GenerationSettings",
    "GenerationRequest",
    "GenerationChunk",
    "UsageMetadata",
    "TextDelta",
    "StreamState",
    "StreamResult",
]
