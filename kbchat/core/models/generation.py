"""Generation request/stream models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .chat import Source


@dataclass(frozen=True)
class GenerationSettings:
    """Per-turn model settings."""
    model: str
    temperature: float
    system_instruction: str

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(
                f"temperature must be within [0, 1], got {self.temperature}"
            )


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the generation client needs for one turn."""
    model: str
    temperature: float
    system_instruction: str
    contents: str


@dataclass(frozen=True)
class UsageMetadata:
    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0


@dataclass(frozen=True)
class GenerationChunk:
    """One chunk received from the provider stream."""
    text: str = ""
    is_final: bool = False
    usage: Optional[UsageMetadata] = None
    sources: tuple[Source, ...] = ()


@dataclass(frozen=True)
class TextDelta:
    """Text to append to the in-progress model message."""
    text: str


class StreamState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.COMPLETED, StreamState.CANCELLED, StreamState.FAILED)


@dataclass
class StreamResult:
    """Final metadata of a stream; only populated on completion."""
    state: StreamState
    text: str = ""
    sources: list[Source] = field(default_factory=list)
    total_tokens: Optional[int] = None
