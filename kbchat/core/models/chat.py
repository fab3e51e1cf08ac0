"""Chat domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Source:
    """Citation attached to a model answer."""
    uri: str
    title: str = ""


@dataclass
class Message:
    """Chat message. Model text grows by append while streaming."""
    role: Role
    text: str = ""
    sources: Optional[list[Source]] = None

    def append(self, delta: str) -> None:
        self.text += delta


@dataclass(frozen=True)
class MessageCatalog:
    """Localized texts shown to the user."""
    greeting_loaded: str
    greeting_empty: str
    knowledge_base_empty: str
    no_relevant_content: str
    missing_credential: str
    invalid_credential: str
    billing: str
    token_limit: str
    unknown: str  # formatted with {details}


@dataclass
class Conversation:
    """Ordered chat messages of one session."""
    messages: list[Message] = field(default_factory=list)

    def add(self, message: Message) -> Message:
        """Add message and return it."""
        self.messages.append(message)
        return message

    def reset(self, greeting: str | None = None) -> None:
        """Drop all messages, optionally starting over with a greeting."""
        self.messages = []
        if greeting:
            self.messages.append(Message(role=Role.MODEL, text=greeting))

    @property
    def last(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    @property
    def user_message_count(self) -> int:
        return sum(1 for m in self.messages if m.role is Role.USER)

    def search(self, query: str) -> list[Message]:
        """Messages whose text contains ``query`` (case-insensitive)."""
        needle = query.strip().lower()
        if not needle:
            return list(self.messages)
        return [m for m in self.messages if needle in m.text.lower()]
