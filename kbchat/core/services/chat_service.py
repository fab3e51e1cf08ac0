"""Chat service - coordinates retrieval, prompt assembly and streaming."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, Optional

from ..exceptions import KBChatError
from ..models.chat import Conversation, Message, MessageCatalog, Role
from ..models.generation import GenerationSettings, StreamState
from ..protocols.llm import GenerationClientProtocol
from .budget_service import SessionBudgetTracker
from .error_service import ErrorCategory, ErrorClassification, classify_error
from .knowledge_base_service import KnowledgeBaseService
from .prompt_service import PromptAssembler
from .search_service import SearchService
from .stream_service import StreamOrchestrator

logger = logging.getLogger(__name__)


class TurnStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUSED = "refused"
    FAILED = "failed"


@dataclass
class TurnOutcome:
    status: TurnStatus
    classification: Optional[ErrorClassification] = None
    tokens: int = 0

    @property
    def must_reauthenticate(self) -> bool:
        return bool(self.classification and self.classification.must_reauthenticate)


@dataclass
class TurnEvent:
    """Streaming update for the presentation layer.

    ``delta`` is the text just appended to ``message``. The last event of
    a turn carries ``outcome``; its message text is final.
    """
    delta: str
    message: Message
    outcome: Optional[TurnOutcome] = None


class ChatService:
    """Run grounded chat turns against the knowledge base."""

    def __init__(
        self,
        client: GenerationClientProtocol,
        knowledge_base: KnowledgeBaseService,
        search_service: SearchService,
        budget: SessionBudgetTracker,
        catalog: MessageCatalog,
        settings_provider: Callable[[], GenerationSettings],
        assembler: PromptAssembler | None = None,
        conversation: Conversation | None = None,
    ):
        """Initialize chat service.

        Args:
            client: Generation client.
            knowledge_base: Corpus and chunk owner.
            search_service: Relevance ranker.
            budget: Session budget tracker.
            catalog: Localized user-facing texts.
            settings_provider: Returns the model settings for a new turn.
            assembler: Prompt assembler.
            conversation: Existing conversation to continue.
        """
        self._client = client
        self._kb = knowledge_base
        self._search = search_service
        self._budget = budget
        self._catalog = catalog
        self._settings_provider = settings_provider
        self._assembler = assembler or PromptAssembler()
        self._orchestrator: StreamOrchestrator | None = None

        if conversation is None:
            conversation = Conversation()
            conversation.reset(self.greeting())
        self.conversation = conversation

    @property
    def budget(self) -> SessionBudgetTracker:
        return self._budget

    @property
    def is_generating(self) -> bool:
        return self._orchestrator is not None and self._orchestrator.is_generating

    def greeting(self) -> str:
        if self._kb.is_loaded:
            return self._catalog.greeting_loaded
        return self._catalog.greeting_empty

    def clear_session(self) -> None:
        """Reset conversation and budget."""
        self.conversation.reset(self.greeting())
        self._budget.reset()

    def error_text(self, classification: ErrorClassification, details: str) -> str:
        """Localized explanation for a failure category."""
        texts = {
            ErrorCategory.MISSING_CREDENTIAL: self._catalog.missing_credential,
            ErrorCategory.INVALID_CREDENTIAL: self._catalog.invalid_credential,
            ErrorCategory.BILLING: self._catalog.billing,
            ErrorCategory.TOKEN_LIMIT_EXCEEDED: self._catalog.token_limit,
        }
        if classification.category in texts:
            return texts[classification.category]
        return self._catalog.unknown.format(details=details)

    async def process_message(
        self,
        user_message: str,
        cancel_token: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[TurnEvent]:
        """Process one user turn.

        Flow:
            1. Refuse locally if the knowledge base is empty
            2. Rank chunks; refuse locally if nothing is relevant
            3. Assemble the request and stream the answer
            4. Commit sources and usage on completion

        Callers must not start a new turn while one is still running.

        Args:
            user_message: User's message.
            cancel_token: Set to stop streaming.

        Yields:
            Turn events; the last one carries the outcome.
        """
        if not user_message.strip():
            return

        self.conversation.add(Message(role=Role.USER, text=user_message))

        # Snapshot: a concurrent corpus rebuild does not affect this turn
        chunks = self._kb.chunks

        if not chunks:
            async for event in self._refuse(self._catalog.knowledge_base_empty):
                yield event
            return

        search_response = self._search.search(user_message, chunks)
        if search_response.is_empty:
            async for event in self._refuse(self._catalog.no_relevant_content):
                yield event
            return

        request = self._assembler.assemble(
            self._settings_provider(), search_response.context, user_message
        )

        answer = self.conversation.add(Message(role=Role.MODEL))
        orchestrator = StreamOrchestrator(self._client)
        self._orchestrator = orchestrator

        try:
            async for delta in orchestrator.run(request, cancel_token):
                answer.append(delta.text)
                yield TurnEvent(delta=delta.text, message=answer)
        except KBChatError as e:
            yield self._fail(answer, e.message)
            return
        except Exception as e:
            # Clients that do not wrap their transport errors
            yield self._fail(answer, str(e) or type(e).__name__)
            return

        result = orchestrator.result
        if result.state is StreamState.COMPLETED:
            tokens = 0
            if result.total_tokens is not None:
                tokens = result.total_tokens
                self._budget.record_usage(tokens)
            answer.sources = result.sources
            outcome = TurnOutcome(TurnStatus.COMPLETED, tokens=tokens)
        else:
            outcome = TurnOutcome(TurnStatus.CANCELLED)

        yield TurnEvent(delta="", message=answer, outcome=outcome)

    async def ask(
        self,
        user_message: str,
        cancel_token: Optional[asyncio.Event] = None,
    ) -> tuple[Message, TurnOutcome | None]:
        """Run a turn to completion and return the final answer."""
        answer: Message | None = None
        outcome: TurnOutcome | None = None
        async for event in self.process_message(user_message, cancel_token):
            answer = event.message
            outcome = event.outcome or outcome
        if answer is None:
            raise ValueError("Empty message")
        return answer, outcome

    def _fail(self, answer: Message, raw_message: str) -> TurnEvent:
        """Replace partial text with the localized error for ``raw_message``."""
        classification = classify_error(raw_message)
        logger.error(f"Turn failed ({classification.category.value}): {raw_message}")
        answer.text = self.error_text(classification, raw_message)
        return TurnEvent(
            delta="",
            message=answer,
            outcome=TurnOutcome(TurnStatus.FAILED, classification=classification),
        )

    async def _refuse(self, text: str) -> AsyncIterator[TurnEvent]:
        logger.info("Refusing turn without context, no generation call issued")
        answer = self.conversation.add(Message(role=Role.MODEL, text=text))
        yield TurnEvent(
            delta=text, message=answer, outcome=TurnOutcome(TurnStatus.REFUSED)
        )
