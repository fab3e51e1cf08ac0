"""Stream orchestration - drives one streaming generation call."""

import asyncio
import logging
from typing import AsyncIterator, Optional

from ..models.generation import (
    GenerationChunk,
    GenerationRequest,
    StreamResult,
    StreamState,
    TextDelta,
)
from ..protocols.llm import GenerationClientProtocol

logger = logging.getLogger(__name__)


def _is_cancelled(cancel_token: Optional[asyncio.Event]) -> bool:
    return cancel_token is not None and cancel_token.is_set()


async def _close(stream: AsyncIterator[GenerationChunk]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


class StreamOrchestrator:
    """Run a single generation stream with cooperative cancellation.

    State machine::

        IDLE -> REQUESTING -> STREAMING -> COMPLETED | CANCELLED | FAILED

    One instance serves exactly one ``run``; create a new orchestrator
    for every turn.
    """

    def __init__(self, client: GenerationClientProtocol):
        """Initialize orchestrator.

        Args:
            client: Generation client.
        """
        self._client = client
        self._state = StreamState.IDLE
        self._is_generating = False
        self._last_chunk: Optional[GenerationChunk] = None
        self._text = ""
        self._result = StreamResult(state=StreamState.IDLE)

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def text(self) -> str:
        """Text received so far."""
        return self._text

    @property
    def last_chunk(self) -> Optional[GenerationChunk]:
        return self._last_chunk

    @property
    def result(self) -> StreamResult:
        """Final metadata. Sources and tokens are set only when completed."""
        return self._result

    async def run(
        self,
        request: GenerationRequest,
        cancel_token: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[TextDelta]:
        """Stream text deltas for a request.

        The cancel token is checked once per received chunk. Text yielded
        before cancellation stays valid; no metadata is committed.

        Args:
            request: Assembled generation request.
            cancel_token: Set by the caller to stop the stream.

        Yields:
            Text deltas, possibly empty.

        Raises:
            RuntimeError: The orchestrator was already used.
            KBChatError: Propagated from the generation client.
        """
        if self._state is not StreamState.IDLE:
            raise RuntimeError("StreamOrchestrator.run() cannot be restarted")

        self._state = StreamState.REQUESTING
        self._is_generating = True
        stream = self._client.open_stream(request)

        try:
            async for chunk in stream:
                self._last_chunk = chunk
                if _is_cancelled(cancel_token):
                    self._state = StreamState.CANCELLED
                    break

                self._state = StreamState.STREAMING
                self._text += chunk.text
                yield TextDelta(chunk.text)

            if self._state is not StreamState.CANCELLED:
                if _is_cancelled(cancel_token):
                    self._state = StreamState.CANCELLED
                else:
                    self._complete()

        except Exception as e:
            self._state = StreamState.FAILED
            logger.error(f"[stream] Generation failed: {e}")
            raise

        finally:
            self._is_generating = False
            if not self._state.is_terminal:
                # Consumer stopped iterating before the end of the stream
                self._state = StreamState.CANCELLED
            if self._state is StreamState.CANCELLED:
                self._result = StreamResult(state=self._state, text=self._text)
                logger.info(f"[stream] Cancelled after {len(self._text)} chars")
            elif self._state is StreamState.FAILED:
                self._result = StreamResult(state=self._state, text=self._text)
            await _close(stream)

    def _complete(self) -> None:
        """Extract final metadata from the last received chunk."""
        self._state = StreamState.COMPLETED
        chunk = self._last_chunk

        if chunk is None:
            self._result = StreamResult(state=self._state)
            logger.info("[stream] Completed without any chunk")
            return

        total_tokens = chunk.usage.total_token_count if chunk.usage else 0
        self._result = StreamResult(
            state=self._state,
            text=self._text,
            sources=list(chunk.sources),
            total_tokens=total_tokens,
        )
        logger.info(
            f"[stream] Completed: {len(self._text)} chars, {total_tokens} tokens"
        )
