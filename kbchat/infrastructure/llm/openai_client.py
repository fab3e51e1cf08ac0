import logging
from typing import AsyncIterator

from openai import APIError, AsyncOpenAI

from kbchat.core.exceptions import (
    MISSING_CREDENTIAL_SENTINEL,
    GenerationError,
    MissingCredentialError,
)
from kbchat.core.models.generation import (
    GenerationChunk,
    GenerationRequest,
    UsageMetadata,
)
from kbchat.core.protocols.storage import CredentialStoreProtocol

logger = logging.getLogger(__name__)


class OpenAIGenerationClient:
    """Streaming client for OpenAI-compatible chat completion APIs.

    The default base URL is Gemini's OpenAI-compatible endpoint.
    """

    def __init__(
        self,
        credentials: CredentialStoreProtocol,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/",
        max_tokens: int | None = None,
    ):
        """Initialize client.

        Args:
            credentials: Source of the API key, read on every request.
            base_url: API URL.
            max_tokens: Max response tokens (provider default if None).
        """
        self._credentials = credentials
        self._base_url = base_url
        self._max_tokens = max_tokens

    def _build_client(self) -> AsyncOpenAI:
        api_key = self._credentials.get()
        if not api_key:
            raise MissingCredentialError(MISSING_CREDENTIAL_SENTINEL)
        return AsyncOpenAI(base_url=self._base_url, api_key=api_key)

    async def open_stream(
        self, request: GenerationRequest
    ) -> AsyncIterator[GenerationChunk]:
        """Stream a chat completion.

        Args:
            request: Generation request.

        Yields:
            Generation chunks; usage arrives on the last one.
        """
        client = self._build_client()

        messages = [
            {"role": "system", "content": request.system_instruction},
            {"role": "user", "content": request.contents},
        ]

        kwargs = {}
        if self._max_tokens is not None:
            kwargs["max_tokens"] = self._max_tokens

        try:
            response = await client.chat.completions.create(
                model=request.model,
                messages=messages,
                temperature=request.temperature,
                stream=True,
                stream_options={"include_usage": True},
                **kwargs,
            )
        except APIError as e:
            raise GenerationError(str(e)) from e

        try:
            async for chunk in response:
                yield self._to_chunk(chunk)
        except APIError as e:
            raise GenerationError(str(e)) from e
        finally:
            await response.close()

    @staticmethod
    def _to_chunk(chunk) -> GenerationChunk:
        """Map a provider chunk to the pipeline's chunk."""
        text = ""
        finished = False
        if chunk.choices:
            choice = chunk.choices[0]
            text = (choice.delta.content or "") if choice.delta else ""
            finished = choice.finish_reason is not None

        usage = None
        if chunk.usage is not None:
            usage = UsageMetadata(
                prompt_token_count=chunk.usage.prompt_tokens or 0,
                candidates_token_count=chunk.usage.completion_tokens or 0,
                total_token_count=chunk.usage.total_tokens or 0,
            )

        return GenerationChunk(
            text=text,
            is_final=finished or usage is not None,
            usage=usage,
        )
