import asyncio
from pathlib import Path
from typing import Optional

import pytest

from kbchat.config.locales import EN
from kbchat.core.models.generation import (
    GenerationChunk,
    GenerationRequest,
    GenerationSettings,
    UsageMetadata,
)
from kbchat.core.services.budget_service import SessionBudgetTracker
from kbchat.core.services.chat_service import ChatService
from kbchat.core.services.knowledge_base_service import KnowledgeBaseService
from kbchat.core.services.search_service import SearchService


class MemoryStore:
    def __init__(self, data: Optional[dict[str, str]] = None) -> None:
        self.data = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FakeExtractor:
    """Serves texts by file name; names listed in ``failures`` raise."""

    def __init__(
        self,
        texts: dict[str, str],
        failures: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.texts = texts
        self.failures = failures or {}

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix in {".pdf", ".txt"}

    def load(self, file_path: Path) -> str:
        if file_path.name in self.failures:
            raise self.failures[file_path.name]
        return self.texts[file_path.name]


class FakeGenerationClient:
    """Streams predefined chunks, optionally failing after some of them."""

    def __init__(
        self,
        chunks: tuple[GenerationChunk, ...] = (),
        error: Optional[Exception] = None,
        fail_after: Optional[int] = None,
    ) -> None:
        self.chunks = list(chunks)
        self.error = error
        self.fail_after = fail_after
        self.requests: list[GenerationRequest] = []
        self.aborted = False

    async def open_stream(self, request: GenerationRequest):
        self.requests.append(request)
        try:
            for i, chunk in enumerate(self.chunks):
                if self.error is not None and self.fail_after == i:
                    raise self.error
                await asyncio.sleep(0)
                yield chunk
            if self.error is not None and self.fail_after is None:
                raise self.error
        except GeneratorExit:
            self.aborted = True
            raise


def text_chunks(*texts: str, total_tokens: int = 42) -> tuple[GenerationChunk, ...]:
    """Chunks for texts; usage sits on the last one."""
    chunks = [GenerationChunk(text=t) for t in texts[:-1]]
    chunks.append(
        GenerationChunk(
            text=texts[-1],
            is_final=True,
            usage=UsageMetadata(total_token_count=total_tokens),
        )
    )
    return tuple(chunks)


async def collect(agen) -> list:
    return [item async for item in agen]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def generation_settings() -> GenerationSettings:
    return GenerationSettings(
        model="test-model",
        temperature=0.5,
        system_instruction="Answer only from the context.",
    )


@pytest.fixture
def make_kb(store: MemoryStore):
    def factory(
        texts: Optional[dict[str, str]] = None,
        failures: Optional[dict[str, Exception]] = None,
        chunk_size: int = 2000,
    ) -> KnowledgeBaseService:
        return KnowledgeBaseService(
            store=store,
            extractor=FakeExtractor(texts or {}, failures),
            chunk_size=chunk_size,
        )

    return factory


@pytest.fixture
def make_chat(make_kb, generation_settings: GenerationSettings):
    def factory(
        client: FakeGenerationClient,
        corpus: str = "",
        top_k: int = 5,
        chunk_size: int = 2000,
    ) -> ChatService:
        kb = make_kb(chunk_size=chunk_size)
        if corpus:
            kb.replace(corpus)
        return ChatService(
            client=client,
            knowledge_base=kb,
            search_service=SearchService(top_k=top_k),
            budget=SessionBudgetTracker(total_limit=1000),
            catalog=EN,
            settings_provider=lambda: generation_settings,
        )

    return factory


