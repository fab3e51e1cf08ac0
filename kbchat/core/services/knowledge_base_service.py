"""Knowledge base service - corpus ingestion, chunking and persistence."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..exceptions import ExtractionError, PasswordProtectedError, StorageError
from ..models.document import Chunk, ExtractionFailure, IngestReport
from ..protocols.extractor import RemoteTextLoaderProtocol, TextExtractorProtocol
from ..protocols.storage import KeyValueStoreProtocol
from ..strategies.chunking import ParagraphChunker
from .budget_service import estimate_tokens

logger = logging.getLogger(__name__)

KNOWLEDGE_BASE_KEY = "kbchat-knowledge-base"
DOCUMENT_SEPARATOR = "\n\n"


def document_header(name: str) -> str:
    return f"--- DOCUMENT: {name} ---"


class KnowledgeBaseService:
    """Own the document corpus and the chunk set derived from it.

    The chunk set is an immutable tuple replaced in a single assignment,
    so a turn that already took a snapshot keeps its own context.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        extractor: TextExtractorProtocol,
        remote_loader: Optional[RemoteTextLoaderProtocol] = None,
        chunk_size: int = 2000,
        chars_per_token: int = 4,
    ):
        """Initialize knowledge base service.

        Args:
            store: Key/value persistence.
            extractor: File text extractor.
            remote_loader: Loader for documents behind a URL.
            chunk_size: Maximum chunk size in characters.
            chars_per_token: Heuristic for token estimation.
        """
        self._store = store
        self._extractor = extractor
        self._remote_loader = remote_loader
        self._chunker = ParagraphChunker(chunk_size)
        self._chars_per_token = chars_per_token

        self._corpus = ""
        self._chunks: tuple[Chunk, ...] = ()

    @property
    def corpus(self) -> str:
        return self._corpus

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        """Current chunk set snapshot."""
        return self._chunks

    @property
    def is_loaded(self) -> bool:
        return bool(self._chunks)

    @property
    def estimated_tokens(self) -> int:
        return estimate_tokens(self._corpus, self._chars_per_token)

    def load(self) -> bool:
        """Restore the corpus from persistence.

        Returns:
            True if a stored corpus was found.
        """
        try:
            text = self._store.get(KNOWLEDGE_BASE_KEY) or ""
        except StorageError as e:
            logger.error(f"Failed to read knowledge base from storage: {e}")
            text = ""

        self._swap(text)
        return bool(text)

    def replace(self, text: str) -> int:
        """Replace the whole corpus, rebuild chunks and persist.

        The in-memory swap happens before persisting; a StorageError
        therefore leaves a usable, unsaved knowledge base.

        Args:
            text: New corpus text.

        Returns:
            Number of chunks.

        Raises:
            StorageError: The corpus could not be saved.
        """
        self._swap(text)
        self._store.set(KNOWLEDGE_BASE_KEY, text)
        return len(self._chunks)

    def clear(self) -> None:
        """Drop the corpus and its stored copy."""
        self._swap("")
        self._store.delete(KNOWLEDGE_BASE_KEY)
        logger.info("Knowledge base cleared")

    def ingest_files(
        self, paths: Iterable[str | Path], append: bool = False
    ) -> IngestReport:
        """Extract files and rebuild the corpus from them.

        A failing file is reported and skipped; the other files still load.
        The corpus is replaced only if at least one file succeeded.

        Args:
            paths: Files to load.
            append: Keep the current corpus and add the new documents.

        Returns:
            Ingest report.
        """
        report = IngestReport()
        parts: list[str] = []

        for raw_path in paths:
            file_path = Path(raw_path)
            try:
                text = self._extract(file_path)
            except PasswordProtectedError as e:
                logger.error(f"Failed to load {file_path.name}: {e}")
                report.failures.append(
                    ExtractionFailure(file_path.name, str(e), password_protected=True)
                )
                continue
            except ExtractionError as e:
                logger.error(f"Failed to load {file_path.name}: {e}")
                report.failures.append(ExtractionFailure(file_path.name, str(e)))
                continue

            parts.append(f"{document_header(file_path.name)}{DOCUMENT_SEPARATOR}{text}")
            report.documents.append(file_path.name)

        if parts:
            self._commit(parts, append, report)
        else:
            logger.info("No documents loaded, knowledge base unchanged")
            report.chunk_count = len(self._chunks)

        return report

    def ingest_url(self, url: str, append: bool = False) -> IngestReport:
        """Download a remote document and load it.

        Raises:
            ExtractionError: Download or extraction failed.
        """
        if self._remote_loader is None:
            raise ExtractionError("No remote loader configured", details=url)

        name = url.rstrip("/").rsplit("/", 1)[-1] or url
        text = self._remote_loader.load(url)
        report = IngestReport(documents=[name])
        self._commit(
            [f"{document_header(name)}{DOCUMENT_SEPARATOR}{text}"], append, report
        )
        return report

    def _extract(self, file_path: Path) -> str:
        if not self._extractor.supports(file_path):
            raise ExtractionError(f"Unsupported file type: {file_path.suffix}")
        return self._extractor.load(file_path)

    def _commit(self, parts: list[str], append: bool, report: IngestReport) -> None:
        if append and self._corpus:
            parts = [self._corpus, *parts]
        report.chunk_count = self.replace(DOCUMENT_SEPARATOR.join(parts))

    def _swap(self, text: str) -> None:
        chunks = tuple(self._chunker.chunk(text))
        self._corpus = text
        self._chunks = chunks
        logger.info(
            f"Knowledge base rebuilt: {len(text)} chars, {len(chunks)} chunks"
        )
