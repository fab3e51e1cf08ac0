"""Search service - lexical relevance ranking."""

import logging
from typing import Optional, Sequence

from ..models.document import Chunk, ScoredChunk, SearchResponse
from ..strategies.scoring import LexicalOverlapStrategy, ScoringStrategy

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"


class SearchService:
    """Select the chunks most relevant to a query."""

    def __init__(
        self,
        top_k: int = 5,
        strategy: ScoringStrategy | None = None,
    ):
        """Initialize search service.

        Args:
            top_k: Number of chunks to keep.
            strategy: Chunk scoring strategy.
        """
        self._top_k = top_k
        self._strategy = strategy or LexicalOverlapStrategy()

    def search(
        self,
        query: str,
        chunks: Sequence[Chunk],
        top_k: Optional[int] = None,
    ) -> SearchResponse:
        """Rank chunks against a query.

        Args:
            query: User query.
            chunks: Current chunk set.
            top_k: Override number of results.

        Returns:
            Selected chunks in document order and the joined context.
        """
        top_k = self._top_k if top_k is None else top_k

        if not chunks or top_k <= 0:
            return SearchResponse(results=[], context="")

        scored = self._strategy.score(query, list(chunks))

        # Ties go to the earlier chunk
        ranked = sorted(scored, key=lambda s: (-s.score, s.index))
        selected = [s for s in ranked[:top_k] if s.score > 0]
        selected.sort(key=lambda s: s.index)

        logger.info(
            f"Search: returned {len(selected)}/{top_k} chunks for '{query[:50]}...'"
        )

        return SearchResponse(results=selected, context=self._format_context(selected))

    def rank(
        self,
        query: str,
        chunks: Sequence[Chunk],
        top_k: Optional[int] = None,
    ) -> str:
        """Return only the context string for a query."""
        return self.search(query, chunks, top_k).context

    def _format_context(self, results: list[ScoredChunk]) -> str:
        """Join selected chunk texts."""
        return CONTEXT_SEPARATOR.join(r.chunk.text for r in results)
