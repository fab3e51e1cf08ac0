import logging
import re
from abc import ABC, abstractmethod

from ..models.document import Chunk, ScoredChunk

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\w+")


def tokenize(text: str) -> set[str]:
    """Lower-cased set of word tokens."""
    return set(_WORD_RE.findall(text.lower()))


class ScoringStrategy(ABC):
    """Base class for chunk scoring strategies."""

    @abstractmethod
    def score(self, query: str, chunks: list[Chunk]) -> list[ScoredChunk]:
        """Score every chunk against the query, preserving input order."""
        ...


class LexicalOverlapStrategy(ScoringStrategy):
    """Score = number of distinct query words present in the chunk."""

    def score(self, query: str, chunks: list[Chunk]) -> list[ScoredChunk]:
        query_tokens = tokenize(query)
        if not query_tokens:
            return [ScoredChunk(chunk=c, score=0) for c in chunks]

        return [
            ScoredChunk(chunk=c, score=len(query_tokens & tokenize(c.text)))
            for c in chunks
        ]
