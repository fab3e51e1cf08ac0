import logging
import re

from ..models.document import Chunk

logger = logging.getLogger(__name__)

_PARAGRAPH_RE = re.compile(r"\n\s*\n")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")

PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "


def _pack(pieces: list[str], limit: int, separator: str) -> list[str]:
    """Greedily join pieces while the result stays within limit."""
    packed = []
    current = ""

    for piece in pieces:
        if not current:
            current = piece
        elif len(current) + len(separator) + len(piece) > limit:
            packed.append(current)
            current = piece
        else:
            current += separator + piece

    if current:
        packed.append(current)

    return packed


class ParagraphChunker:
    """Split text on blank lines, falling back to sentences for long paragraphs."""

    def __init__(self, max_chunk_chars: int = 2000):
        """Initialize chunker.

        Args:
            max_chunk_chars: Maximum chunk size in characters. A single
                sentence longer than this is kept whole.
        """
        if max_chunk_chars <= 0:
            raise ValueError("max_chunk_chars must be positive")
        self._max_chunk_chars = max_chunk_chars

    @property
    def max_chunk_chars(self) -> int:
        return self._max_chunk_chars

    def chunk(self, text: str) -> list[Chunk]:
        """Split text into indexed chunks.

        Args:
            text: Raw extracted corpus text.

        Returns:
            Chunks in document order, indices starting at 0.
        """
        if not text:
            return []

        paragraphs = [p.strip() for p in _PARAGRAPH_RE.split(text)]
        paragraphs = [p for p in paragraphs if p]

        pieces: list[str] = []
        for block in _pack(paragraphs, self._max_chunk_chars, PARAGRAPH_SEPARATOR):
            if len(block) <= self._max_chunk_chars:
                pieces.append(block)
                continue

            # Single oversized paragraph
            sentences = [s for s in _SENTENCE_RE.split(block) if s]
            pieces.extend(_pack(sentences, self._max_chunk_chars, SENTENCE_SEPARATOR))

        chunks = [Chunk(index=i, text=piece) for i, piece in enumerate(pieces)]
        logger.debug(
            f"Chunked {len(text)} chars into {len(chunks)} chunks "
            f"(max={self._max_chunk_chars})"
        )
        return chunks


def chunk_text(text: str, max_chunk_chars: int = 2000) -> list[Chunk]:
    """Split text into chunks of at most ``max_chunk_chars`` characters."""
    return ParagraphChunker(max_chunk_chars).chunk(text)
