"""Chunking and scoring strategies."""
from .chunking import ParagraphChunker, chunk_text
from .scoring import ScoringStrategy, LexicalOverlapStrategy, tokenize

__all__ = [
    "ParagraphChunker",
    "chunk_text",
    "ScoringStrategy",
    "LexicalOverlapStrategy",
    "tokenize",
]
