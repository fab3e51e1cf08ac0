"""Document domain models."""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chunk:
    """Retrievable excerpt of the knowledge corpus."""
    index: int
    text: str


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk with its lexical overlap score for one query."""
    chunk: Chunk
    score: int

    @property
    def index(self) -> int:
        return self.chunk.index


@dataclass
class SearchResponse:
    """Ranking result for one query."""
    results: list[ScoredChunk]
    context: str

    @property
    def is_empty(self) -> bool:
        return not self.context


@dataclass
class ExtractionFailure:
    """A file that could not be turned into text."""
    source: str
    reason: str
    password_protected: bool = False


@dataclass
class IngestReport:
    """Outcome of loading several files into the knowledge base."""
    documents: list[str] = field(default_factory=list)
    failures: list[ExtractionFailure] = field(default_factory=list)
    chunk_count: int = 0

    @property
    def ok(self) -> bool:
        return bool(self.documents) and not self.failures
