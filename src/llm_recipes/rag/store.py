"""In-memory embedding store with cosine-similarity search."""

import math
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TextSegment:
    """A piece of text to index, with optional metadata (source, title...)."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class EmbeddingMatch:
    """A stored segment and its relevance to a query (0..1)."""

    embedding_id: str
    score: float
    segment: TextSegment


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors (0.0 if either is all zeros)."""
    if len(a) != len(b):
        raise ValueError(f"Embedding dimensions differ: {len(a)} != {len(b)}")
    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))
    return dot_product / (norm_a * norm_b) if norm_a and norm_b else 0.0


def relevance_score(similarity: float) -> float:
    """Map cosine similarity (-1..1) onto a relevance score (0..1)."""
    return (similarity + 1) / 2


class InMemoryEmbeddingStore:
    """Brute-force vector store held in process memory.

    Fine for the few dozen segments a recipe indexes; search is linear in
    the number of stored embeddings.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[list[float], TextSegment]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, embedding: list[float], segment: TextSegment, embedding_id: str | None = None) -> str:
        """Store one embedding, returning its id."""
        embedding_id = embedding_id or uuid.uuid4().hex
        with self._lock:
            self._entries[embedding_id] = (list(embedding), segment)
        return embedding_id

    def add_all(self, embeddings: list[list[float]], segments: list[TextSegment]) -> list[str]:
        """Store embeddings paired with their segments."""
        if len(embeddings) != len(segments):
            raise ValueError("embeddings and segments must have the same length")
        return [self.add(e, s) for e, s in zip(embeddings, segments)]

    def remove(self, embedding_id: str) -> bool:
        """Delete one entry; returns False if the id is unknown."""
        with self._lock:
            return self._entries.pop(embedding_id, None) is not None

    def find_relevant(
        self,
        query_embedding: list[float],
        max_results: int = 3,
        min_score: float = 0.0,
    ) -> list[EmbeddingMatch]:
        """Find the stored segments closest to a query embedding.

        Args:
            query_embedding: Embedding of the query text.
            max_results: Maximum number of matches to return.
            min_score: Minimum relevance score (0..1) a match must reach.

        Returns:
            Matches sorted by descending relevance.
        """
        with self._lock:
            entries = list(self._entries.items())

        matches = []
        for embedding_id, (embedding, segment) in entries:
            score = relevance_score(cosine_similarity(query_embedding, embedding))
            if score >= min_score:
                matches.append(EmbeddingMatch(embedding_id, score, segment))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:max_results]
