"""Retrieval-augmented generation: embeddings, vector store and retriever."""

from llm_recipes.rag.embeddings import OpenAIEmbeddingModel
from llm_recipes.rag.retriever import (
    DEFAULT_INJECTION_TEMPLATE,
    AugmentedMessage,
    Content,
    EmbeddingStoreContentRetriever,
    RetrievalAugmentor,
    inject_contents,
)
from llm_recipes.rag.store import (
    EmbeddingMatch,
    InMemoryEmbeddingStore,
    TextSegment,
    cosine_similarity,
    relevance_score,
)

__all__ = [
    "DEFAULT_INJECTION_TEMPLATE",
    "AugmentedMessage",
    "Content",
    "EmbeddingMatch",
    "EmbeddingStoreContentRetriever",
    "InMemoryEmbeddingStore",
    "OpenAIEmbeddingModel",
    "RetrievalAugmentor",
    "TextSegment",
    "cosine_similarity",
    "inject_contents",
    "relevance_score",
]
