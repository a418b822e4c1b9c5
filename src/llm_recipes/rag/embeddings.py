"""Embedding model backed by an OpenAI-compatible embeddings endpoint."""

from llm_recipes.core.config import get_settings
from llm_recipes.core.logging import get_logger
from llm_recipes.providers.base import BaseLLMProvider

logger = get_logger(__name__)


class OpenAIEmbeddingModel:
    """Turns text into vectors through a provider's ``embed`` call.

    Args:
        provider: Client for the embedding endpoint. Defaults to the
            configured embedding endpoint (Qwen/DashScope).
        model: Embedding model name.
        batch_size: Inputs per request; DashScope accepts at most 25.
    """

    def __init__(
        self,
        provider: BaseLLMProvider | None = None,
        model: str | None = None,
        batch_size: int = 25,
    ) -> None:
        settings = get_settings()
        if provider is None:
            from llm_recipes.providers import get_provider

            provider = get_provider(settings.embedding_endpoint)
        self.provider = provider
        self.model = model or settings.embedding_model
        self.batch_size = batch_size

    def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        return self.provider.embed([text], model=self.model)[0]

    def embed_all(self, texts: list[str]) -> list[list[float]]:
        """Embed many texts, batching requests."""
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            vectors.extend(self.provider.embed(batch, model=self.model))
        logger.info("texts_embedded", count=len(texts), model=self.model)
        return vectors
