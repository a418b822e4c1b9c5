"""Content retrieval and prompt augmentation for RAG."""

from dataclasses import dataclass, field

from llm_recipes.core.logging import get_logger
from llm_recipes.rag.embeddings import OpenAIEmbeddingModel
from llm_recipes.rag.store import InMemoryEmbeddingStore, TextSegment
from llm_recipes.utils.templates import render_template

logger = get_logger(__name__)

DEFAULT_INJECTION_TEMPLATE = "{{userMessage}}\n\nAnswer using the following information:\n{{contents}}"


@dataclass
class Content:
    """A retrieved segment with the relevance score that selected it."""

    segment: TextSegment
    score: float

    @property
    def text(self) -> str:
        return self.segment.text


@dataclass
class AugmentedMessage:
    """User text after retrieval, with the contents injected into it."""

    text: str
    contents: list[Content] = field(default_factory=list)


class EmbeddingStoreContentRetriever:
    """Retrieves the segments most similar to a query.

    Args:
        store: Embedding store to search.
        embedding_model: Model used to embed queries (and ingested texts).
        max_results: Maximum number of segments returned.
        min_score: Minimum relevance score (0..1) for a segment to be used.
    """

    def __init__(
        self,
        store: InMemoryEmbeddingStore,
        embedding_model: OpenAIEmbeddingModel,
        max_results: int = 3,
        min_score: float = 0.0,
    ) -> None:
        self.store = store
        self.embedding_model = embedding_model
        self.max_results = max_results
        self.min_score = min_score

    def ingest(self, documents: list[str | TextSegment]) -> list[str]:
        """Embed and store documents, returning their embedding ids."""
        segments = [d if isinstance(d, TextSegment) else TextSegment(d) for d in documents]
        embeddings = self.embedding_model.embed_all([s.text for s in segments])
        ids = self.store.add_all(embeddings, segments)
        logger.info("documents_ingested", count=len(ids))
        return ids

    def retrieve(self, query: str) -> list[Content]:
        """Return the contents relevant to ``query``, best first."""
        matches = self.store.find_relevant(
            self.embedding_model.embed(query),
            max_results=self.max_results,
            min_score=self.min_score,
        )
        logger.info(
            "contents_retrieved",
            count=len(matches),
            top_score=round(matches[0].score, 3) if matches else None,
        )
        return [Content(m.segment, m.score) for m in matches]


def inject_contents(user_text: str, contents: list[Content], template: str = DEFAULT_INJECTION_TEMPLATE) -> str:
    """Append retrieved contents to the user's text using ``template``."""
    if not contents:
        return user_text
    return render_template(
        template,
        {"userMessage": user_text, "contents": "\n\n".join(c.text for c in contents)},
    )


class RetrievalAugmentor:
    """Retrieves contents for a user message and injects them into it."""

    def __init__(
        self,
        retriever: EmbeddingStoreContentRetriever,
        template: str = DEFAULT_INJECTION_TEMPLATE,
    ) -> None:
        self.retriever = retriever
        self.template = template

    def augment(self, user_text: str) -> AugmentedMessage:
        contents = self.retriever.retrieve(user_text)
        return AugmentedMessage(inject_contents(user_text, contents, self.template), contents)
