"""Retrieval Augmentor Example.

Retrieval-augmented generation (RAG): relevant documents are found by
embedding similarity and appended to the question before it reaches the
chat model.

Features demonstrated:
- Embedding documents with an OpenAI-compatible embeddings endpoint
- An in-memory embedding store
- A retriever with max_results and min_score
- Plugging the retriever into an Assistant
- Listing the sources an answer was based on
"""

from llm_recipes import Assistant, get_logger, get_provider, setup_logging
from llm_recipes.rag import (
    EmbeddingStoreContentRetriever,
    InMemoryEmbeddingStore,
    OpenAIEmbeddingModel,
    RetrievalAugmentor,
)

setup_logging()
logger = get_logger(__name__)

DOCUMENTS = [
    "Java is an object-oriented programming language released by Sun Microsystems in 1995.",
    "Python is an interpreted, object-oriented, dynamically typed high-level programming language.",
    "JavaScript is a lightweight programming language usually used for interactive web pages.",
    "LangChain4j is a Java framework for integrating large language models.",
    "RAG (Retrieval Augmented Generation) is a technique that combines retrieval and generation.",
]


def build_retriever(max_results: int = 3, min_score: float = 0.0) -> EmbeddingStoreContentRetriever:
    """Index ``DOCUMENTS`` and return a retriever over them."""
    embedding_model = OpenAIEmbeddingModel(get_provider("qwen"), model="text-embedding-v2")
    retriever = EmbeddingStoreContentRetriever(
        InMemoryEmbeddingStore(),
        embedding_model,
        max_results=max_results,
        min_score=min_score,
    )
    retriever.ingest(DOCUMENTS)
    return retriever


def main() -> None:
    """Run the retrieval augmentor example."""
    print("=" * 60)
    print("Retrieval Augmentor Example")
    print("=" * 60)

    retriever = build_retriever()

    print("\n--- Retrieval Only ---")
    for content in retriever.retrieve("Which language came out in 1995?"):
        print(f"[{content.score:.3f}] {content.text}")

    assistant = Assistant(get_provider("deepseek"), retrieval_augmentor=RetrievalAugmentor(retriever))

    print("\n--- Augmented Answers ---")
    for question in ("What is Java?", "Explain the RAG technique", "What is LangChain4j?"):
        result = assistant.chat_result(question)
        print(f"\nUser: {question}")
        print(f"Assistant: {result.content}")
        print("Sources:")
        for content in result.sources:
            print(f"  [{content.score:.3f}] {content.text}")


if __name__ == "__main__":
    main()
