"""Miles of Smiles Multi-Service Example.

A dental clinic's customer service built from two assistants:
- a cheap, deterministic model decides whether a message is a greeting
- a stronger model with RAG over the clinic's documents answers questions

Greetings get a canned reply, so only real questions pay for retrieval
and the larger answer.

Features demonstrated:
- Two assistants with different model settings
- GreetingRouter orchestrating them
- Retrieval with max_results and min_score
"""

from llm_recipes import Assistant, OpenAIProvider, get_logger, setup_logging
from llm_recipes.rag import (
    EmbeddingStoreContentRetriever,
    InMemoryEmbeddingStore,
    OpenAIEmbeddingModel,
    RetrievalAugmentor,
)
from llm_recipes.services import (
    CHAT_BOT_SYSTEM_MESSAGE,
    AssistantChatBot,
    AssistantGreetingExpert,
    GreetingRouter,
)

setup_logging()
logger = get_logger(__name__)

CLINIC_DOCUMENTS = [
    "Miles of Smiles offers dental health consultations, teeth cleaning, whitening and "
    "orthodontic plans, with an emphasis on painless treatment.",
    "Our clinic supports quick appointments and follow-up reminders. Opening hours are "
    "Monday to Saturday, 9:00-19:00.",
    "The Miles of Smiles children's dental team focuses on preventive care and offers "
    "fluoride varnish and fissure sealants.",
    "The clinic offers instalment payments and direct insurance billing, arranged on our "
    "website or by phone.",
    "Miles of Smiles provides scaling, panoramic X-rays and personalised home-care advice "
    "to help keep teeth healthy in the long run.",
]


def clinic_retriever() -> EmbeddingStoreContentRetriever:
    """Index the clinic's documents with Qwen embeddings."""
    embedding_model = OpenAIEmbeddingModel(OpenAIProvider(endpoint="qwen"), model="text-embedding-v2")
    retriever = EmbeddingStoreContentRetriever(
        InMemoryEmbeddingStore(),
        embedding_model,
        max_results=3,
        min_score=0.5,
    )
    retriever.ingest(CLINIC_DOCUMENTS)
    return retriever


def build_router() -> GreetingRouter:
    # Short timeout for the yes/no check; the answering model gets more time
    greeting_expert = AssistantGreetingExpert.from_provider(OpenAIProvider(endpoint="deepseek", timeout=3.0))
    chat_bot = AssistantChatBot(
        Assistant(
            OpenAIProvider(endpoint="deepseek", timeout=10.0),
            system_message=CHAT_BOT_SYSTEM_MESSAGE,
            retrieval_augmentor=RetrievalAugmentor(clinic_retriever()),
            temperature=0.3,
            max_tokens=1000,
        )
    )
    return GreetingRouter(greeting_expert, chat_bot)


def main() -> None:
    """Run the Miles of Smiles example."""
    print("=" * 60)
    print("Miles of Smiles Multi-Service Example")
    print("=" * 60)

    router = build_router()

    for message in ("Hello", "What dental services do you offer for children?", "   "):
        print(f"\nUser: {message!r}")
        print(f"Reply: {router.handle(message)}")


if __name__ == "__main__":
    main()
