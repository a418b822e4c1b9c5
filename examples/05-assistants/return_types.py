"""Assistant Return Types Example.

``chat_as`` asks the model for an answer in a given shape and parses it:
booleans, enums, lists of strings and Pydantic models.

Features demonstrated:
- A yes/no classifier returning bool
- Sentiment analysis returning an Enum
- Extracting a Pydantic model from free text
- Answer metadata: token usage and finish reason
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from llm_recipes import Assistant, get_logger, get_provider, setup_logging
from llm_recipes.core.errors import OutputParsingError

setup_logging()
logger = get_logger(__name__)


class Sentiment(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class Person(BaseModel):
    """A person mentioned in a text."""

    first_name: str = Field(description="Given name")
    last_name: str = Field(description="Family name")
    birth_date: date | None = Field(default=None, description="Date of birth, if mentioned")


def main() -> None:
    """Run the return types example."""
    print("=" * 60)
    print("Assistant Return Types Example")
    print("=" * 60)

    provider = get_provider()

    print("\n--- bool ---")
    greeting_expert = Assistant(
        provider,
        user_template="Is the following text a greeting? Text: {{it}}",
        temperature=0.0,
    )
    for text in ("Hi there!", "What time do you open on Saturday?"):
        print(f"{text!r} -> {greeting_expert.chat_as(bool, text)}")

    print("\n--- Enum ---")
    analyzer = Assistant(provider, user_template="Analyze the sentiment of: {{it}}", temperature=0.0)
    for review in ("This is great!", "The delivery was late and the box was broken."):
        print(f"{review!r} -> {analyzer.chat_as(Sentiment, review).value}")

    print("\n--- list[str] ---")
    ideas = Assistant(provider, user_template="Suggest three names for a {{it}}.")
    print(ideas.chat_as(list[str], "bakery that only sells sourdough"))

    print("\n--- Pydantic model ---")
    extractor = Assistant(provider, user_template="Extract information about a person from: {{it}}")
    text = "In 1968, amidst the fading echoes of Independence Day, a child named John arrived. His surname was Doe."
    try:
        person = extractor.chat_as(Person, text)
        print(person.model_dump_json(indent=2))
    except OutputParsingError as e:
        logger.error("extraction_failed", error=str(e))

    print("\n--- Result Metadata ---")
    result = Assistant(provider).chat_result("Name the three primary colors.")
    print(result.content)
    if result.usage:
        print(
            f"\ninput_tokens={result.usage.input_tokens} "
            f"output_tokens={result.usage.output_tokens} "
            f"total_tokens={result.usage.total_tokens}"
        )
    print(f"finish_reason={result.finish_reason}")


if __name__ == "__main__":
    main()
