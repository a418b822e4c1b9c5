"""Assistant Basics Example.

An ``Assistant`` bundles a chat model with the prompt plumbing most
applications need.

Features demonstrated:
- A fixed system message
- A system message chosen per memory id
- User templates with variables
- Prompts loaded from files packaged with llm_recipes
- Request transformers that rewrite outgoing messages
- Per-call invocation parameters (temperature, max_tokens)
"""

from datetime import datetime

from llm_recipes import Assistant, ChatMemoryRegistry, Message, get_logger, get_provider, setup_logging
from llm_recipes.core.errors import ValidationError
from llm_recipes.providers import BaseLLMProvider, Role
from llm_recipes.utils.templates import load_prompt, render_template

setup_logging()
logger = get_logger(__name__)


def system_message_example(provider: BaseLLMProvider) -> str:
    """A chef persona from a packaged prompt file."""
    chef = Assistant(provider, system_message=load_prompt("chef_system.txt"))
    return chef.chat("How long should I boil an egg for a runny yolk?")


def system_message_per_user(provider: BaseLLMProvider) -> list[str]:
    """The system message is built from the memory id of each call."""
    friend = Assistant(
        provider,
        memory_registry=ChatMemoryRegistry.message_window(max_messages=10),
        system_message=lambda memory_id: f"Always start your answer with: Hello, {memory_id}.",
    )
    return [
        friend.chat("Hi there", memory_id="user-123"),
        friend.chat("How is the weather today?", memory_id="user-123"),
    ]


def template_example(provider: BaseLLMProvider) -> str:
    """A translator configured entirely by packaged templates."""
    translator = Assistant(
        provider,
        system_message=render_template(load_prompt("translator_system.txt"), {"language": "French"}),
        # The packaged user prompt names its slot {{text}}; point it at the user message
        user_template=render_template(load_prompt("translator_user.txt"), {"text": "{{it}}"}),
    )
    return translator.chat("Good morning, how are you today?")


def template_variables_example(provider: BaseLLMProvider) -> str:
    """Template variables besides the user message."""
    assistant = Assistant(provider, user_template="Write a {{style}} poem about {{it}} in at most {{lines}} lines.")
    try:
        assistant.chat("spring")
    except ValidationError as e:
        logger.warning("template_variable_missing", field=e.field)
    return assistant.chat("spring", variables={"style": "cheerful", "lines": 4})


def add_current_time(messages: list[Message], _memory_id: str) -> list[Message]:
    """Append the current time to every user message."""
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return [
        Message.user(f"{m.text}\n\n[Context: the current time is {now}]") if m.role == Role.USER else m
        for m in messages
    ]


def transformer_example(provider: BaseLLMProvider) -> str:
    """A transformer gives the model facts it cannot know."""
    return Assistant(provider, request_transformer=add_current_time).chat("What is today's date?")


def transformer_with_memory_example(provider: BaseLLMProvider) -> list[str]:
    """A transformer that uses the memory id to set a per-user system message.

    The added system message is only part of the request; it is not
    written to the user's memory.
    """

    def greet_user(messages: list[Message], memory_id: str) -> list[Message]:
        system = Message.system(f"Always start your answer with: Hello, {memory_id}. The current user id is {memory_id}.")
        return [system, *messages]

    assistant = Assistant(
        provider,
        memory_registry=ChatMemoryRegistry.message_window(max_messages=10),
        request_transformer=greet_user,
    )
    return [
        assistant.chat("Hello", memory_id="user-123"),
        assistant.chat("What will the weather be like today?", memory_id="user-123"),
    ]


def invocation_parameters_example(provider: BaseLLMProvider) -> dict[str, str]:
    """The same assistant called with creative, precise and balanced settings."""
    assistant = Assistant(provider)
    settings = {
        "creative": ("Write a short poem about spring", {"temperature": 0.85, "max_tokens": 500}),
        "precise": ("What is machine learning?", {"temperature": 0.3, "max_tokens": 200}),
        "balanced": ("Briefly introduce artificial intelligence", {"temperature": 0.7, "max_tokens": 500}),
    }
    answers = {}
    for label, (question, params) in settings.items():
        logger.info("invocation_parameters", label=label, **params)
        answers[label] = assistant.chat(question, **params)
    return answers


def main() -> None:
    """Run the assistant basics examples."""
    print("=" * 60)
    print("Assistant Basics Example")
    print("=" * 60)

    provider = get_provider()

    print("\n--- System Message ---")
    print(system_message_example(provider))

    print("\n--- System Message per Memory Id ---")
    for answer in system_message_per_user(provider):
        print(f"\n{answer}")

    print("\n--- Packaged Templates ---")
    print(template_example(provider))

    print("\n--- Template Variables ---")
    print(template_variables_example(provider))

    print("\n--- Request Transformer ---")
    print(transformer_example(provider))

    print("\n--- Request Transformer with Memory Id ---")
    for answer in transformer_with_memory_example(provider):
        print(f"\n{answer}")

    print("\n--- Invocation Parameters ---")
    for label, answer in invocation_parameters_example(provider).items():
        print(f"\n[{label}]\n{answer}")


if __name__ == "__main__":
    main()
