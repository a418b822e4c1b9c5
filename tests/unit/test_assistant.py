"""Tests for the Assistant service."""

import json
from collections.abc import Iterator
from enum import Enum
from typing import Any

import pytest
import structlog
from pydantic import BaseModel

from llm_recipes.core.errors import ModerationError, ValidationError
from llm_recipes.memory import ChatMemoryRegistry, MessageWindowChatMemory
from llm_recipes.moderation import Moderation, ModerationModel
from llm_recipes.providers.base import CompletionChunk, Message, Role
from llm_recipes.rag import EmbeddingStoreContentRetriever, InMemoryEmbeddingStore, OpenAIEmbeddingModel, RetrievalAugmentor
from llm_recipes.services import Assistant
from llm_recipes.tools import tool


class Sentiment(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class Person(BaseModel):
    name: str
    age: int


class KeywordModeration(ModerationModel):
    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        self.seen: list[str] = []

    def moderate(self, text: str) -> Moderation:
        self.seen.append(text)
        if self.keyword in text:
            return Moderation(flagged=True, flagged_text=text)
        return Moderation.not_flagged()


class Calculator:
    @tool("Adds two numbers")
    def add(self, a: int, b: int) -> int:
        return a + b


class TestAssistantBasics:
    """Tests for single-turn calls."""

    def test_system_message_and_user_message(self, make_provider: Any) -> None:
        provider = make_provider(responses=["Bonjour"])
        assistant = Assistant(provider, system_message="You are a translator.")

        assert assistant.chat("Hello") == "Bonjour"
        messages = provider.calls[0]["messages"]
        assert [m.role for m in messages] == [Role.SYSTEM, Role.USER]
        assert messages[1].text == "Hello"

    def test_user_template_with_variables(self, make_provider: Any) -> None:
        provider = make_provider()
        assistant = Assistant(provider, user_template="Translate into {{language}}: {{it}}")

        assistant.chat("Hello", variables={"language": "German"})

        assert provider.calls[0]["messages"][-1].text == "Translate into German: Hello"

    def test_missing_template_variable(self, make_provider: Any) -> None:
        assistant = Assistant(make_provider(), user_template="Translate into {{language}}: {{it}}")

        with pytest.raises(ValidationError):
            assistant.chat("Hello")

    def test_params_merge(self, make_provider: Any) -> None:
        """Test per-call parameters override the defaults."""
        provider = make_provider()
        assistant = Assistant(provider, temperature=0.2, max_tokens=100)

        assistant.chat("Hi", temperature=0.9)

        assert provider.calls[0]["temperature"] == 0.9
        assert provider.calls[0]["max_tokens"] == 100

    def test_result_metadata(self, make_provider: Any) -> None:
        result = Assistant(make_provider(responses=["Hello"])).chat_result("Hi")

        assert result.content == "Hello"
        assert result.usage is not None
        assert result.usage.total_tokens == 15
        assert result.finish_reason == "stop"
        assert result.sources == []
        assert result.tool_executions == []

    def test_both_memories_rejected(self, make_provider: Any) -> None:
        with pytest.raises(ValidationError):
            Assistant(
                make_provider(),
                chat_memory=MessageWindowChatMemory(10),
                memory_registry=ChatMemoryRegistry.message_window(10),
            )


class TestAssistantMemory:
    """Tests for conversation memory."""

    def test_shared_memory_across_turns(self, make_provider: Any) -> None:
        provider = make_provider(responses=["Nice to meet you, Klaus", "Your name is Klaus"])
        memory = MessageWindowChatMemory(max_messages=10)
        assistant = Assistant(provider, system_message="Be brief.", chat_memory=memory)

        assistant.chat("Hi, I'm Klaus")
        assistant.chat("What is my name?")

        second = provider.calls[1]["messages"]
        assert [m.text for m in second] == ["Be brief.", "Hi, I'm Klaus", "Nice to meet you, Klaus", "What is my name?"]
        assert len(memory.messages()) == 5

    def test_memory_per_id(self, make_provider: Any) -> None:
        provider = make_provider()
        assistant = Assistant(provider, memory_registry=ChatMemoryRegistry.message_window(10))

        assistant.chat("Hi, I'm Klaus", memory_id="1")
        assistant.chat("Hi, I'm Francine", memory_id="2")
        assistant.chat("What is my name?", memory_id="1")

        assert [m.text for m in provider.calls[2]["messages"]] == ["Hi, I'm Klaus", "ok", "What is my name?"]
        memory = assistant.get_chat_memory("2")
        assert memory is not None
        assert len(memory.messages()) == 2

    def test_evict(self, make_provider: Any) -> None:
        assistant = Assistant(make_provider(), memory_registry=ChatMemoryRegistry.message_window(10))
        assistant.chat("Hi", memory_id="1")

        assert assistant.evict_chat_memory("1") is True
        assert assistant.get_chat_memory("1") is None
        assert assistant.evict_chat_memory("1") is False

    def test_system_message_per_memory_id(self, make_provider: Any) -> None:
        provider = make_provider()
        assistant = Assistant(provider, system_message=lambda memory_id: f"You are talking to user {memory_id}.")

        assistant.chat("Hi", memory_id="42")

        assert provider.calls[0]["messages"][0].text == "You are talking to user 42."

    def test_request_transformer(self, make_provider: Any) -> None:
        """Test the transformer sees the messages and the memory id."""
        provider = make_provider()
        received: list[str] = []

        def add_user_profile(messages: list[Message], memory_id: str) -> list[Message]:
            received.append(memory_id)
            return [Message.system(f"The user id is {memory_id}."), *messages]

        assistant = Assistant(provider, memory_registry=ChatMemoryRegistry.message_window(10), request_transformer=add_user_profile)
        assistant.chat("Who am I?", memory_id="u-7")

        assert received == ["u-7"]
        assert provider.calls[0]["messages"][0].text == "The user id is u-7."
        stored = assistant.get_chat_memory("u-7")
        assert stored is not None
        assert all(m.role != Role.SYSTEM for m in stored.messages())


class TestAssistantPipeline:
    """Tests for moderation, retrieval, tools and typed output."""

    def test_moderation_blocks_before_model_call(self, make_provider: Any) -> None:
        provider = make_provider()
        moderation = KeywordModeration("kill")
        memory = MessageWindowChatMemory(10)
        assistant = Assistant(provider, chat_memory=memory, moderation_model=moderation)

        with pytest.raises(ModerationError) as exc_info:
            assistant.chat("I will kill you")

        assert exc_info.value.flagged_text == "I will kill you"
        assert 'Text "I will kill you" violates content policy' in str(exc_info.value)
        assert provider.calls == []
        assert memory.messages() == []

    def test_moderation_sees_rendered_template(self, make_provider: Any) -> None:
        moderation = KeywordModeration("kill")
        assistant = Assistant(make_provider(), user_template="Reply politely to: {{it}}", moderation_model=moderation)

        assistant.chat("Hello")

        assert moderation.seen == ["Reply politely to: Hello"]

    def test_retrieval_augments_and_reports_sources(self, make_provider: Any) -> None:
        provider = make_provider(
            embeddings={"We clean teeth on weekdays.": [1.0, 0.0], "When do you clean teeth?": [1.0, 0.1]}
        )
        retriever = EmbeddingStoreContentRetriever(InMemoryEmbeddingStore(), OpenAIEmbeddingModel(provider), max_results=1)
        retriever.ingest(["We clean teeth on weekdays."])
        assistant = Assistant(provider, retrieval_augmentor=RetrievalAugmentor(retriever))

        result = assistant.chat_result("When do you clean teeth?")

        sent = provider.calls[-1]["messages"][-1].text
        assert sent.startswith("When do you clean teeth?\n\nAnswer using the following information:")
        assert [s.text for s in result.sources] == ["We clean teeth on weekdays."]

    def test_tools_are_executed(self, make_provider: Any, tool_call_response: Any) -> None:
        provider = make_provider(responses=[tool_call_response(("c1", "add", '{"a": 2, "b": 3}')), "2+3 is 5"])
        memory = MessageWindowChatMemory(10)
        assistant = Assistant(provider, chat_memory=memory, tools=[Calculator()])

        result = assistant.chat_result("What is 2+3?")

        assert result.content == "2+3 is 5"
        assert [e.result for e in result.tool_executions] == ["5"]
        assert [m.role for m in memory.messages()] == [Role.USER, Role.ASSISTANT, Role.TOOL, Role.ASSISTANT]

    def test_chat_as_bool_and_enum(self, make_provider: Any) -> None:
        provider = make_provider(responses=["true", "NEGATIVE"])
        assistant = Assistant(provider)

        assert assistant.chat_as(bool, "Is 'Hello' a greeting?") is True
        assert assistant.chat_as(Sentiment, "This is terrible") is Sentiment.NEGATIVE
        assert provider.calls[0]["messages"][-1].text.endswith("Answer with only 'true' or 'false'.")

    def test_chat_as_model_requests_json(self, make_provider: Any) -> None:
        provider = make_provider(responses=[json.dumps({"name": "John", "age": 42})])

        person = Assistant(provider).chat_as(Person, "John is 42 years old")

        assert person == Person(name="John", age=42)
        assert provider.calls[0]["response_format"] == {"type": "json_object"}


class TestAssistantStream:
    """Tests for streamed turns."""

    def test_stream_yields_and_stores(self, make_provider: Any) -> None:
        provider = make_provider(stream_parts=["Hel", "lo"])
        memory = MessageWindowChatMemory(10)
        assistant = Assistant(provider, chat_memory=memory)

        assert list(assistant.stream("Hi")) == ["Hel", "lo"]
        assert [m.text for m in memory.messages()] == ["Hi", "Hello"]

    def test_abandoned_stream_not_stored(self, make_provider: Any) -> None:
        provider = make_provider(stream_parts=["Hel", "lo"])
        memory = MessageWindowChatMemory(10)
        stream = Assistant(provider, chat_memory=memory).stream("Hi")

        assert next(stream) == "Hel"
        stream.close()

        assert [m.text for m in memory.messages()] == ["Hi"]

    def test_stream_logs_with_memory_id(self, make_provider: Any) -> None:
        """Test streamed turns bind the memory id to log lines while the model streams."""
        seen: list[dict[str, Any]] = []

        class RecordingProvider(make_provider):  # type: ignore[misc, valid-type]
            def stream(self, messages: list[Message], **kwargs: Any) -> Iterator[CompletionChunk]:
                seen.append(structlog.contextvars.get_contextvars())
                yield CompletionChunk(content="ok")

        assistant = Assistant(RecordingProvider(), memory_registry=ChatMemoryRegistry.message_window(10))

        assert list(assistant.stream("Hi", memory_id="user-7")) == ["ok"]
        assert seen[0]["memory_id"] == "user-7"
        assert "memory_id" not in structlog.contextvars.get_contextvars()
