"""A configurable chat assistant.

``Assistant`` runs one user turn through the usual steps of an LLM
application, in this order:

1. Render the user template (``{{it}}`` is the user's message).
2. Moderate the input. A flagged input raises ``ModerationError`` and the
   chat model is never called.
3. Retrieve relevant content and inject it into the message (RAG).
4. Add the system message and the user message to the chat memory.
5. Let the request transformer rewrite the outgoing messages.
6. Call the chat model, executing tools until it answers.
7. Store the answer (and any tool exchange) in the chat memory.

Every component is optional; an ``Assistant(provider)`` is a plain
stateless chat call.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from llm_recipes.core.errors import ModerationError, ValidationError
from llm_recipes.core.logging import LogContext, get_logger
from llm_recipes.memory.chat_memory import DEFAULT_MEMORY_ID, ChatMemory
from llm_recipes.memory.registry import ChatMemoryRegistry
from llm_recipes.moderation.moderator import ModerationModel
from llm_recipes.providers.base import BaseLLMProvider, Message, Usage
from llm_recipes.rag.retriever import Content, RetrievalAugmentor
from llm_recipes.tools.loop import run_tool_loop
from llm_recipes.tools.registry import ToolExecution, ToolRegistry
from llm_recipes.utils.structured import format_instructions, parse_output, wants_json
from llm_recipes.utils.templates import render_template

logger = get_logger(__name__)

T = TypeVar("T")

SystemMessageSource = str | Callable[[str], str | None]
RequestTransformer = Callable[[list[Message], str], list[Message]]


@dataclass
class AssistantResult(Generic[T]):
    """An answer together with the metadata of the call that produced it."""

    content: T
    usage: Usage | None = None
    sources: list[Content] = field(default_factory=list)
    tool_executions: list[ToolExecution] = field(default_factory=list)
    finish_reason: str | None = None


@dataclass
class _PreparedTurn:
    messages: list[Message]
    memory: ChatMemory | None
    sources: list[Content]


def _as_registry(tools: ToolRegistry | Iterable[object] | None) -> ToolRegistry | None:
    """Accept a registry, or objects with ``@tool`` methods and plain functions."""
    if tools is None or isinstance(tools, ToolRegistry):
        return tools
    registry = ToolRegistry()
    for item in tools:
        if callable(item) and not isinstance(item, type) and hasattr(item, "__name__"):
            registry.register(item)  # type: ignore[arg-type]
        else:
            registry.register_object(item)
    return registry


class Assistant:
    """Chat assistant composed from optional building blocks.

    Args:
        provider: Chat model client.
        system_message: System prompt, or a callable mapping a memory id to
            one (returning None means no system message).
        user_template: Template wrapping the user message; ``{{it}}`` is the
            message and other placeholders come from ``variables``.
        chat_memory: A single memory shared by every call.
        memory_registry: One memory per memory id. Mutually exclusive with
            ``chat_memory``.
        request_transformer: ``(messages, memory_id) -> messages`` hook
            applied to every outgoing request.
        tools: A ``ToolRegistry``, or objects/functions to register.
        retrieval_augmentor: Injects retrieved content into user messages.
        moderation_model: Checks user input before the model is called.
        max_tool_rounds: Limit for tool-calling rounds per turn.
        **default_params: Parameters for every model call (temperature,
            max_tokens, model...). Per-call parameters take precedence.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        *,
        system_message: SystemMessageSource | None = None,
        user_template: str | None = None,
        chat_memory: ChatMemory | None = None,
        memory_registry: ChatMemoryRegistry | None = None,
        request_transformer: RequestTransformer | None = None,
        tools: ToolRegistry | Iterable[object] | None = None,
        retrieval_augmentor: RetrievalAugmentor | None = None,
        moderation_model: ModerationModel | None = None,
        max_tool_rounds: int = 5,
        **default_params: Any,
    ) -> None:
        if chat_memory is not None and memory_registry is not None:
            raise ValidationError("Configure either chat_memory or memory_registry, not both")
        self.provider = provider
        self.system_message = system_message
        self.user_template = user_template
        self.chat_memory = chat_memory
        self.memory_registry = memory_registry
        self.request_transformer = request_transformer
        self.tools = _as_registry(tools)
        self.retrieval_augmentor = retrieval_augmentor
        self.moderation_model = moderation_model
        self.max_tool_rounds = max_tool_rounds
        self.default_params = default_params

    # -----------------------------
    # Chat memory access
    # -----------------------------
    def _memory_for(self, memory_id: str) -> ChatMemory | None:
        if self.memory_registry is not None:
            return self.memory_registry.get_or_create(memory_id)
        return self.chat_memory

    def get_chat_memory(self, memory_id: str = DEFAULT_MEMORY_ID) -> ChatMemory | None:
        """The memory holding ``memory_id``'s conversation, if any."""
        if self.memory_registry is not None:
            return self.memory_registry.get(memory_id)
        return self.chat_memory

    def evict_chat_memory(self, memory_id: str) -> bool:
        """Forget ``memory_id``'s conversation. Returns False if there was none."""
        if self.memory_registry is None:
            return False
        return self.memory_registry.evict(memory_id)

    # -----------------------------
    # Turn preparation
    # -----------------------------
    def _system_text(self, memory_id: str) -> str | None:
        if callable(self.system_message):
            return self.system_message(memory_id)
        return self.system_message

    def _prepare(
        self,
        user_message: str,
        memory_id: str,
        variables: dict[str, Any] | None,
        output_type: Any,
    ) -> _PreparedTurn:
        text = user_message
        if self.user_template is not None:
            text = render_template(self.user_template, {"it": user_message, **(variables or {})})

        if self.moderation_model is not None:
            moderation = self.moderation_model.moderate(text)
            if moderation.flagged:
                raise ModerationError(
                    f"Text \"{text}\" violates content policy",
                    flagged_text=moderation.flagged_text,
                    verdict=moderation.verdict,
                )

        sources: list[Content] = []
        if self.retrieval_augmentor is not None:
            augmented = self.retrieval_augmentor.augment(text)
            text, sources = augmented.text, augmented.contents

        instructions = format_instructions(output_type)
        if instructions:
            text = f"{text}\n{instructions}"

        user = Message.user(text)
        system_text = self._system_text(memory_id)
        memory = self._memory_for(memory_id)

        if memory is not None:
            if system_text:
                memory.add(Message.system(system_text))
            memory.add(user)
            messages = memory.messages()
        else:
            messages = [Message.system(system_text), user] if system_text else [user]

        if self.request_transformer is not None:
            messages = self.request_transformer(messages, memory_id)

        return _PreparedTurn(messages, memory, sources)

    def _params(self, output_type: Any, params: dict[str, Any]) -> dict[str, Any]:
        merged = {**self.default_params, **params}
        if wants_json(output_type):
            merged.setdefault("response_format", {"type": "json_object"})
        return merged

    # -----------------------------
    # Calls
    # -----------------------------
    def chat_result(
        self,
        user_message: str,
        memory_id: str = DEFAULT_MEMORY_ID,
        variables: dict[str, Any] | None = None,
        output_type: Any = str,
        **params: Any,
    ) -> AssistantResult[Any]:
        """Run one turn and return the answer with its metadata.

        Args:
            user_message: The user's message (``{{it}}`` in templates).
            memory_id: Conversation id, used with a memory registry and
                passed to system-message callables and the transformer.
            variables: Extra template variables.
            output_type: ``str``, ``bool``, an Enum, ``list[str]`` or a
                Pydantic model to parse the answer into.
            **params: Per-call model parameters.

        Raises:
            ModerationError: If the input is flagged.
            OutputParsingError: If the answer cannot be parsed as ``output_type``.
        """
        with LogContext(memory_id=memory_id):
            turn = self._prepare(user_message, memory_id, variables, output_type)
            call_params = self._params(output_type, params)

            if self.tools is not None and len(self.tools):
                loop = run_tool_loop(
                    self.provider,
                    turn.messages,
                    self.tools,
                    max_rounds=self.max_tool_rounds,
                    **call_params,
                )
                response, usage = loop.response, loop.usage
                executions, new_messages = loop.executions, loop.new_messages
            else:
                response = self.provider.complete(turn.messages, **call_params)
                usage, executions = response.usage, []
                new_messages = [Message.assistant(response.content)]

            if turn.memory is not None:
                turn.memory.add_all(new_messages)

            logger.debug(
                "assistant_turn_completed",
                sources=len(turn.sources),
                tool_executions=len(executions),
                finish_reason=response.finish_reason,
            )
            return AssistantResult(
                content=parse_output(response.content or "", output_type),
                usage=usage,
                sources=turn.sources,
                tool_executions=executions,
                finish_reason=response.finish_reason,
            )

    def chat(
        self,
        user_message: str,
        memory_id: str = DEFAULT_MEMORY_ID,
        variables: dict[str, Any] | None = None,
        **params: Any,
    ) -> str:
        """Run one turn and return the answer text."""
        return self.chat_result(user_message, memory_id, variables, **params).content

    def chat_as(
        self,
        output_type: type[T] | Any,
        user_message: str,
        memory_id: str = DEFAULT_MEMORY_ID,
        variables: dict[str, Any] | None = None,
        **params: Any,
    ) -> T:
        """Run one turn and parse the answer into ``output_type``."""
        return self.chat_result(user_message, memory_id, variables, output_type=output_type, **params).content

    def stream(
        self,
        user_message: str,
        memory_id: str = DEFAULT_MEMORY_ID,
        variables: dict[str, Any] | None = None,
        **params: Any,
    ) -> Iterator[str]:
        """Run one turn, yielding the answer as it is generated.

        Tools are not offered on streamed turns. The answer is stored in
        the chat memory only if the stream is consumed to the end.
        """
        with LogContext(memory_id=memory_id):
            turn = self._prepare(user_message, memory_id, variables, str)
            parts: list[str] = []
            for chunk in self.provider.stream(turn.messages, **self._params(str, params)):
                if chunk.content:
                    parts.append(chunk.content)
                    yield chunk.content
            if turn.memory is not None:
                turn.memory.add(Message.assistant("".join(parts)))
