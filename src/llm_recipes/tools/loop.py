"""The request / execute / respond loop for tool calling."""

from dataclasses import dataclass, field
from typing import Any

from llm_recipes.core.errors import ToolLoopError
from llm_recipes.core.logging import get_logger
from llm_recipes.providers.base import BaseLLMProvider, CompletionResponse, Message, Usage
from llm_recipes.tools.registry import ToolExecution, ToolRegistry

logger = get_logger(__name__)


@dataclass
class ToolLoopResult:
    """Outcome of a tool-calling exchange.

    Attributes:
        response: The final model response (no tool requests).
        executions: Every tool run, in order.
        new_messages: Messages produced during the exchange, final answer
            included, ready to append to a chat memory.
        usage: Token usage summed over every model call.
    """

    response: CompletionResponse
    executions: list[ToolExecution] = field(default_factory=list)
    new_messages: list[Message] = field(default_factory=list)
    usage: Usage | None = None


def run_tool_loop(
    provider: BaseLLMProvider,
    messages: list[Message],
    registry: ToolRegistry,
    max_rounds: int = 5,
    **kwargs: Any,
) -> ToolLoopResult:
    """Call the model until it answers without requesting tools.

    Each round appends the assistant's tool-request message, then one tool
    result message per request, then calls the model again.

    Args:
        provider: The chat model client.
        messages: Conversation so far (not modified).
        registry: Tools offered to the model.
        max_rounds: Maximum number of tool rounds before giving up.
        **kwargs: Extra parameters for ``provider.complete``.

    Returns:
        The final response with the executions and messages that led to it.

    Raises:
        ToolLoopError: If the model still requests tools after ``max_rounds``.
    """
    conversation = list(messages)
    new_messages: list[Message] = []
    executions: list[ToolExecution] = []
    tools = registry.definitions() or None

    response = provider.complete(conversation, tools=tools, **kwargs)
    usage = response.usage
    rounds = 0

    while response.tool_calls:
        if rounds >= max_rounds:
            raise ToolLoopError(max_rounds)
        rounds += 1
        logger.info("tool_calls_received", round=rounds, count=len(response.tool_calls))

        request = Message.assistant_tool_calls(response.tool_calls, content=response.content)
        conversation.append(request)
        new_messages.append(request)

        for call in response.tool_calls:
            execution = registry.execute(call)
            executions.append(execution)
            result_message = Message.tool(execution.result, tool_call_id=call.id, name=call.name)
            conversation.append(result_message)
            new_messages.append(result_message)

        response = provider.complete(conversation, tools=tools, **kwargs)
        usage = usage + response.usage if usage else response.usage

    new_messages.append(Message.assistant(response.content))
    return ToolLoopResult(response=response, executions=executions, new_messages=new_messages, usage=usage)
