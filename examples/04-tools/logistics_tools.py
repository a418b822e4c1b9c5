"""Manual Tool Calling Example.

The tool-calling exchange written out step by step: declare a tool, let
the model request it, run it, and send the result back for the final
answer.

Features demonstrated:
- Declaring a tool with a hand-written JSON Schema
- Reading tool requests from the response
- Returning tool results linked by tool call id
"""

import json
from typing import Any

from llm_recipes import Message, OpenAIProvider, ToolDefinition, get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an e-commerce customer service assistant. Only use the query_logistics tool "
    "to get shipping information and never make data up. Once the tool returns, summarize "
    "the result for the user in natural language."
)

LOGISTICS_TOOL = ToolDefinition(
    name="query_logistics",
    description="Query the shipping status of an order by its order id (order_id)",
    parameters={
        "type": "object",
        "properties": {
            "order_id": {"type": "string", "description": "Order number, formatted like 20251216001"},
        },
        "required": ["order_id"],
    },
)

# Stand-in for a call to the logistics system
LOGISTICS_DATA: dict[str, dict[str, Any]] = {
    "20251216001": {
        "order_id": "20251216001",
        "status": "shipped",
        "express_company": "SF Express",
        "express_no": "SF1234567890",
        "update_time": "2025-12-16 14:30:00",
        "location": "Out for delivery, Pudong New Area, Shanghai",
    },
}


def query_logistics(order_id: str) -> str:
    """Look up an order's shipping status as a JSON string."""
    data = LOGISTICS_DATA.get(order_id, {"order_id": order_id, "status": "no shipping information found"})
    return json.dumps(data, ensure_ascii=False)


def ask_about_order(question: str = "Please check the shipping status of order 20251216001") -> str:
    """Run one request / execute / respond exchange.

    Returns:
        The final answer, or the direct answer if no tool was requested.
    """
    provider = OpenAIProvider(endpoint="qwen")
    messages = [Message.system(SYSTEM_PROMPT), Message.user(question)]

    first = provider.complete(messages, tools=[LOGISTICS_TOOL], temperature=0.1)
    print(f"Tool call requested: {bool(first.tool_calls)}")
    if not first.tool_calls:
        # The model answered without the tool; the answer may be made up
        return first.content or ""

    messages.append(Message.assistant_tool_calls(first.tool_calls, content=first.content))
    for call in first.tool_calls:
        order_id = call.parsed_arguments().get("order_id", "")
        result = query_logistics(order_id)
        logger.info("tool_executed", tool=call.name, order_id=order_id)
        print(f"Tool {call.name}({call.arguments}) -> {result}")
        messages.append(Message.tool(result, tool_call_id=call.id, name=call.name))

    final = provider.complete(messages, tools=[LOGISTICS_TOOL], temperature=0.1)
    return final.content or ""


def main() -> None:
    """Run the manual tool calling example."""
    print("=" * 60)
    print("Manual Tool Calling Example")
    print("=" * 60)

    print(f"\nFinal answer:\n{ask_about_order()}")


if __name__ == "__main__":
    main()
