"""JSON (de)serialization of chat messages for persistent stores.

The document layout uses a ``type`` discriminator (SYSTEM, USER, AI,
TOOL_EXECUTION_RESULT) with camelCase fields, so conversations written by
other clients of the same Redis keys can be read back.
"""

import json
from typing import Any

from llm_recipes.core.errors import ValidationError
from llm_recipes.providers.base import Message, Role, ToolCall


def message_to_dict(message: Message) -> dict[str, Any]:
    """Convert a message to its JSON document form."""
    if message.role == Role.SYSTEM:
        return {"type": "SYSTEM", "text": message.text}

    if message.role == Role.USER:
        doc: dict[str, Any] = {"type": "USER"}
        if isinstance(message.content, list):
            doc["contents"] = message.content
        else:
            doc["text"] = message.content or ""
        if message.name:
            doc["name"] = message.name
        return doc

    if message.role == Role.ASSISTANT:
        doc = {"type": "AI", "text": message.content}
        if message.tool_calls:
            doc["toolExecutionRequests"] = [
                {
                    "id": tc["id"],
                    "name": tc["function"]["name"],
                    "arguments": tc["function"]["arguments"],
                }
                for tc in message.tool_calls
            ]
        return doc

    return {
        "type": "TOOL_EXECUTION_RESULT",
        "id": message.tool_call_id,
        "toolName": message.name,
        "text": message.text,
    }


def message_from_dict(doc: dict[str, Any]) -> Message:
    """Rebuild a message from its JSON document form.

    Raises:
        ValidationError: If the document is not an object, its type is
            unknown, or a required field is missing.
    """
    if not isinstance(doc, dict):
        raise ValidationError("Message document must be a JSON object", value=doc)
    try:
        return _message_from_doc(doc)
    except KeyError as e:
        field = e.args[0]
        raise ValidationError(f"{doc.get('type')} message document has no '{field}'", field=field, value=doc) from e
    except (AttributeError, TypeError) as e:
        raise ValidationError(f"Malformed {doc.get('type')} message document: {e}", value=doc) from e


def _message_from_doc(doc: dict[str, Any]) -> Message:
    message_type = doc.get("type")

    if message_type == "SYSTEM":
        return Message.system(doc["text"])

    if message_type == "USER":
        if "contents" in doc:
            return Message(role=Role.USER, content=doc["contents"], name=doc.get("name"))
        return Message.user(doc.get("text", ""), name=doc.get("name"))

    if message_type == "AI":
        requests = doc.get("toolExecutionRequests")
        if requests:
            calls = [ToolCall(id=r["id"], name=r["name"], arguments=r.get("arguments", "")) for r in requests]
            return Message.assistant_tool_calls(calls, content=doc.get("text"))
        return Message.assistant(doc.get("text"))

    if message_type == "TOOL_EXECUTION_RESULT":
        return Message.tool(doc.get("text", ""), tool_call_id=doc["id"], name=doc.get("toolName"))

    raise ValidationError(f"Unknown message type: {message_type}", field="type", value=message_type)


def message_to_json(message: Message) -> str:
    """Serialize one message to a JSON string."""
    return json.dumps(message_to_dict(message), ensure_ascii=False)


def message_from_json(data: str | bytes) -> Message:
    """Deserialize one message from a JSON string."""
    return message_from_dict(_load_json(data))


def messages_to_json(messages: list[Message]) -> str:
    """Serialize a conversation to a JSON array."""
    return json.dumps([message_to_dict(m) for m in messages], ensure_ascii=False)


def messages_from_json(data: str | bytes) -> list[Message]:
    """Deserialize a conversation from a JSON array."""
    docs = _load_json(data)
    if not isinstance(docs, list):
        raise ValidationError("Conversation document must be a JSON array", value=docs)
    return [message_from_dict(doc) for doc in docs]


def _load_json(data: str | bytes) -> Any:
    try:
        return json.loads(data)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Stored message is not valid JSON: {e}", value=data) from e
