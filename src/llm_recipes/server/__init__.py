"""HTTP and WebSocket front end for streaming chat."""

from llm_recipes.server.app import create_app, format_sse

__all__ = ["create_app", "format_sse"]
