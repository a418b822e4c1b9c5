"""Streaming recipes.

- streaming.py: Callbacks, error hints, cancellation and background streams
- streaming_server.py: SSE and WebSocket endpoints served with uvicorn
"""
