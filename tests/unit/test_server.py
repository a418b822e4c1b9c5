"""Tests for the streaming chat HTTP and WebSocket front end."""

import threading
from collections.abc import Iterator
from typing import Any

from fastapi.testclient import TestClient

from llm_recipes.core.errors import AuthenticationError
from llm_recipes.providers.base import CompletionChunk, Message
from llm_recipes.server import create_app, format_sse
from llm_recipes.streaming import StreamRegistry


def parse_sse(body: str) -> list[tuple[str, str]]:
    """Split an SSE body into (event, data) pairs."""
    events = []
    for frame in body.strip().split("\n\n"):
        event, data = "message", []
        for line in frame.splitlines():
            if line.startswith("event: "):
                event = line[len("event: ") :]
            elif line.startswith("data: "):
                data.append(line[len("data: ") :])
        events.append((event, "\n".join(data)))
    return events


class TestFormatSse:
    """Tests for SSE framing."""

    def test_single_line(self) -> None:
        assert format_sse("message", "Hello") == "event: message\ndata: Hello\n\n"

    def test_multi_line(self) -> None:
        assert format_sse("message", "a\nb") == "event: message\ndata: a\ndata: b\n\n"

    def test_empty(self) -> None:
        assert format_sse("cancelled", "") == "event: cancelled\ndata: \n\n"


class TestSseRoutes:
    """Tests for the SSE endpoints."""

    def test_stream(self, make_provider: Any) -> None:
        client = TestClient(create_app(make_provider(stream_parts=["Hel", "lo"])))

        response = client.get("/api/chat/stream", params={"message": "Hi"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert parse_sse(response.text) == [("message", "Hel"), ("message", "lo"), ("complete", "Hello")]

    def test_stream_error_event(self, make_provider: Any) -> None:
        provider = make_provider(stream_error=AuthenticationError("bad key", provider="scripted"))
        client = TestClient(create_app(provider))

        response = client.get("/api/chat/stream", params={"message": "Hi"})

        assert parse_sse(response.text) == [
            ("error", "Authentication failed: check that the API key is set and valid")
        ]

    def test_message_required(self, make_provider: Any) -> None:
        client = TestClient(create_app(make_provider()))

        assert client.get("/api/chat/stream").status_code == 422

    def test_cancellable_stream_unregisters(self, make_provider: Any) -> None:
        registry = StreamRegistry()
        client = TestClient(create_app(make_provider(stream_parts=["ok"]), stream_registry=registry))

        response = client.get("/api/cancellable/chat/stream", params={"message": "Hi", "requestId": "r1"})

        assert parse_sse(response.text)[-1] == ("complete", "ok")
        assert "r1" not in registry

    def test_cancel_unknown_request(self, make_provider: Any) -> None:
        client = TestClient(create_app(make_provider()))

        response = client.post("/api/cancellable/chat/cancel", params={"requestId": "nope"})

        assert response.json() == {"requestId": "nope", "cancelled": False}

    def test_cancel_running_request(self, make_provider: Any) -> None:
        registry = StreamRegistry()
        handle = registry.register("r2")
        client = TestClient(create_app(make_provider(), stream_registry=registry))

        response = client.post("/api/cancellable/chat/cancel", params={"requestId": "r2"})

        assert response.json() == {"requestId": "r2", "cancelled": True}
        assert handle.is_cancelled

    def test_timeout(self, make_provider: Any) -> None:
        release = threading.Event()

        class StalledProvider(make_provider):  # type: ignore[misc, valid-type]
            def stream(self, messages: list[Message], **kwargs: Any) -> Iterator[CompletionChunk]:
                release.wait(5)
                yield CompletionChunk(content="late")

        client = TestClient(create_app(StalledProvider(), sse_timeout=0.2))
        try:
            response = client.get("/api/chat/stream", params={"message": "Hi"})
        finally:
            release.set()

        assert parse_sse(response.text) == [("error", "Stream timed out after 0.2s")]

    def test_streams_run_on_app_pool(self, make_provider: Any) -> None:
        """Test SSE streams run on the application's own worker pool."""
        threads: list[str] = []

        class RecordingProvider(make_provider):  # type: ignore[misc, valid-type]
            def stream(self, messages: list[Message], **kwargs: Any) -> Iterator[CompletionChunk]:
                threads.append(threading.current_thread().name)
                yield CompletionChunk(content="Hi")

        app = create_app(RecordingProvider(), stream_workers=6)
        response = TestClient(app).get("/api/chat/stream", params={"message": "Hi"})

        assert parse_sse(response.text)[-1] == ("complete", "Hi")
        assert threads[0].startswith("sse-stream")
        assert app.state.stream_executor._max_workers == 6

    def test_health(self, make_provider: Any) -> None:
        client = TestClient(create_app(make_provider()))

        assert client.get("/health").json() == {"status": "ok", "endpoint": "scripted"}


class TestWebSocket:
    """Tests for the WebSocket chat endpoint."""

    def test_streams_partials_then_complete(self, make_provider: Any) -> None:
        client = TestClient(create_app(make_provider(stream_parts=["Hel", "lo"])))

        with client.websocket_connect("/ws/chat") as websocket:
            websocket.send_text("Hi")
            frames = [websocket.receive_json() for _ in range(3)]

        assert frames == [
            {"type": "partial", "content": "Hel"},
            {"type": "partial", "content": "lo"},
            {"type": "complete", "content": "Hello"},
        ]

    def test_empty_message(self, make_provider: Any) -> None:
        client = TestClient(create_app(make_provider()))

        with client.websocket_connect("/ws/chat") as websocket:
            websocket.send_text("   ")
            assert websocket.receive_json() == {"type": "error", "content": "Message must not be empty"}

    def test_error_frame(self, make_provider: Any) -> None:
        provider = make_provider(stream_error=AuthenticationError("bad key", provider="scripted"))
        client = TestClient(create_app(provider))

        with client.websocket_connect("/ws/chat") as websocket:
            websocket.send_text("Hi")
            frame = websocket.receive_json()

        assert frame == {"type": "error", "content": "Authentication failed: check that the API key is set and valid"}
