"""FastAPI front end that streams chat responses to browsers.

Routes:
- ``GET /api/chat/stream?message=``: Server-Sent Events. Sends ``message``
  events, then ``complete`` or ``error``.
- ``GET /api/cancellable/chat/stream?message=&requestId=``: the same, and
  cancellable while running. Sends ``cancelled`` when stopped.
- ``POST /api/cancellable/chat/cancel?requestId=``: stop a cancellable stream.
- ``WS /ws/chat``: each text frame starts a streamed reply, sent as JSON
  frames ``{"type": "partial" | "complete" | "error", "content": ...}``.
"""

import queue
import time
from collections.abc import Callable, Iterator
from concurrent.futures import Executor, ThreadPoolExecutor

from fastapi import APIRouter, FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from llm_recipes.core.config import get_settings
from llm_recipes.core.errors import LLMRecipesError
from llm_recipes.core.logging import LogContext, get_logger
from llm_recipes.providers.base import BaseLLMProvider, Message
from llm_recipes.streaming.handler import StreamingHandle, StreamOutcome, explain_stream_error, start_stream
from llm_recipes.streaming.registry import StreamRegistry

logger = get_logger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_DONE = "__done__"


def format_sse(event: str, data: str) -> str:
    """Render one SSE frame; multi-line data is split over ``data:`` lines."""
    lines = data.split("\n") if data else [""]
    payload = "\n".join(f"data: {line}" for line in lines)
    return f"event: {event}\n{payload}\n\n"


def _sse_events(
    provider: BaseLLMProvider,
    message: str,
    handle: StreamingHandle,
    timeout: float,
    executor: Executor,
    on_finish: Callable[[], None] | None = None,
) -> Iterator[str]:
    """Bridge callback streaming (on a worker thread) to an SSE generator."""
    events: queue.Queue[tuple[str, str]] = queue.Queue()

    def on_partial(text: str, _context: object) -> None:
        events.put(("message", text))

    def on_complete(outcome: StreamOutcome) -> None:
        events.put(("complete", outcome.content))

    def on_error(error: LLMRecipesError) -> None:
        events.put(("error", explain_stream_error(error)))

    _, future = start_stream(
        provider,
        [Message.user(message)],
        on_partial=on_partial,
        on_complete=on_complete,
        on_error=on_error,
        handle=handle,
        executor=executor,
    )
    future.add_done_callback(lambda _f: events.put((_DONE, "")))
    deadline = time.monotonic() + timeout

    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                handle.cancel()
                logger.warning("sse_stream_timeout", timeout_seconds=timeout)
                yield format_sse("error", f"Stream timed out after {timeout:g}s")
                break
            try:
                event, data = events.get(timeout=min(remaining, 1.0))
            except queue.Empty:
                continue

            if event == _DONE:
                error = future.exception()
                if error is not None:
                    logger.error("sse_stream_failed", error=str(error))
                    yield format_sse("error", explain_stream_error(error))
                elif future.result().cancelled:
                    yield format_sse("cancelled", "")
                break
            yield format_sse(event, data)
    finally:
        # Client went away or the stream ended: make sure generation stops
        if not future.done():
            handle.cancel()
        if on_finish is not None:
            on_finish()


def _provider(request: Request) -> BaseLLMProvider:
    return request.app.state.provider


@router.get("/api/chat/stream", tags=["streaming"], summary="Stream a chat reply (SSE)")
def chat_stream(request: Request, message: str = Query(..., min_length=1)) -> StreamingResponse:
    logger.info("sse_stream_started", message_chars=len(message))
    return StreamingResponse(
        _sse_events(
            _provider(request),
            message,
            StreamingHandle(),
            request.app.state.sse_timeout,
            request.app.state.stream_executor,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get(
    "/api/cancellable/chat/stream",
    tags=["streaming"],
    summary="Stream a chat reply that can be cancelled by request id (SSE)",
)
def cancellable_chat_stream(
    request: Request,
    message: str = Query(..., min_length=1),
    request_id: str = Query(..., alias="requestId", min_length=1),
) -> StreamingResponse:
    registry: StreamRegistry = request.app.state.stream_registry
    handle = registry.register(request_id)
    with LogContext(request_id=request_id):
        logger.info("cancellable_stream_started", message_chars=len(message))
    return StreamingResponse(
        _sse_events(
            _provider(request),
            message,
            handle,
            request.app.state.sse_timeout,
            request.app.state.stream_executor,
            on_finish=lambda: registry.remove(request_id, handle),
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/api/cancellable/chat/cancel", tags=["streaming"], summary="Cancel a running stream")
def cancel_chat_stream(
    request: Request,
    request_id: str = Query(..., alias="requestId", min_length=1),
) -> dict[str, object]:
    registry: StreamRegistry = request.app.state.stream_registry
    return {"requestId": request_id, "cancelled": registry.cancel(request_id)}


@router.websocket("/ws/chat")
async def chat_websocket(websocket: WebSocket) -> None:
    provider: BaseLLMProvider = websocket.app.state.provider
    await websocket.accept()
    logger.info("websocket_connected")
    try:
        while True:
            text = await websocket.receive_text()
            if not text.strip():
                await websocket.send_json({"type": "error", "content": "Message must not be empty"})
                continue

            parts: list[str] = []
            try:
                async for chunk in provider.stream_async([Message.user(text)]):
                    if chunk.content:
                        parts.append(chunk.content)
                        await websocket.send_json({"type": "partial", "content": chunk.content})
            except LLMRecipesError as e:
                logger.warning("websocket_stream_failed", error=str(e))
                await websocket.send_json({"type": "error", "content": explain_stream_error(e)})
                continue
            await websocket.send_json({"type": "complete", "content": "".join(parts)})
    except WebSocketDisconnect:
        logger.info("websocket_disconnected")


def create_app(
    provider: BaseLLMProvider | None = None,
    stream_registry: StreamRegistry | None = None,
    sse_timeout: float | None = None,
    stream_workers: int | None = None,
) -> FastAPI:
    """Build the streaming chat application.

    Args:
        provider: Chat model client. Defaults to the configured endpoint.
        stream_registry: Registry for cancellable streams.
        sse_timeout: Seconds before an SSE stream gives up.
        stream_workers: Size of the pool running SSE streams. Defaults to
            ``stream_max_workers``.
    """
    settings = get_settings()
    if provider is None:
        from llm_recipes.providers import get_provider

        provider = get_provider()

    app = FastAPI(title="llm-recipes streaming chat")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.provider = provider
    app.state.stream_registry = stream_registry or StreamRegistry()
    app.state.sse_timeout = sse_timeout if sse_timeout is not None else settings.sse_timeout_seconds
    app.state.stream_executor = ThreadPoolExecutor(
        max_workers=stream_workers or settings.stream_max_workers,
        thread_name_prefix="sse-stream",
    )
    app.include_router(router)

    @app.get("/health", tags=["system"])
    def health() -> dict[str, str]:
        return {"status": "ok", "endpoint": provider.provider_name}

    @app.on_event("shutdown")
    def stop_stream_workers() -> None:
        app.state.stream_executor.shutdown(wait=False, cancel_futures=True)

    return app
