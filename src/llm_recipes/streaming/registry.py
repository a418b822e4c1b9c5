"""Request-id bookkeeping for streams that clients may cancel."""

import threading

from llm_recipes.core.logging import get_logger
from llm_recipes.streaming.handler import StreamingHandle

logger = get_logger(__name__)


class StreamRegistry:
    """Thread-safe map of request ids to the handles of running streams."""

    def __init__(self) -> None:
        self._handles: dict[str, StreamingHandle] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def __contains__(self, request_id: object) -> bool:
        with self._lock:
            return request_id in self._handles

    def register(self, request_id: str) -> StreamingHandle:
        """Create and track a handle for ``request_id``.

        A stream already registered under the same id is cancelled first.
        """
        handle = StreamingHandle()
        with self._lock:
            previous = self._handles.get(request_id)
            self._handles[request_id] = handle
        if previous is not None:
            previous.cancel()
            logger.info("stream_replaced", request_id=request_id)
        return handle

    def cancel(self, request_id: str) -> bool:
        """Cancel the stream for ``request_id``. Returns False if unknown."""
        with self._lock:
            handle = self._handles.pop(request_id, None)
        if handle is None:
            return False
        handle.cancel()
        logger.info("stream_cancelled_by_client", request_id=request_id)
        return True

    def remove(self, request_id: str, handle: StreamingHandle | None = None) -> None:
        """Stop tracking ``request_id`` (only if it still maps to ``handle``)."""
        with self._lock:
            if handle is None or self._handles.get(request_id) is handle:
                self._handles.pop(request_id, None)
