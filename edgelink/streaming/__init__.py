"""Server-push streams."""

from edgelink.streaming.manager import PushStreamManager
from edgelink.streaming.sse import SSEEvent, SSEEventParser
from edgelink.streaming.types import StreamCallbacks, StreamHandle, StreamState

__all__ = [
    "PushStreamManager",
    "SSEEvent",
    "SSEEventParser",
    "StreamCallbacks",
    "StreamHandle",
    "StreamState",
]
