"""Push-stream handle, callbacks and lifecycle states."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from loguru import logger

from edgelink.utils.exceptions import StreamError

MessageCallback = Callable[[Any], None]
ErrorCallback = Callable[[StreamError], None]
Callback = Callable[[], None]
DisconnectFn = Callable[[], None]


class StreamState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


@dataclass
class StreamCallbacks:
    """Callbacks wired to one push stream; all fire on the event loop."""
    on_message: MessageCallback
    on_error: ErrorCallback
    on_open: Callback | None = None
    on_close: Callback | None = None


class StreamHandle:
    """
    One registered push stream.

    Created on connect, removed on terminal error, graceful close or explicit
    disconnect. Once closed no callback fires again.
    """

    def __init__(
        self,
        key: str,
        callbacks: StreamCallbacks,
        *,
        on_release: Callable[[StreamHandle], None] | None = None,
    ):
        self.key = key
        self.callbacks = callbacks
        self.state = StreamState.CONNECTING
        self.task: asyncio.Task[None] | None = None
        self._on_release = on_release
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def disconnect(self) -> None:
        """Tear the stream down. Idempotent and synchronous."""
        if self._closed:
            return
        logger.info(f"Disconnecting push stream: {self.key}")
        self._close(cancel_task=True)

    def terminate(self) -> None:
        """Close from inside the stream task (terminal error or remote close)."""
        if self._closed:
            return
        self._close(cancel_task=False)

    def _close(self, *, cancel_task: bool) -> None:
        self._closed = True
        self.state = StreamState.DISCONNECTED
        task = self.task
        if cancel_task and task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()
        if self._on_release is not None:
            self._on_release(self)

    def mark_open(self) -> None:
        if self._closed:
            return
        self.state = StreamState.OPEN
        if self.callbacks.on_open is not None:
            self._invoke("on_open", self.callbacks.on_open)

    def emit_message(self, payload: Any) -> None:
        if self._closed:
            return
        self._invoke("on_message", self.callbacks.on_message, payload)

    def emit_error(self, error: StreamError) -> None:
        if self._closed:
            return
        self._invoke("on_error", self.callbacks.on_error, error)

    def emit_close(self) -> None:
        if self._closed or self.callbacks.on_close is None:
            return
        self._invoke("on_close", self.callbacks.on_close)

    def _invoke(self, name: str, fn: Callable[..., None], *args: Any) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.exception(f"Push stream {self.key} {name} callback raised: {e}")
