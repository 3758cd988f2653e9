"""Push-stream manager: at most one live server-push connection per logical key.

Each stream moves DISCONNECTED -> CONNECTING -> OPEN -> DISCONNECTED. A
terminal error behaves as an implicit disconnect. The handle registry is only
mutated synchronously inside manager methods and handle callbacks, all on the
event loop thread.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
from loguru import logger

from edgelink.api.credentials import CredentialProvider
from edgelink.api.errors import classify_error
from edgelink.config.schema import Settings
from edgelink.streaming.sse import SSEEvent, SSEEventParser
from edgelink.streaming.types import DisconnectFn, StreamCallbacks, StreamHandle, StreamState
from edgelink.utils.exceptions import (
    StreamMessageError,
    StreamSetupError,
    StreamTransportError,
    describe_exception,
)


class PushStreamManager:
    """Opens, tracks and tears down push streams keyed by subscription."""

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialProvider,
        http: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self.credentials = credentials
        self._http = http
        self._owns_http = http is None
        self._handles: dict[str, StreamHandle] = {}

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            # Streams stay open indefinitely; only the connect phase is bounded
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(None, connect=10.0),
                follow_redirects=self.settings.http.follow_redirects,
            )
        return self._http

    def build_url(self, endpoint: str) -> str:
        return f"{self.settings.functions_url}/{endpoint.lstrip('/')}"

    def connect(
        self,
        key: str,
        callbacks: StreamCallbacks,
        *,
        endpoint: str | None = None,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> DisconnectFn | None:
        """
        Open a push stream for ``key`` and return its disconnect function.

        An existing stream under the same key is disconnected first. Setup runs
        as a background task; failures arrive through ``callbacks.on_error``.
        Returns None (after ``on_error``) when no stream could be scheduled.
        """
        key = (key or "").strip()
        if not key:
            StreamHandle("", callbacks).emit_error(StreamSetupError("", "Push stream key is required"))
            return None

        existing = self._handles.get(key)
        if existing is not None:
            logger.info(f"Replacing existing push stream: {key}")
            existing.disconnect()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            StreamHandle(key, callbacks).emit_error(
                StreamSetupError(key, "Push streams require a running event loop")
            )
            return None

        handle = StreamHandle(key, callbacks, on_release=self._release)
        self._handles[key] = handle
        handle.task = loop.create_task(
            self._run(handle, endpoint or key, params, body),
            name=f"edgelink-stream:{key}",
        )
        logger.info(f"Push stream connecting: {key}")
        return handle.disconnect

    def disconnect(self, key: str) -> None:
        """Disconnect the stream for ``key``; no-op when none is registered."""
        handle = self._handles.get(key)
        if handle is not None:
            handle.disconnect()

    def disconnect_all(self) -> None:
        for handle in list(self._handles.values()):
            handle.disconnect()

    def is_active(self, key: str) -> bool:
        return key in self._handles

    def get_handle(self, key: str) -> StreamHandle | None:
        return self._handles.get(key)

    def active_keys(self) -> list[str]:
        return list(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    async def aclose(self) -> None:
        self.disconnect_all()
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    def _release(self, handle: StreamHandle) -> None:
        if self._handles.get(handle.key) is handle:
            del self._handles[handle.key]

    async def _run(self, handle: StreamHandle, endpoint: str, params: dict[str, Any] | None, body: Any) -> None:
        key = handle.key
        try:
            token = await self.credentials.get_token()
        except Exception as e:
            logger.warning(f"Credential provider failed for push stream {key}: {describe_exception(e)}")
            token = None
        if handle.closed:
            return
        if not token:
            self._fail(handle, StreamSetupError(key, "No credential available for push stream"))
            return

        streams = self.settings.streams
        query: dict[str, Any] = {streams.token_param: token}
        if self.settings.anon_key:
            query[streams.apikey_param] = self.settings.anon_key
        if params:
            query.update(params)
        headers = {"Accept": streams.accept}
        method = "GET"
        extra: dict[str, Any] = {}
        if body is not None:
            # Request-scoped streams (POST) can carry the bearer header as well
            method = "POST"
            headers["Authorization"] = f"Bearer {token}"
            headers["Content-Type"] = "application/json"
            extra["content"] = json.dumps(body)

        try:
            async with self._client().stream(
                method, self.build_url(endpoint), params=query, headers=headers, **extra
            ) as response:
                if handle.closed:
                    return
                if not response.is_success:
                    await response.aread()
                    error = classify_error(_parse_body(response), response.status_code, response.reason_phrase)
                    self._fail(handle, StreamSetupError(key, error.message, status_code=response.status_code))
                    return

                handle.mark_open()
                logger.info(f"Push stream open: {key}")
                parser = SSEEventParser()
                async for line in response.aiter_lines():
                    for event in parser.feed_line(line):
                        if not self._dispatch(handle, event):
                            return
                    if handle.closed:
                        return
                for event in parser.flush():
                    if not self._dispatch(handle, event):
                        return
            self._finish(handle, "stream ended")
        except asyncio.CancelledError:
            raise
        except httpx.HTTPError as e:
            message = describe_exception(e)
            if handle.state == StreamState.OPEN:
                self._fail(handle, StreamTransportError(key, message))
            else:
                self._fail(handle, StreamSetupError(key, message))
        except Exception as e:
            logger.exception(f"Unexpected push stream failure for {key}")
            self._fail(handle, StreamTransportError(key, describe_exception(e)))

    def _dispatch(self, handle: StreamHandle, event: SSEEvent) -> bool:
        """Deliver one frame; False when the frame closes the stream."""
        close_event = self.settings.streams.close_event
        if event.event == close_event:
            self._finish(handle, "closed by remote")
            return False
        if not event.data.strip():
            # Heartbeats and other named events without data
            logger.debug(f"Push stream {handle.key} skipped empty {event.event or 'message'} event")
            return True
        try:
            payload = json.loads(event.data)
        except json.JSONDecodeError as e:
            logger.warning(f"Push stream {handle.key} received undecodable frame: {e}")
            handle.emit_error(
                StreamMessageError(handle.key, f"Failed to parse stream message: {e}", raw=event.data)
            )
            return True
        if isinstance(payload, dict) and payload.get("type") == close_event:
            self._finish(handle, "closed by remote")
            return False
        handle.emit_message(payload)
        return not handle.closed

    def _fail(self, handle: StreamHandle, error: StreamSetupError | StreamTransportError) -> None:
        logger.warning(f"Push stream {handle.key} failed: {error.message}")
        handle.emit_error(error)
        handle.terminate()

    def _finish(self, handle: StreamHandle, reason: str) -> None:
        logger.info(f"Push stream {handle.key} closed: {reason}")
        handle.emit_close()
        handle.terminate()


def _parse_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text
