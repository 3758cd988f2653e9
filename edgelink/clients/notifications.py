"""Notification feed: fetch, mark read, and the live push subscription."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from loguru import logger

from edgelink.api.dispatcher import result_boundary
from edgelink.api.types import ApiResponse
from edgelink.streaming.types import DisconnectFn, StreamCallbacks
from edgelink.utils.exceptions import StreamError

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient

BASE = "notifications"


def stream_key(user_id: str) -> str:
    return f"notifications:{user_id}"


class NotificationApiClient:
    def __init__(self, client: ApiClient):
        self.client = client

    @result_boundary
    async def fetch_notifications(self) -> ApiResponse[Any]:
        response = await self.client.get(BASE)
        if response.ok and not response.data:
            return ApiResponse.success(response.status, [])
        return response

    @result_boundary
    async def mark_notification_read(self, notification_id: str) -> ApiResponse[Any]:
        return await self.client.put(f"{BASE}/{notification_id}", {"read": True})

    @result_boundary
    async def mark_all_notifications_as_read(self) -> ApiResponse[Any]:
        return await self.client.post(f"{BASE}/mark-all-read", {})

    def subscribe_to_notifications(
        self,
        user_id: str,
        on_notification: Callable[[dict[str, Any]], None],
        on_error: Callable[[StreamError], None] | None = None,
    ) -> DisconnectFn | None:
        """
        Subscribe to live notifications for ``user_id``.

        Re-subscribing for the same user replaces the previous stream.
        Frames without an ``id`` are dropped.
        """
        key = stream_key(user_id) if user_id else ""

        def handle(frame: Any) -> None:
            if isinstance(frame, dict) and frame.get("id"):
                on_notification(frame)
            else:
                logger.warning(f"Dropping notification frame without id on {key}")

        def report(error: StreamError) -> None:
            logger.error(f"Notification stream error for {key or '<blank>'}: {error.message}")
            if on_error is not None:
                on_error(error)

        return self.client.streams.connect(
            key,
            StreamCallbacks(on_message=handle, on_error=report),
            endpoint=self.client.settings.notifications_stream_endpoint,
        )

    def unsubscribe_from_notifications(self, user_id: str) -> None:
        self.client.streams.disconnect(stream_key(user_id))
