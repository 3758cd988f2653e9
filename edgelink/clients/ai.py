"""AI chat endpoints and the streaming chat path."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

from loguru import logger

from edgelink.api.dispatcher import result_boundary
from edgelink.api.types import ApiError, ApiResponse, RequestOptions
from edgelink.streaming.types import DisconnectFn, StreamCallbacks

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient

CHAT_STREAM_FRAME_TYPES = frozenset({"chat_start", "content_chunk", "chat_complete", "error"})


def _org_params(organization_id: str | None) -> dict[str, str] | None:
    return {"organizationId": organization_id} if organization_id else None


def _missing(field: str) -> ApiResponse[Any]:
    return ApiResponse.failure(400, ApiError(code="VALIDATION_ERROR", message=f"{field} is required"))


class AiApiClient:
    def __init__(self, client: ApiClient):
        self.client = client

    @result_boundary
    async def get_ai_providers(self) -> ApiResponse[Any]:
        return await self.client.get("ai-providers", RequestOptions(is_public=True))

    @result_boundary
    async def get_system_prompts(self) -> ApiResponse[Any]:
        return await self.client.get("system-prompts", RequestOptions(is_public=True))

    @result_boundary
    async def send_chat_message(self, data: Mapping[str, Any], token: str | None = None) -> ApiResponse[Any]:
        return await self.client.post("chat", dict(data), RequestOptions(token=token))

    @result_boundary
    async def get_chat_history(
        self,
        token: str | None = None,
        organization_id: str | None = None,
    ) -> ApiResponse[Any]:
        return await self.client.get(
            "chat-history",
            RequestOptions(token=token, params=_org_params(organization_id)),
        )

    @result_boundary
    async def get_chat_with_messages(
        self,
        chat_id: str,
        token: str | None = None,
        organization_id: str | None = None,
    ) -> ApiResponse[Any]:
        if not chat_id:
            return _missing("Chat ID")
        return await self.client.get(
            f"chat-details/{chat_id}",
            RequestOptions(token=token, params=_org_params(organization_id)),
        )

    @result_boundary
    async def delete_chat(
        self,
        chat_id: str,
        token: str | None = None,
        organization_id: str | None = None,
    ) -> ApiResponse[Any]:
        if not chat_id:
            return _missing("Chat ID")
        return await self.client.delete(
            f"chat/{chat_id}",
            RequestOptions(token=token, params=_org_params(organization_id)),
        )

    def stream_chat(
        self,
        data: Mapping[str, Any],
        on_frame: Callable[[dict[str, Any]], None],
        on_error: Callable[[Any], None],
        *,
        on_close: Callable[[], None] | None = None,
        key: str | None = None,
    ) -> DisconnectFn | None:
        """
        Post a chat request and receive the reply as push frames.

        Frames carry ``type`` of ``chat_start``, ``content_chunk``,
        ``chat_complete`` or ``error``. The stream closes after
        ``chat_complete`` or ``error``.
        """
        stream_key = key or f"chat:{data.get('chatId') or 'new'}"
        disconnect: DisconnectFn | None = None

        def handle(frame: Any) -> None:
            if not isinstance(frame, dict) or frame.get("type") not in CHAT_STREAM_FRAME_TYPES:
                logger.debug(f"Ignoring unrecognized chat frame on {stream_key}")
                return
            on_frame(frame)
            if frame["type"] in ("chat_complete", "error") and disconnect is not None:
                disconnect()

        disconnect = self.client.streams.connect(
            stream_key,
            StreamCallbacks(on_message=handle, on_error=on_error, on_close=on_close),
            endpoint="chat",
            body={**data, "stream": True},
        )
        return disconnect
