"""Current-user and profile endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from edgelink.api.dispatcher import result_boundary
from edgelink.api.types import ApiResponse, RequestOptions

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient


class UserApiClient:
    def __init__(self, client: ApiClient):
        self.client = client

    @result_boundary
    async def get_me(self, token: str | None = None) -> ApiResponse[Any]:
        return await self.client.get("me", RequestOptions(token=token))

    @result_boundary
    async def get_profile(self, user_id: str) -> ApiResponse[Any]:
        return await self.client.get(f"profile/{user_id}")

    @result_boundary
    async def update_profile(self, updates: dict[str, Any], token: str | None = None) -> ApiResponse[Any]:
        return await self.client.put("profile", updates, RequestOptions(token=token))
