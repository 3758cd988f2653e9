"""Token wallet endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from edgelink.api.dispatcher import result_boundary
from edgelink.api.types import ApiResponse, RequestOptions

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient


class WalletApiClient:
    def __init__(self, client: ApiClient):
        self.client = client

    @result_boundary
    async def get_wallet_info(self, organization_id: str | None = None) -> ApiResponse[Any]:
        params = {"organizationId": organization_id} if organization_id else None
        return await self.client.get("wallet-info", RequestOptions(params=params))

    @result_boundary
    async def get_wallet_transaction_history(
        self,
        organization_id: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> ApiResponse[Any]:
        params: dict[str, Any] = {}
        if organization_id:
            params["organizationId"] = organization_id
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        return await self.client.get("wallet-history", RequestOptions(params=params or None))

    @result_boundary
    async def initiate_token_purchase(self, request: dict[str, Any]) -> ApiResponse[Any]:
        return await self.client.post("initiate-payment", request)
