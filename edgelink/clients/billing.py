"""Subscription and billing endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from edgelink.api.dispatcher import result_boundary
from edgelink.api.types import ApiResponse, RequestOptions

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient

BASE = "api-subscriptions"


class BillingApiClient:
    def __init__(self, client: ApiClient):
        self.client = client

    @result_boundary
    async def create_checkout_session(
        self,
        price_id: str,
        is_test_mode: bool,
        success_url: str,
        cancel_url: str,
        token: str | None = None,
    ) -> ApiResponse[Any]:
        body = {
            "priceId": price_id,
            "isTestMode": is_test_mode,
            "successUrl": success_url,
            "cancelUrl": cancel_url,
        }
        return await self.client.post(f"{BASE}/checkout", body, RequestOptions(token=token))

    @result_boundary
    async def create_portal_session(
        self,
        is_test_mode: bool,
        return_url: str,
        token: str | None = None,
    ) -> ApiResponse[Any]:
        body = {"isTestMode": is_test_mode, "returnUrl": return_url}
        return await self.client.post(f"{BASE}/billing-portal", body, RequestOptions(token=token))

    @result_boundary
    async def get_subscription_plans(self, token: str | None = None) -> ApiResponse[Any]:
        return await self.client.get(f"{BASE}/plans", RequestOptions(token=token))

    @result_boundary
    async def get_user_subscription(self, token: str | None = None) -> ApiResponse[Any]:
        return await self.client.get(f"{BASE}/current", RequestOptions(token=token))

    @result_boundary
    async def cancel_subscription(self, subscription_id: str, token: str | None = None) -> ApiResponse[Any]:
        return await self.client.post(f"{BASE}/{subscription_id}/cancel", {}, RequestOptions(token=token))

    @result_boundary
    async def resume_subscription(self, subscription_id: str, token: str | None = None) -> ApiResponse[Any]:
        return await self.client.post(f"{BASE}/{subscription_id}/resume", {}, RequestOptions(token=token))

    @result_boundary
    async def get_usage_metrics(self, metric: str, token: str | None = None) -> ApiResponse[Any]:
        return await self.client.get(f"{BASE}/usage/{metric}", RequestOptions(token=token))
