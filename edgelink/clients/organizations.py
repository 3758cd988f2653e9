"""Organization, membership and invitation endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from edgelink.api.dispatcher import result_boundary
from edgelink.api.types import ApiError, ApiResponse, RequestOptions

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient

BASE = "organizations"


def _with_default(response: ApiResponse[Any], default: Any) -> ApiResponse[Any]:
    """Replace an empty successful body with the documented default shape."""
    if response.ok and not response.data:
        return ApiResponse.success(response.status, default)
    return response


class OrganizationApiClient:
    def __init__(self, client: ApiClient):
        self.client = client

    @result_boundary
    async def create_organization(self, name: str, visibility: str = "private") -> ApiResponse[Any]:
        return await self.client.post(BASE, {"name": name, "visibility": visibility})

    @result_boundary
    async def update_organization(self, org_id: str, updates: dict[str, Any]) -> ApiResponse[Any]:
        return await self.client.put(f"{BASE}/{org_id}", updates)

    @result_boundary
    async def list_user_organizations(self, page: int | None = None, limit: int | None = None) -> ApiResponse[Any]:
        params = {k: v for k, v in (("page", page), ("limit", limit)) if v is not None}
        response = await self.client.get(BASE, RequestOptions(params=params or None))
        if not response.ok:
            return response
        data = response.data if isinstance(response.data, dict) else {}
        return ApiResponse.success(
            response.status,
            {
                "organizations": data.get("organizations") or [],
                "totalCount": data.get("totalCount") or 0,
            },
        )

    @result_boundary
    async def get_organization_details(self, org_id: str) -> ApiResponse[Any]:
        return await self.client.get(f"{BASE}/{org_id}")

    @result_boundary
    async def delete_organization(self, org_id: str) -> ApiResponse[Any]:
        return await self.client.delete(f"{BASE}/{org_id}")

    # Members

    @result_boundary
    async def get_organization_members(self, org_id: str) -> ApiResponse[Any]:
        return _with_default(await self.client.get(f"{BASE}/{org_id}/members"), [])

    @result_boundary
    async def update_member_role(self, membership_id: str, role: str) -> ApiResponse[Any]:
        return await self.client.put(f"{BASE}/members/{membership_id}/role", {"role": role})

    @result_boundary
    async def remove_member(self, membership_id: str) -> ApiResponse[Any]:
        return await self.client.delete(f"{BASE}/members/{membership_id}")

    @result_boundary
    async def leave_organization(self, org_id: str) -> ApiResponse[Any]:
        return await self.client.delete(f"{BASE}/{org_id}/members/leave")

    @result_boundary
    async def approve_join_request(self, membership_id: str) -> ApiResponse[Any]:
        return await self.client.put(f"{BASE}/members/{membership_id}/status", {"status": "active"})

    @result_boundary
    async def deny_join_request(self, membership_id: str) -> ApiResponse[Any]:
        return await self.client.put(f"{BASE}/members/{membership_id}/status", {"status": "removed"})

    @result_boundary
    async def request_to_join(self, org_id: str) -> ApiResponse[Any]:
        return await self.client.post(f"{BASE}/{org_id}/requests", {})

    # Invites

    @result_boundary
    async def invite_user_by_email(self, org_id: str, email: str, role: str) -> ApiResponse[Any]:
        return await self.client.post(f"{BASE}/{org_id}/invites", {"email": email, "role": role})

    @result_boundary
    async def invite_user_by_id(self, org_id: str, user_id: str, role: str) -> ApiResponse[Any]:
        return await self.client.post(f"{BASE}/{org_id}/invites", {"invitedUserId": user_id, "role": role})

    @result_boundary
    async def accept_invite(self, invite_token: str) -> ApiResponse[Any]:
        if not invite_token:
            return ApiResponse.failure(400, ApiError(code="VALIDATION_ERROR", message="Invite token is required"))
        return await self.client.post(f"{BASE}/invites/{invite_token}/accept", {})

    @result_boundary
    async def decline_invite(self, invite_token: str) -> ApiResponse[Any]:
        if not invite_token:
            return ApiResponse.failure(400, ApiError(code="VALIDATION_ERROR", message="Invite token is required"))
        return await self.client.post(f"{BASE}/invites/{invite_token}/decline", {})

    @result_boundary
    async def cancel_invite(self, org_id: str, invite_id: str) -> ApiResponse[Any]:
        return await self.client.delete(f"{BASE}/{org_id}/invites/{invite_id}")

    @result_boundary
    async def get_invite_details(self, invite_token: str) -> ApiResponse[Any]:
        return await self.client.get(f"{BASE}/invites/{invite_token}/details")

    @result_boundary
    async def get_pending_org_actions(self, org_id: str) -> ApiResponse[Any]:
        response = await self.client.get(f"{BASE}/{org_id}/pending")
        if not response.ok:
            return response
        data = response.data if isinstance(response.data, dict) else {}
        return ApiResponse.success(
            response.status,
            {"invites": data.get("invites") or [], "requests": data.get("requests") or []},
        )
