import httpx
import pytest


@pytest.mark.asyncio
async def test_checkout_and_portal(make_client):
    client, rec = make_client(httpx.Response(200, json={"sessionUrl": "https://pay"}))
    result = await client.billing.create_checkout_session("price_1", True, "https://ok", "https://cancel")
    assert result.data == {"sessionUrl": "https://pay"}
    assert rec.last.url.path.endswith("/api-subscriptions/checkout")
    assert rec.last_json() == {
        "priceId": "price_1",
        "isTestMode": True,
        "successUrl": "https://ok",
        "cancelUrl": "https://cancel",
    }

    await client.billing.create_portal_session(False, "https://back")
    assert rec.last.url.path.endswith("/api-subscriptions/billing-portal")
    assert rec.last_json() == {"isTestMode": False, "returnUrl": "https://back"}
    await client.aclose()


@pytest.mark.asyncio
async def test_subscription_lifecycle_paths(make_client):
    client, rec = make_client()
    await client.billing.get_subscription_plans()
    assert rec.last.url.path.endswith("/api-subscriptions/plans")
    await client.billing.get_user_subscription()
    assert rec.last.url.path.endswith("/api-subscriptions/current")
    await client.billing.cancel_subscription("sub_1")
    assert rec.last.url.path.endswith("/api-subscriptions/sub_1/cancel")
    assert rec.last_json() == {}
    await client.billing.resume_subscription("sub_1")
    assert rec.last.url.path.endswith("/api-subscriptions/sub_1/resume")
    await client.billing.get_usage_metrics("tokens")
    assert rec.last.url.path.endswith("/api-subscriptions/usage/tokens")
    await client.aclose()


@pytest.mark.asyncio
async def test_billing_error_is_classified(make_client):
    client, _ = make_client(httpx.Response(402, json={"error": "Payment required"}))
    result = await client.billing.get_user_subscription()
    assert result.status == 402
    assert result.error.message == "Payment required"
    await client.aclose()
