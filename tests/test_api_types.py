import httpx
import pytest

from edgelink.api.types import EMPTY_BODY, NETWORK_ERROR, ApiError, ApiResponse, FormPayload, RequestOptions


def test_response_cannot_carry_data_and_error():
    with pytest.raises(ValueError):
        ApiResponse(status=200, data={"id": 1}, error=ApiError(code="X", message="Y"))


def test_success_maps_missing_data_to_empty_body():
    result = ApiResponse.success(200, None)
    assert result.ok
    assert result.data == EMPTY_BODY
    assert result.to_dict() == {"status": 200, "data": EMPTY_BODY}


def test_network_failure_shape():
    result = ApiResponse.network_failure("", "TIMEOUT")
    assert result.status == 0
    assert result.error.code == NETWORK_ERROR
    assert result.error.message == "Network error"
    assert result.error.details == {"cause": "TIMEOUT"}
    assert ApiResponse.network_failure("down").error.details is None


@pytest.mark.asyncio
async def test_json_null_success_body_still_populates_data(make_client):
    client, _ = make_client(
        httpx.Response(200, content=b"null", headers={"content-type": "application/json"})
    )
    result = await client.get("profile")
    assert result.status == 200
    assert result.error is None
    assert result.data == EMPTY_BODY
    await client.aclose()


def test_request_options_reject_body_with_form():
    with pytest.raises(ValueError):
        RequestOptions(method="POST", body={"a": 1}, form=FormPayload())


def test_request_options_normalize_method():
    assert RequestOptions(method="patch").method == "PATCH"
