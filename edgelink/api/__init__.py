"""Request pipeline, result contract and client lifecycle."""

from edgelink.api.types import (
    EMPTY_BODY,
    NETWORK_ERROR,
    ApiError,
    ApiResponse,
    FormPayload,
    RequestOptions,
)
from edgelink.api.errors import classify_error
from edgelink.api.credentials import (
    AnonymousProvider,
    CallableTokenProvider,
    CredentialProvider,
    SessionTokenProvider,
    StaticTokenProvider,
)
from edgelink.api.client import ApiClient
from edgelink.api.dispatcher import ActionDispatcher, ActionEnvelope, result_boundary
from edgelink.api.runtime import api, get_api_client, initialize_api_client, reset_api_client

__all__ = [
    "EMPTY_BODY",
    "NETWORK_ERROR",
    "ActionDispatcher",
    "ActionEnvelope",
    "AnonymousProvider",
    "ApiClient",
    "ApiError",
    "ApiResponse",
    "CallableTokenProvider",
    "CredentialProvider",
    "FormPayload",
    "RequestOptions",
    "SessionTokenProvider",
    "StaticTokenProvider",
    "api",
    "classify_error",
    "get_api_client",
    "initialize_api_client",
    "reset_api_client",
    "result_boundary",
]
