"""Request pipeline for the remote function endpoints.

Every outbound call is built here: URL composition, credential attachment,
dispatch, body parsing and classification into one ApiResponse contract.
Domain sub-clients and the push-stream manager hang off the same client.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

import httpx
from loguru import logger

from edgelink.api.credentials import CredentialProvider, as_provider
from edgelink.api.errors import classify_error, is_session_expired, session_message
from edgelink.api.types import EMPTY_BODY, ApiError, ApiResponse, FormPayload, RequestOptions
from edgelink.config.schema import Settings
from edgelink.utils.exceptions import (
    ConfigurationError,
    SessionRequiredError,
    classify_exception,
    describe_exception,
    redact_headers,
)

JSON_CONTENT_TYPE = "application/json"


class BodyParseError(ValueError):
    """Response arrived but its body could not be decoded."""


class ApiClient:
    """
    Authenticated client for one set of remote function endpoints.

    Configuration is fixed at construction. Callers either build one client
    at their composition root and pass it around, or go through
    ``edgelink.api.runtime`` for a process-wide instance.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: Any = None,
        *,
        http: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        missing = settings.missing_required()
        if missing:
            raise ConfigurationError(
                f"Base URL and anon key are required to construct ApiClient (missing: {', '.join(missing)})",
                setting=missing[0],
            )
        self.settings = settings
        self.credentials: CredentialProvider = as_provider(credentials)
        self.functions_url = settings.functions_url
        self._owns_http = http is None
        self._http = http or self._build_http(transport)
        logger.info(f"API client constructed with functions URL: {self.functions_url}")

        # Imported here: sub-clients and streams import back into edgelink.api
        from edgelink.streaming.manager import PushStreamManager
        from edgelink.clients import (
            AiApiClient,
            BillingApiClient,
            DialecticApiClient,
            NotificationApiClient,
            OrganizationApiClient,
            UserApiClient,
            WalletApiClient,
        )

        self.streams = PushStreamManager(settings, self.credentials, http=None if transport is None else self._http)
        self.ai = AiApiClient(self)
        self.billing = BillingApiClient(self)
        self.dialectic = DialecticApiClient(self)
        self.notifications = NotificationApiClient(self)
        self.organizations = OrganizationApiClient(self)
        self.users = UserApiClient(self)
        self.wallet = WalletApiClient(self)

    def _build_http(self, transport: httpx.AsyncBaseTransport | None) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {
            "follow_redirects": self.settings.http.follow_redirects,
            "headers": {"User-Agent": self.settings.http.user_agent},
        }
        if self.settings.http.timeout_seconds is not None:
            kwargs["timeout"] = httpx.Timeout(self.settings.http.timeout_seconds)
        if transport is not None:
            kwargs["transport"] = transport
        return httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Disconnect all streams and release the transport."""
        await self.streams.aclose()
        if self._owns_http:
            await self._http.aclose()

    def get_functions_url(self) -> str:
        return self.functions_url

    def build_url(self, endpoint: str) -> str:
        return f"{self.functions_url}/{endpoint.lstrip('/')}"

    async def _build_headers(self, options: RequestOptions) -> dict[str, str]:
        headers = httpx.Headers(options.headers or {})
        if options.form is None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        headers["apikey"] = self.settings.anon_key
        if not options.is_public and "authorization" not in headers:
            token = options.token or await self.credentials.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return dict(headers.items())

    @staticmethod
    def _body_kwargs(options: RequestOptions) -> dict[str, Any]:
        if options.form is not None:
            # Plain fields ride as file-less parts so the body is always multipart
            parts: list[tuple[str, Any]] = [(name, (None, value)) for name, value in options.form.fields.items()]
            parts.extend(options.form.files.items())
            return {"files": parts}
        if options.body is not None:
            return {"content": json.dumps(options.body)}
        return {}

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return EMPTY_BODY
        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE in content_type or "+json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                raise BodyParseError(str(e) or "Failed to parse response body") from e
        return response.text

    async def request(self, endpoint: str, options: RequestOptions | None = None) -> ApiResponse[Any]:
        """
        Issue one call and classify its outcome.

        Returns an ApiResponse for every runtime outcome. Raises
        SessionRequiredError when a protected call's session has expired.
        """
        options = options or RequestOptions()
        url = self.build_url(endpoint)
        try:
            headers = await self._build_headers(options)
            logger.info(f"Requesting {options.method} {url}")
            logger.debug(f"Request headers: {redact_headers(headers)}")
            try:
                response = await self._http.request(
                    options.method,
                    url,
                    headers=headers,
                    params=options.params,
                    **self._body_kwargs(options),
                )
            except httpx.HTTPError as e:
                message = describe_exception(e)
                logger.error(f"Network or fetch error on {endpoint}: {message}")
                return ApiResponse.network_failure(message, classify_exception(e)[0])

            logger.debug(f"Fetch completed: status={response.status_code} url={response.url}")
            try:
                body = self._parse_body(response)
            except BodyParseError as e:
                logger.error(f"Failed to parse response body from {endpoint}: {e}")
                return ApiResponse.failure(
                    response.status_code,
                    ApiError(code=str(response.status_code), message=f"Failed to parse response body: {e}"),
                )
            return self._classify(endpoint, response, body, options)
        except SessionRequiredError:
            raise
        except Exception as e:
            message = describe_exception(e)
            logger.error(f"Unexpected error on {endpoint}: {message}")
            return ApiResponse.network_failure(message, classify_exception(e)[0])

    def _classify(
        self,
        endpoint: str,
        response: httpx.Response,
        body: Any,
        options: RequestOptions,
    ) -> ApiResponse[Any]:
        status = response.status_code
        if is_session_expired(body, status, options.is_public):
            logger.warning(f"Received 401 AUTH_REQUIRED on {endpoint}; raising session-required signal")
            raise SessionRequiredError(session_message(body), endpoint=endpoint)

        if not response.is_success:
            error = classify_error(body, status, response.reason_phrase)
            logger.warning(f"API error {status} on {endpoint}: [{error.code}] {error.message}")
            return ApiResponse.failure(status, error)

        return ApiResponse.success(status, body)

    async def get(self, endpoint: str, options: RequestOptions | None = None) -> ApiResponse[Any]:
        return await self.request(endpoint, _with(options, method="GET"))

    async def post(self, endpoint: str, body: Any = None, options: RequestOptions | None = None) -> ApiResponse[Any]:
        return await self.request(endpoint, _with(options, method="POST", body=body))

    async def put(self, endpoint: str, body: Any = None, options: RequestOptions | None = None) -> ApiResponse[Any]:
        return await self.request(endpoint, _with(options, method="PUT", body=body))

    async def patch(self, endpoint: str, body: Any = None, options: RequestOptions | None = None) -> ApiResponse[Any]:
        return await self.request(endpoint, _with(options, method="PATCH", body=body))

    async def delete(self, endpoint: str, options: RequestOptions | None = None) -> ApiResponse[Any]:
        return await self.request(endpoint, _with(options, method="DELETE"))

    async def post_form(
        self,
        endpoint: str,
        form: FormPayload,
        options: RequestOptions | None = None,
    ) -> ApiResponse[Any]:
        return await self.request(endpoint, _with(options, method="POST", body=None, form=form))


def _with(options: RequestOptions | None, **changes: Any) -> RequestOptions:
    base = options or RequestOptions()
    return dataclasses.replace(base, **changes)
