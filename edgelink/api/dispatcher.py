"""Action-envelope dispatch: many server operations behind one endpoint.

Every operation is posted as ``{"action": ..., "payload": ...}`` (or as a
multipart form with an ``action`` field when it carries files) to one fixed
multiplexing endpoint. The action string selects server-side behavior.
"""

from __future__ import annotations

import asyncio
import functools
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict

from edgelink.api.types import ApiResponse, FormPayload, RequestOptions
from edgelink.utils.exceptions import (
    ConfigurationError,
    SessionRequiredError,
    classify_exception,
    describe_exception,
)

if TYPE_CHECKING:
    from edgelink.api.client import ApiClient

F = TypeVar("F", bound=Callable[..., Awaitable[ApiResponse[Any]]])


class ActionEnvelope(BaseModel):
    """Wire envelope for the multiplexing endpoint."""
    model_config = ConfigDict(use_enum_values=True)

    action: str
    payload: dict[str, Any] | None = None

    def to_wire(self) -> dict[str, Any]:
        """JSON body; list-style operations omit ``payload`` entirely."""
        return self.model_dump(exclude_none=True)


def result_boundary(func: F) -> F:
    """
    Give a sub-client method the uniform failure contract.

    Exceptions escaping the pipeline become ``{status: 0, NETWORK_ERROR}``
    results. The session-required signal and configuration errors propagate.

    Usage:
        @result_boundary
        async def list_projects(self) -> ApiResponse[list[dict]]:
            ...
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> ApiResponse[Any]:
        try:
            return await func(*args, **kwargs)
        except (SessionRequiredError, ConfigurationError, asyncio.CancelledError):
            raise
        except Exception as e:
            message = describe_exception(e)
            logger.error(f"{func.__qualname__} failed before a response was produced: {message}")
            return ApiResponse.network_failure(message, classify_exception(e)[0])

    return wrapper  # type: ignore[return-value]


def _action_value(action: str | Enum) -> str:
    return action.value if isinstance(action, Enum) else str(action)


class ActionDispatcher:
    """Posts action envelopes to one multiplexing endpoint."""

    def __init__(self, client: ApiClient, endpoint: str):
        self.client = client
        self.endpoint = endpoint.lstrip("/")

    @result_boundary
    async def dispatch(
        self,
        action: str | Enum,
        payload: Mapping[str, Any] | None = None,
        options: RequestOptions | None = None,
    ) -> ApiResponse[Any]:
        envelope = ActionEnvelope(
            action=_action_value(action),
            payload=dict(payload) if payload is not None else None,
        )
        return await self.client.post(self.endpoint, envelope.to_wire(), options)

    @result_boundary
    async def dispatch_form(
        self,
        action: str | Enum,
        form: FormPayload,
        options: RequestOptions | None = None,
    ) -> ApiResponse[Any]:
        """Multipart variant for operations that carry a binary attachment."""
        parts = FormPayload(fields={"action": _action_value(action)}, files=dict(form.files))
        for name, value in form.fields.items():
            if name != "action":
                parts.fields[name] = value
        return await self.client.post_form(self.endpoint, parts, options)
