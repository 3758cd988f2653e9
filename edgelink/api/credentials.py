"""Credential providers: supply a short-lived bearer token on demand.

A provider never raises. Absence of a token is a valid outcome and the call
proceeds unauthenticated; the remote decides.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from loguru import logger

from edgelink.utils.exceptions import sanitize_error_message


@runtime_checkable
class CredentialProvider(Protocol):
    async def get_token(self) -> str | None: ...


class AnonymousProvider:
    """Provider for callers that never authenticate."""

    async def get_token(self) -> str | None:
        return None


class StaticTokenProvider:
    """Fixed token, e.g. from CLI flags or EDGELINK_TOKEN."""

    def __init__(self, token: str | None):
        self._token = (token or "").strip() or None

    async def get_token(self) -> str | None:
        return self._token


class CallableTokenProvider:
    """Wrap a sync or async callable returning a token (or None)."""

    def __init__(self, fn: Callable[[], str | None | Awaitable[str | None]]):
        self._fn = fn

    async def get_token(self) -> str | None:
        try:
            value = self._fn()
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.warning(f"Token callable failed, continuing without token: {sanitize_error_message(str(e))}")
            return None
        return _clean_token(value)


class SessionTokenProvider:
    """
    Read ``access_token`` from an auth session source.

    The source exposes ``get_session()`` (sync or async) returning either a
    session object, a dict, or ``{"data": {"session": ...}, "error": ...}``.
    The session is read-only from the client's point of view.
    """

    def __init__(self, source: Any):
        self._source = source

    async def get_token(self) -> str | None:
        try:
            result = self._source.get_session()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Error fetching session for token: {sanitize_error_message(str(e))}")
            return None
        session = _unwrap_session(result)
        if session is None:
            logger.debug("No active session; request proceeds without bearer token")
            return None
        if isinstance(session, dict):
            return _clean_token(session.get("access_token"))
        return _clean_token(getattr(session, "access_token", None))


def _unwrap_session(result: Any) -> Any:
    if isinstance(result, dict):
        if result.get("error"):
            logger.error(f"Session source reported error: {result.get('error')}")
            return None
        data = result.get("data")
        if isinstance(data, dict) and "session" in data:
            return data.get("session")
        if "session" in result:
            return result.get("session")
    return result


def _clean_token(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def as_provider(source: Any) -> CredentialProvider:
    """Coerce a token, callable, session source or provider into a provider."""
    if source is None:
        return AnonymousProvider()
    if isinstance(source, str):
        return StaticTokenProvider(source)
    if hasattr(source, "get_token"):
        return source
    if hasattr(source, "get_session"):
        return SessionTokenProvider(source)
    if callable(source):
        return CallableTokenProvider(source)
    raise TypeError(f"Unsupported credential source: {type(source).__name__}")
