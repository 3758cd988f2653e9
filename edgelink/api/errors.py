"""Error classifier: maps any response body and status to one ApiError.

The remote is not a single well-behaved service. Operations answer with
``{code, message}`` objects, ``{error: "..."}`` objects, plain text or nothing
at all, so classification is an ordered chain of shape rules where the first
match wins and the last rule always matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import httpx

from edgelink.api.types import ApiError

UNKNOWN_ERROR_MESSAGE = "Unknown API Error"
SESSION_EXPIRED_CODE = "AUTH_REQUIRED"
UNAUTHENTICATED_STATUS = 401

_MESSAGE_FIELDS = ("message", "error_description", "detail", "msg")


def reason_phrase(status: int, explicit: str | None = None) -> str:
    """Reason phrase for a status: the response's own, then the standard one, then a generic string."""
    if explicit and explicit.strip():
        return explicit.strip()
    phrase = httpx.codes.get_reason_phrase(status) if status else ""
    return phrase or UNKNOWN_ERROR_MESSAGE


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _message_field(body: dict[str, Any]) -> str | None:
    for key in _MESSAGE_FIELDS:
        text = _non_empty_str(body.get(key))
        if text:
            return text
    nested = body.get("error")
    if isinstance(nested, dict):
        return _non_empty_str(nested.get("message"))
    return None


def _has_message_field(body: dict[str, Any]) -> bool:
    if any(key in body for key in _MESSAGE_FIELDS):
        return True
    nested = body.get("error")
    return isinstance(nested, dict) and "message" in nested


@dataclass(frozen=True)
class ErrorRule:
    """One rung of the classification ladder."""
    name: str
    matches: Callable[[Any], bool]
    build: Callable[[Any, int, str], ApiError]


def _build_code_and_message(body: dict[str, Any], status: int, phrase: str) -> ApiError:
    message = body.get("message")
    text = message if isinstance(message, str) and message.strip() else phrase
    return ApiError(code=str(body.get("code")), message=text, details=body.get("details"))


def _build_error_string(body: dict[str, Any], status: int, phrase: str) -> ApiError:
    return ApiError(code=str(status), message=body["error"])


def _build_message_field(body: dict[str, Any], status: int, phrase: str) -> ApiError:
    return ApiError(code=str(status), message=_message_field(body) or phrase)


def _build_text(body: str, status: int, phrase: str) -> ApiError:
    return ApiError(code=str(status), message=body)


def _build_fallback(body: Any, status: int, phrase: str) -> ApiError:
    return ApiError(code=str(status), message=phrase)


ERROR_RULES: tuple[ErrorRule, ...] = (
    ErrorRule(
        name="code_and_message",
        matches=lambda body: isinstance(body, dict)
        and body.get("code") not in (None, "")
        and "message" in body,
        build=_build_code_and_message,
    ),
    ErrorRule(
        name="error_string",
        matches=lambda body: isinstance(body, dict) and _non_empty_str(body.get("error")) is not None,
        build=_build_error_string,
    ),
    ErrorRule(
        name="message_field",
        matches=lambda body: isinstance(body, dict) and _has_message_field(body),
        build=_build_message_field,
    ),
    ErrorRule(
        name="text",
        matches=lambda body: _non_empty_str(body) is not None,
        build=_build_text,
    ),
    ErrorRule(
        name="fallback",
        matches=lambda body: True,
        build=_build_fallback,
    ),
)


def match_rule(body: Any) -> ErrorRule:
    """First rule whose shape predicate accepts the body."""
    for rule in ERROR_RULES:
        if rule.matches(body):
            return rule
    return ERROR_RULES[-1]


def classify_error(body: Any, status: int, explicit_reason: str | None = None) -> ApiError:
    """
    Map an arbitrary response body and status to one ApiError.

    Pure and total: never raises, always returns a populated code and a
    non-empty message.
    """
    phrase = reason_phrase(status, explicit_reason)
    return match_rule(body).build(body, status, phrase)


def is_session_expired(body: Any, status: int, is_public: bool) -> bool:
    """True when a protected call must re-authenticate."""
    if is_public or status != UNAUTHENTICATED_STATUS:
        return False
    return isinstance(body, dict) and body.get("code") == SESSION_EXPIRED_CODE


def session_message(body: Any) -> str:
    if isinstance(body, dict):
        text = _non_empty_str(body.get("message"))
        if text:
            return text
    return "Authentication required"
