"""
Exception hierarchy and error handling utilities for edgelink.

Provides:
- Custom exception classes with error codes
- Error categorization (connectivity, remote rejection, session, configuration, stream)
- Safe error message formatting (no credential leak into logs)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(Enum):
    """Error categories for classification."""
    CONNECTIVITY = "connectivity"
    REMOTE = "remote"
    SESSION = "session"
    CONFIGURATION = "configuration"
    STREAM = "stream"
    VALIDATION = "validation"
    TIMEOUT = "timeout"


class EdgeLinkError(Exception):
    """Base exception for all edgelink errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.REMOTE,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(EdgeLinkError):
    """Client misuse: double initialization, use before initialization, missing settings."""

    def __init__(self, message: str, setting: str | None = None):
        details = {"setting": setting} if setting else {}
        super().__init__(message, code="CONFIGURATION_ERROR", category=ErrorCategory.CONFIGURATION, details=details)


class SessionRequiredError(EdgeLinkError):
    """
    The session-required signal.

    Raised (never returned) when a protected call is rejected with 401 and the
    remote marks it AUTH_REQUIRED, so a single top-level handler can
    re-authenticate and replay the caller's intent.
    """

    def __init__(self, message: str = "Authentication required", endpoint: str | None = None):
        details = {"endpoint": endpoint} if endpoint else {}
        super().__init__(message, code="AUTH_REQUIRED", category=ErrorCategory.SESSION, details=details)


class StreamError(EdgeLinkError):
    """Base for push-stream failures delivered through on_error callbacks."""

    def __init__(self, key: str, message: str, code: str = "STREAM_ERROR", details: dict[str, Any] | None = None):
        merged = {"key": key}
        merged.update(details or {})
        super().__init__(message, code=code, category=ErrorCategory.STREAM, details=merged)
        self.key = key


class StreamSetupError(StreamError):
    """The stream could not be established (no credential, rejected open)."""

    def __init__(self, key: str, message: str, status_code: int | None = None):
        super().__init__(key, message, code="STREAM_SETUP_ERROR", details={"status_code": status_code})
        self.status_code = status_code


class StreamTransportError(StreamError):
    """The underlying transport failed after the stream was opened."""

    def __init__(self, key: str, message: str):
        super().__init__(key, message, code="STREAM_TRANSPORT_ERROR")


class StreamMessageError(StreamError):
    """One inbound frame could not be decoded; the stream stays open."""

    def __init__(self, key: str, message: str, raw: str | None = None):
        super().__init__(key, message, code="STREAM_MESSAGE_ERROR", details={"raw": raw})
        self.raw = raw


_SENSITIVE_PATTERNS = [
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"(api[_-]?key|apikey|token|secret|password|authorization)[=:]\s*['\"]?([^\s'\"&]+)['\"]?", re.IGNORECASE),
    re.compile(r"eyJ[a-zA-Z0-9_-]{8,}\.[a-zA-Z0-9_-]{8,}\.[a-zA-Z0-9_-]+"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials from messages before they reach logs."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy of request headers that is safe to log."""
    out: dict[str, str] = {}
    for key, value in headers.items():
        lowered = key.lower()
        if lowered == "authorization":
            out[key] = "Bearer [REDACTED]" if value else value
        elif lowered == "apikey":
            out[key] = f"{value[:6]}..." if value else value
        else:
            out[key] = value
    return out


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory]:
    """
    Classify an exception raised below the request pipeline.

    Returns:
        Tuple of (error_code, category)
    """
    if isinstance(exc, EdgeLinkError):
        return exc.code, exc.category

    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.TransportError, ConnectionError, OSError)):
        return "CONNECTION_ERROR", ErrorCategory.CONNECTIVITY

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, (ValueError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    return "INTERNAL_ERROR", ErrorCategory.CONNECTIVITY


def describe_exception(exc: BaseException | None) -> str:
    """Human message for an exception; never empty."""
    if exc is None:
        return "Network error"
    text = str(exc).strip()
    if text:
        return sanitize_error_message(text)
    return type(exc).__name__
