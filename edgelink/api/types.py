"""Result contract and request options shared by every client call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

NETWORK_ERROR = "NETWORK_ERROR"
# Data value for successful responses that carry no body (204, empty text).
EMPTY_BODY = ""


@dataclass
class ApiError:
    """Normalized error record; code is always set and message is never empty."""
    code: str
    message: str
    details: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            out["details"] = self.details
        return out


@dataclass
class ApiResponse(Generic[T]):
    """
    Outcome of one client call.

    Exactly one of ``data`` / ``error`` is meaningful. ``status`` is the HTTP
    status, or 0 when the remote was never reached.
    """
    status: int
    data: T | None = None
    error: ApiError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.data is not None:
            raise ValueError("ApiResponse cannot carry both data and error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, status: int, data: Any) -> ApiResponse[Any]:
        return cls(status=status, data=EMPTY_BODY if data is None else data)

    @classmethod
    def failure(cls, status: int, error: ApiError) -> ApiResponse[Any]:
        return cls(status=status, error=error)

    @classmethod
    def network_failure(cls, message: str, cause: str | None = None) -> ApiResponse[Any]:
        details = {"cause": cause} if cause else None
        return cls(status=0, error=ApiError(code=NETWORK_ERROR, message=message or "Network error", details=details))

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"status": self.status, "error": self.error.to_dict()}
        return {"status": self.status, "data": self.data}


@dataclass
class FormPayload:
    """Multipart form body: plain fields plus optional file parts.

    ``files`` maps a field name to an httpx file tuple
    ``(filename, content, content_type)``.
    """
    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, tuple[str, Any, str]] = field(default_factory=dict)

    def add_field(self, name: str, value: Any) -> None:
        if value is None:
            return
        self.fields[name] = value if isinstance(value, str) else str(value)

    def add_file(self, name: str, filename: str, content: Any, content_type: str = "application/octet-stream") -> None:
        self.files[name] = (filename, content, content_type)


@dataclass
class RequestOptions:
    """Per-call options for the request pipeline."""
    method: str = "GET"
    token: str | None = None
    is_public: bool = False
    headers: dict[str, str] | None = None
    body: Any = None
    form: FormPayload | None = None
    params: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.body is not None and self.form is not None:
            raise ValueError("RequestOptions accepts either a JSON body or a multipart form, not both")
