import json

import httpx

from edgelink.utils.exceptions import (
    ConfigurationError,
    ErrorCategory,
    SessionRequiredError,
    StreamMessageError,
    StreamSetupError,
    classify_exception,
    describe_exception,
    redact_headers,
    sanitize_error_message,
)


def test_session_required_error_shape():
    err = SessionRequiredError("Session expired", endpoint="chat")
    assert err.code == "AUTH_REQUIRED"
    assert err.category == ErrorCategory.SESSION
    assert err.details["endpoint"] == "chat"
    assert "Session expired" in str(err)


def test_configuration_error_to_dict():
    err = ConfigurationError("missing base url", setting="base_url")
    data = err.to_dict()
    assert data["category"] == ErrorCategory.CONFIGURATION.value
    assert data["message"] == "missing base url"


def test_stream_errors_carry_key():
    setup = StreamSetupError("notifications:u1", "denied", status_code=401)
    assert setup.key == "notifications:u1"
    assert setup.status_code == 401
    msg = StreamMessageError("k", "bad frame", raw="{not json")
    assert msg.raw == "{not json"


def test_sanitize_error_message_redacts_tokens():
    text = sanitize_error_message("failed with Authorization: Bearer abc.def.ghi and apikey=secret123")
    assert "abc.def.ghi" not in text
    assert "secret123" not in text


def test_redact_headers():
    out = redact_headers({"Authorization": "Bearer tok", "apikey": "anon-key-123", "X-Other": "1"})
    assert out["Authorization"] == "Bearer [REDACTED]"
    assert out["apikey"] == "anon-k..."
    assert out["X-Other"] == "1"


def test_classify_exception():
    assert classify_exception(httpx.ConnectTimeout("slow"))[0] == "TIMEOUT"
    assert classify_exception(httpx.ConnectError("refused"))[1] == ErrorCategory.CONNECTIVITY
    assert classify_exception(json.JSONDecodeError("x", "doc", 0))[0] == "JSON_PARSE_ERROR"
    assert classify_exception(SessionRequiredError())[0] == "AUTH_REQUIRED"


def test_describe_exception_never_empty():
    assert describe_exception(None) == "Network error"
    assert describe_exception(RuntimeError()) == "RuntimeError"
    assert describe_exception(RuntimeError("Failed to fetch")) == "Failed to fetch"
