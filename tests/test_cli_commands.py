import json

import httpx
from loguru import logger
from typer.testing import CliRunner

from edgelink.api.client import ApiClient
from edgelink.cli import commands
from edgelink.cli.commands import app
from edgelink.cli.logging_utils import get_log_dir

from tests.conftest import ANON_KEY, BASE_URL

runner = CliRunner()


def _configure(monkeypatch, handler):
    monkeypatch.setenv("EDGELINK_BASE_URL", BASE_URL)
    monkeypatch.setenv("EDGELINK_ANON_KEY", ANON_KEY)
    seen = []

    def recording(request):
        seen.append(request)
        return handler(request)

    def make_client(settings, token):
        return ApiClient(settings, token or settings.token or None, transport=httpx.MockTransport(recording))

    monkeypatch.setattr(commands, "_make_client", make_client)
    return seen


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "edgelink v" in result.stdout


def test_call_dispatches_envelope(monkeypatch):
    seen = _configure(monkeypatch, lambda r: httpx.Response(200, json=[{"id": "p1"}]))
    result = runner.invoke(app, ["call", "getProjectDetails", "--payload", '{"projectId": "p1"}', "--token", "T"])
    assert result.exit_code == 0, result.stdout
    assert "status=200" in result.stdout
    assert json.loads(seen[0].content) == {"action": "getProjectDetails", "payload": {"projectId": "p1"}}
    assert seen[0].headers["authorization"] == "Bearer T"


def test_call_rejects_non_object_payload(monkeypatch):
    _configure(monkeypatch, lambda r: httpx.Response(200))
    result = runner.invoke(app, ["call", "listProjects", "--payload", "[1]"])
    assert result.exit_code == 2


def test_get_with_params_and_public(monkeypatch):
    monkeypatch.setenv("EDGELINK_TOKEN", "env-token")
    seen = _configure(monkeypatch, lambda r: httpx.Response(200, json={"ok": True}))
    result = runner.invoke(app, ["get", "ai-providers", "--public", "--param", "a=1"])
    assert result.exit_code == 0, result.stdout
    assert seen[0].url.params["a"] == "1"
    assert "authorization" not in seen[0].headers


def test_get_uses_env_token(monkeypatch):
    monkeypatch.setenv("EDGELINK_TOKEN", "env-token")
    seen = _configure(monkeypatch, lambda r: httpx.Response(200, json={}))
    result = runner.invoke(app, ["get", "me"])
    assert result.exit_code == 0, result.stdout
    assert seen[0].headers["authorization"] == "Bearer env-token"


def test_post_failure_exits_nonzero(monkeypatch):
    _configure(monkeypatch, lambda r: httpx.Response(400, json={"code": "X", "message": "Y"}))
    result = runner.invoke(app, ["post", "chat", "--body", '{"message": "hi"}'])
    assert result.exit_code == 1
    assert "code=X" in result.stdout


def test_session_required_exits_nonzero(monkeypatch):
    _configure(monkeypatch, lambda r: httpx.Response(401, json={"code": "AUTH_REQUIRED", "message": "expired"}))
    result = runner.invoke(app, ["get", "me"])
    assert result.exit_code == 1
    assert "Session required" in result.stdout


def test_missing_configuration_exits_nonzero():
    result = runner.invoke(app, ["get", "me"])
    assert result.exit_code == 1
    assert "Configuration error" in result.stdout


def test_invalid_json_body(monkeypatch):
    _configure(monkeypatch, lambda r: httpx.Response(200))
    result = runner.invoke(app, ["post", "chat", "--body", "{oops"])
    assert result.exit_code == 2


def test_listen_prints_frames_until_close(monkeypatch):
    body = b'data: {"id": "n1"}\n\ndata: {"id": "n2"}\n\n'
    seen = _configure(monkeypatch, lambda r: httpx.Response(200, content=body))
    result = runner.invoke(app, ["listen", "notifications-stream", "--token", "T"])
    assert result.exit_code == 0, result.stdout
    assert '"n1"' in result.stdout
    assert "2 message(s) received" in result.stdout
    assert seen[0].url.params["token"] == "T"


def test_listen_setup_failure_exits_nonzero(monkeypatch):
    _configure(monkeypatch, lambda r: httpx.Response(401, json={"error": "Missing authentication token"}))
    result = runner.invoke(app, ["listen", "notifications-stream", "--token", "T"])
    assert result.exit_code == 1
    assert "Missing authentication token" in result.stdout


def test_config_show_masks_secrets(monkeypatch):
    monkeypatch.setenv("EDGELINK_BASE_URL", BASE_URL)
    monkeypatch.setenv("EDGELINK_ANON_KEY", "super-secret-anon-key")
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "super-secret-anon-key" not in result.stdout
    assert "functions/v1" in result.stdout


def test_quiet_run_still_writes_file_log(monkeypatch):
    _configure(monkeypatch, lambda r: httpx.Response(200, json={"id": "u1"}))
    result = runner.invoke(app, ["get", "profile"])
    assert result.exit_code == 0, result.stdout
    logger.complete()
    log_text = (get_log_dir() / "cli.log").read_text(encoding="utf-8")
    assert "Requesting GET" in log_text
    assert "Requesting GET" not in result.stdout


def test_file_log_honors_configured_level(monkeypatch):
    monkeypatch.setenv("EDGELINK_LOG_LEVEL", "WARNING")
    _configure(monkeypatch, lambda r: httpx.Response(404, json={"error": "gone"}))
    result = runner.invoke(app, ["get", "profile"])
    assert result.exit_code == 1
    logger.complete()
    log_text = (get_log_dir() / "cli.log").read_text(encoding="utf-8")
    assert "API error 404" in log_text
    assert "Requesting GET" not in log_text
