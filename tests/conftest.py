"""Pytest hooks and fixtures."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from edgelink.api.client import ApiClient
from edgelink.api.runtime import reset_api_client
from edgelink.config.schema import Settings

BASE_URL = "https://proj.example.co"
ANON_KEY = "anon-key-123"
FUNCTIONS_URL = f"{BASE_URL}/functions/v1"


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    """Keep config, logs and the process-wide client out of the real home dir."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("EDGELINK_BASE_URL", "EDGELINK_ANON_KEY", "EDGELINK_TOKEN", "EDGELINK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_api_client()
    yield
    reset_api_client()


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=BASE_URL, anon_key=ANON_KEY)


class Recorder:
    """MockTransport handler that records requests and replays a canned reply."""

    def __init__(self, reply: Callable[[httpx.Request], httpx.Response] | httpx.Response | None = None):
        self.requests: list[httpx.Request] = []
        self._reply = reply

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._reply is None:
            return httpx.Response(200, json={})
        if isinstance(self._reply, httpx.Response):
            # Fresh response per request; a Response cannot be consumed twice
            return httpx.Response(
                self._reply.status_code,
                headers=self._reply.headers,
                content=self._reply.content,
            )
        return self._reply(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def make_client(settings):
    """Build an ApiClient over an httpx.MockTransport."""
    def _make(reply=None, credentials: Any = None) -> tuple[ApiClient, Recorder]:
        recorder = Recorder(reply)
        client = ApiClient(settings, credentials, transport=httpx.MockTransport(recorder))
        return client, recorder

    return _make
