"""Tests for config file loading, key conversion and environment overrides."""

import json
from pathlib import Path

import pytest

from edgelink.config.loader import (
    camel_to_snake,
    convert_keys,
    get_config_path,
    load_config,
    save_config,
    snake_to_camel,
)
from edgelink.config.schema import Settings
from edgelink.utils.exceptions import ConfigurationError


def test_key_conversion() -> None:
    assert camel_to_snake("anonKey") == "anon_key"
    assert snake_to_camel("notifications_stream_endpoint") == "notificationsStreamEndpoint"
    assert convert_keys({"http": {"timeoutSeconds": 5}}) == {"http": {"timeout_seconds": 5}}


def test_default_path_is_under_home(tmp_path: Path) -> None:
    assert get_config_path() == tmp_path / ".edgelink" / "config.json"


def test_missing_file_falls_back_to_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("EDGELINK_BASE_URL", "https://env.example.co")
    monkeypatch.setenv("EDGELINK_HTTP__TIMEOUT_SECONDS", "12.5")
    settings = load_config(tmp_path / "absent.json")
    assert settings.base_url == "https://env.example.co"
    assert settings.http.timeout_seconds == 12.5
    assert settings.functions_url == "https://env.example.co/functions/v1"


def test_camel_case_file_is_loaded(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "baseUrl": "https://file.example.co/",
        "anonKey": "anon",
        "streams": {"tokenParam": "access_token"},
    }))
    settings = load_config(path)
    assert settings.base_url == "https://file.example.co/"
    assert settings.functions_url == "https://file.example.co/functions/v1"
    assert settings.streams.token_param == "access_token"
    assert settings.missing_required() == []


def test_environment_fills_fields_missing_from_file(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("EDGELINK_ANON_KEY", "from-env")
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"baseUrl": "https://file.example.co"}))
    settings = load_config(path)
    assert settings.anon_key == "from-env"


def test_invalid_file_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_config(path)
    path.write_text(json.dumps({"http": {"timeoutSeconds": "soon"}}))
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_save_then_load_keeps_values(tmp_path: Path) -> None:
    path = save_config(Settings(base_url="https://a.example", anon_key="k", token=""), tmp_path / "c.json")
    raw = json.loads(path.read_text())
    assert raw["baseUrl"] == "https://a.example"
    assert raw["http"]["followRedirects"] is True
    assert load_config(path).anon_key == "k"


def test_missing_required_reports_both() -> None:
    assert Settings().missing_required() == ["base_url", "anon_key"]


def test_save_config_never_writes_token(tmp_path) -> None:
    settings = Settings(base_url="https://a.example", anon_key="k", token="secret-bearer", log_level="DEBUG")
    path = save_config(settings, tmp_path / "c.json")
    text = path.read_text()
    assert "secret-bearer" not in text
    assert "token" not in json.loads(text)
    assert json.loads(text)["logLevel"] == "DEBUG"
    assert load_config(path).token == ""
