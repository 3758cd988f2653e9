import pytest

from edgelink.api import runtime
from edgelink.api.runtime import api, get_api_client, initialize_api_client, reset_api_client
from edgelink.config.schema import Settings
from edgelink.utils.exceptions import ConfigurationError

from tests.conftest import ANON_KEY, BASE_URL


def test_get_before_initialize_raises():
    with pytest.raises(ConfigurationError):
        get_api_client()


def test_initialize_then_get_returns_same_instance(settings):
    client = initialize_api_client(settings)
    assert get_api_client() is client
    assert runtime.is_initialized()


def test_double_initialize_raises(settings):
    initialize_api_client(settings)
    with pytest.raises(ConfigurationError):
        initialize_api_client(settings)


def test_missing_configuration_raises():
    with pytest.raises(ConfigurationError):
        initialize_api_client(Settings(base_url="", anon_key=""))
    assert not runtime.is_initialized()


def test_overrides_and_environment(monkeypatch):
    monkeypatch.setenv("EDGELINK_BASE_URL", BASE_URL)
    client = initialize_api_client(anon_key=ANON_KEY)
    assert client.functions_url == f"{BASE_URL}/functions/v1"
    assert client.settings.anon_key == ANON_KEY


def test_reset_allows_reinitialize(settings):
    first = initialize_api_client(settings)
    reset_api_client()
    second = initialize_api_client(settings)
    assert first is not second


def test_facade_delegates_to_instance(settings):
    with pytest.raises(ConfigurationError):
        api.dialectic
    client = initialize_api_client(settings)
    assert api.dialectic is client.dialectic
    assert api.wallet is client.wallet
