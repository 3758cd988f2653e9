"""Process-wide client lifecycle.

Applications that prefer explicit wiring construct ``ApiClient`` directly at
their composition root; everything else goes through initialize/get here.
"""

from __future__ import annotations

import threading
from typing import Any

from loguru import logger

from edgelink.api.client import ApiClient
from edgelink.config.schema import Settings
from edgelink.utils.exceptions import ConfigurationError

_lock = threading.RLock()
_instance: ApiClient | None = None


def initialize_api_client(
    settings: Settings | None = None,
    credentials: Any = None,
    **overrides: Any,
) -> ApiClient:
    """
    Create the process-wide client exactly once.

    Args:
        settings: Base settings; environment and defaults are used when omitted.
        credentials: Token string, provider, session source or callable.
        **overrides: Setting fields to override (e.g. ``base_url``, ``anon_key``).

    Raises:
        ConfigurationError: Already initialized, or base URL / anon key missing.
    """
    global _instance
    with _lock:
        if _instance is not None:
            raise ConfigurationError("ApiClient already initialized. Call reset_api_client() first.")
        resolved = settings or Settings()
        if overrides:
            resolved = resolved.model_copy(update=overrides)
        _instance = ApiClient(resolved, credentials)
        logger.info("ApiClient initialized")
        return _instance


def get_api_client() -> ApiClient:
    """Return the process-wide client; raises ConfigurationError before init."""
    with _lock:
        if _instance is None:
            raise ConfigurationError("ApiClient not initialized. Call initialize_api_client first.")
        return _instance


def reset_api_client() -> None:
    """Discard the process-wide client. Intended for tests."""
    global _instance
    with _lock:
        _instance = None


def is_initialized() -> bool:
    with _lock:
        return _instance is not None


class _ApiFacade:
    """Attribute access onto the initialized client's sub-clients."""

    def __getattr__(self, name: str) -> Any:
        return getattr(get_api_client(), name)

    def __repr__(self) -> str:
        return f"<api facade initialized={is_initialized()}>"


api = _ApiFacade()
