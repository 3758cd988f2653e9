"""Configuration schema using Pydantic.

The single data model for client settings, persisted to ~/.edgelink/config.json
and overridable through EDGELINK_* environment variables.
"""

from pydantic import BaseModel, Field, ConfigDict
from pydantic_settings import BaseSettings


class HttpConfig(BaseModel):
    """Transport settings for the request pipeline."""
    # None keeps httpx's own default timeout behavior
    timeout_seconds: float | None = None
    follow_redirects: bool = True
    user_agent: str = "edgelink"


class StreamConfig(BaseModel):
    """Push-stream settings."""
    token_param: str = "token"  # Push transport cannot carry headers; token goes in the query string
    apikey_param: str = "apikey"
    close_event: str = "close"
    accept: str = "text/event-stream"


class Settings(BaseSettings):
    """Root configuration for edgelink."""
    base_url: str = ""
    anon_key: str = ""
    functions_path: str = "functions/v1"
    multiplex_endpoint: str = "dialectic-service"
    notifications_stream_endpoint: str = "notifications-stream"
    token: str = ""  # Optional static bearer token for CLI use
    log_level: str = "INFO"
    http: HttpConfig = Field(default_factory=HttpConfig)
    streams: StreamConfig = Field(default_factory=StreamConfig)

    @property
    def functions_url(self) -> str:
        """Absolute base URL of the remote function endpoints."""
        base = self.base_url.rstrip("/")
        path = self.functions_path.strip("/")
        return f"{base}/{path}" if path else base

    def missing_required(self) -> list[str]:
        """Names of required settings that are empty."""
        missing = []
        if not self.base_url.strip():
            missing.append("base_url")
        if not self.anon_key.strip():
            missing.append("anon_key")
        return missing

    model_config = ConfigDict(
        env_prefix="EDGELINK_",
        env_nested_delimiter="__"
    )
