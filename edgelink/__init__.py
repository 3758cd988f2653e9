"""edgelink - authenticated request and push-stream client for remote function endpoints."""

__version__ = "0.3.0"
__logo__ = "⚡"
