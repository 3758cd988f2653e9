"""Configuration module for edgelink."""

from edgelink.config.loader import load_config, get_config_path, save_config
from edgelink.config.schema import Settings, HttpConfig, StreamConfig

__all__ = ["Settings", "HttpConfig", "StreamConfig", "load_config", "get_config_path", "save_config"]
