"""Configuration management for kafkascope."""
from kafkascope.config.loader import DEFAULT_DATE_FORMAT, AppConfig, ConnectConfig

__all__ = [
    "AppConfig",
    "ConnectConfig",
    "DEFAULT_DATE_FORMAT",
]
