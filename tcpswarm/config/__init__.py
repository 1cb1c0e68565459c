"""Configuration groups and providers."""

from .provider import (
    ConfigProvider,
    EnvConfigProvider,
    PacingConfig,
    SessionConfig,
    TargetConfig,
)

__all__ = [
    "ConfigProvider",
    "EnvConfigProvider",
    "PacingConfig",
    "SessionConfig",
    "TargetConfig",
]
