"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Protocol

from tcpswarm.modules.session import DEFAULT_HOST, format_address


@dataclass
class TargetConfig:
    """Load target configuration."""
    host: str
    port: int

    @property
    def address(self) -> str:
        """Target as "host:port"."""
        return format_address(self.host, self.port)


@dataclass
class PacingConfig:
    """Timing of launches and heartbeats, in seconds."""
    launch_interval: float
    warmup_delay: float
    heartbeat_interval: float


@dataclass
class SessionConfig:
    """Per-session configuration."""
    count: int
    payload: bytes
    read_buffer_size: int


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_target_config(self) -> TargetConfig:
        """Get target configuration."""
        ...

    def get_pacing_config(self) -> PacingConfig:
        """Get pacing configuration."""
        ...

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        ...


def _get_int(name: str, default: str, minimum: int) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _get_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_target_config(self) -> TargetConfig:
        """Get target configuration from environment variables."""
        return TargetConfig(
            host=os.getenv("TCPSWARM_HOST", DEFAULT_HOST),
            port=_get_int("TCPSWARM_PORT", "8090", minimum=1),
        )

    def get_pacing_config(self) -> PacingConfig:
        """Get pacing configuration from environment variables."""
        return PacingConfig(
            launch_interval=_get_float("TCPSWARM_LAUNCH_INTERVAL", "0.1"),
            warmup_delay=_get_float("TCPSWARM_WARMUP_DELAY", "1.0"),
            heartbeat_interval=_get_float("TCPSWARM_HEARTBEAT_INTERVAL", "10.0"),
        )

    def get_session_config(self) -> SessionConfig:
        """Get session configuration from environment variables."""
        payload = os.getenv("TCPSWARM_PAYLOAD", "hello")
        if not payload:
            raise ValueError("TCPSWARM_PAYLOAD must not be empty")

        return SessionConfig(
            count=_get_int("TCPSWARM_SESSIONS", "10", minimum=0),
            payload=payload.encode("utf-8"),
            read_buffer_size=_get_int("TCPSWARM_READ_BUFFER", "1024", minimum=1),
        )
