from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv

from ndt_shared.protocol.constants import DEFAULT_S2C_DURATION, DEFAULT_S2C_PORT

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 3001,
    "s2c_port": DEFAULT_S2C_PORT,
    "s2c_duration": DEFAULT_S2C_DURATION,
    "log_level": "INFO",
}

SERVER_CONFIG: Dict[str, Any] = DEFAULT_SERVER_CONFIG.copy()


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load server configuration from env file/environment variables (NDT_<KEY>)."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_SERVER_CONFIG.items():
        value = os.getenv(f"NDT_{key.upper()}", default_value)
        SERVER_CONFIG[key] = _coerce_type(value, type(default_value))

    _validate_config(SERVER_CONFIG)
    return SERVER_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def _validate_config(config: Dict[str, Any]) -> None:
    for key in ("port", "s2c_port"):
        # 0 lets the OS choose an ephemeral port
        if not (0 <= int(config[key]) <= 65535):
            raise ConfigError(f"{key} must be between 0 and 65535")
    if config["s2c_duration"] <= 0:
        raise ConfigError("s2c_duration must be positive")


__all__ = ["DEFAULT_SERVER_CONFIG", "SERVER_CONFIG", "ConfigError", "load_server_config"]
