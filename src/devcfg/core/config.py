"""devcfg configuration and logging."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import structlog

try:
    import tomllib
except ImportError:
    import tomli as tomllib

USER_CONFIG = Path.home() / ".devcfg" / "config.toml"
ENV_CONFIG = "DEVCFG_CONFIG"
ENV_SOCKET = "DEVCFG_SOCKET"

DEFAULT_SOCKET = Path("/run/devcfg/store.sock")


@dataclass
class Config:
    """Parsed configuration."""

    socket: Path = DEFAULT_SOCKET
    """Endpoint of the configuration store."""

    user: int = 0
    """Store-side user whose configuration is addressed."""

    log: Path | None = None  # None = no logging
    log_full: bool = False  # log put values too (requires log path)


# === Config Loading ===


def _merge_configs(base: Config, overlay: dict[str, Any]) -> Config:
    """Merge overlay settings into base. Every key the overlay sets wins."""
    return replace(base, **overlay)


def _load_file(path: Path) -> dict[str, Any]:
    try:
        return parse_settings(path.read_text())
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from None


def load_config() -> Config:
    """Load config from ~/.devcfg/config.toml and $DEVCFG_CONFIG, then $DEVCFG_SOCKET.

    Raises ValueError if a config file is invalid.
    """
    config = Config()

    if USER_CONFIG.is_file():
        config = _merge_configs(config, _load_file(USER_CONFIG))

    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        env_config_path = Path(env_path).expanduser()
        if env_config_path.is_file():
            config = _merge_configs(config, _load_file(env_config_path))

    env_socket = os.environ.get(ENV_SOCKET)
    if env_socket:
        config = replace(config, socket=Path(env_socket).expanduser())

    return config


def parse_config(text: str) -> Config:
    """Parse TOML config text into Config object. Raises ValueError on bad input."""
    return Config(**parse_settings(text))


def parse_settings(text: str) -> dict[str, Any]:
    """Parse TOML config text into the Config fields it sets explicitly.

    Raises ValueError on bad input.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"invalid TOML: {e}") from None

    settings: dict[str, Any] = {}
    for key, value in data.items():
        if key == "socket":
            settings["socket"] = Path(_expect(key, value, str)).expanduser()
        elif key == "user":
            user = _expect(key, value, int)
            if user < 0:
                raise ValueError(f"'user' must be non-negative, got {user}")
            settings["user"] = user
        elif key == "log":
            _apply_log_table(settings, _expect(key, value, dict))
        else:
            raise ValueError(f"unknown setting '{key}'")

    return settings


def _apply_log_table(settings: dict[str, Any], table: dict[str, Any]) -> None:
    for key, value in table.items():
        if key == "path":
            settings["log"] = Path(_expect("log.path", value, str)).expanduser()
        elif key == "full":
            settings["log_full"] = _expect("log.full", value, bool)
        else:
            raise ValueError(f"unknown setting 'log.{key}'")


def _expect(name: str, value: Any, kind: type) -> Any:
    # bool is an int subclass; TOML keeps them apart, so do we
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"'{name}' must be {kind.__name__}, got {value!r}")
    return value


# === Logging ===

_logger: structlog.BoundLogger | None = None
_log_file = None
_log_full = False


def configure_logging(config: Config) -> None:
    """Configure logging based on config settings. Call once at startup."""
    global _logger, _log_file, _log_full
    reset_logging()
    if config.log is None:
        return

    config.log.parent.mkdir(parents=True, exist_ok=True)
    _log_file = config.log.open("a")

    # JSON lines to the log file
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        logger_factory=structlog.WriteLoggerFactory(file=_log_file),
        cache_logger_on_first_use=False,
    )
    _logger = structlog.get_logger().bind(pid=os.getpid())
    _log_full = config.log_full


def reset_logging() -> None:
    """Drop logging configuration and close the log file."""
    global _logger, _log_file, _log_full
    if _log_file is not None:
        _log_file.close()
        structlog.reset_defaults()
    _logger = None
    _log_file = None
    _log_full = False


def log_command(event: str, value: str | None = None, **fields: Any) -> None:
    """Log one invocation event. No-op if logging not configured.

    ``value`` is the value being written and is only recorded with log_full.
    """
    if _logger is None:
        return
    if _log_full and value is not None:
        fields["value"] = value
    _logger.info(event, **fields)
