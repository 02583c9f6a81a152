"""
Configuration management for MDB_CONVERT.

Configuration only toggles observability (metrics and call logging); it never
changes how documents are converted. Values come from direct parameters or
environment variables.
"""

import os
from typing import Optional

from .constants import (DEFAULT_MAX_METRICS, ENV_LOG_CALLS, ENV_MAX_METRICS,
                        ENV_RECORD_METRICS)
from .exceptions import ConverterConfigurationError

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _env_flag(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConverterConfigurationError(
        f"Invalid boolean value for {key}", config_key=key, config_value=raw
    )


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConverterConfigurationError(
            f"Invalid integer value for {key}", config_key=key, config_value=raw
        ) from e


class ConverterConfig:
    """
    Converter observability configuration.

    Example:
        # Using environment variables
        config = ConverterConfig()

        # Or using direct parameters
        config = ConverterConfig(record_metrics=True, log_calls=False)
    """

    def __init__(
        self,
        record_metrics: Optional[bool] = None,
        max_metrics: Optional[int] = None,
        log_calls: Optional[bool] = None,
    ):
        """
        Initialize configuration.

        Args:
            record_metrics: Time every transform call (defaults to
                MDB_CONVERT_RECORD_METRICS, off)
            max_metrics: Metric series kept before LRU eviction (defaults to
                MDB_CONVERT_METRICS_MAX or 10000)
            log_calls: Emit a DEBUG record per intercepted call (defaults to
                MDB_CONVERT_LOG_CALLS, off)
        """
        self.record_metrics = (
            record_metrics
            if record_metrics is not None
            else _env_flag(ENV_RECORD_METRICS, False)
        )
        self.max_metrics = (
            max_metrics
            if max_metrics is not None
            else _env_int(ENV_MAX_METRICS, DEFAULT_MAX_METRICS)
        )
        self.log_calls = (
            log_calls if log_calls is not None else _env_flag(ENV_LOG_CALLS, False)
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConverterConfigurationError: If a value is out of range
        """
        if self.max_metrics < 1:
            raise ConverterConfigurationError(
                "max_metrics must be at least 1",
                config_key="max_metrics",
                config_value=self.max_metrics,
            )


_config: Optional[ConverterConfig] = None


def get_config() -> ConverterConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        config = ConverterConfig()
        config.validate()
        _config = config
    return _config


def set_config(config: ConverterConfig) -> None:
    """Install an explicit configuration (validated first)."""
    global _config
    config.validate()
    _config = config


def reset_config() -> None:
    """Forget the global configuration so it is re-read from the environment."""
    global _config
    _config = None
