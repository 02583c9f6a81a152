"""
Custom exceptions for MDB_CONVERT.

Converted collections never translate driver errors; these exceptions only
cover misuse detected while building a converter or loading configuration.
"""

from typing import Any, Dict, Optional


class MongoConvertError(RuntimeError):
    """
    Base exception for MongoDB converter errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (transform name,
                 collection name, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConverterConfigurationError(MongoConvertError):
    """
    Raised when a converter or the package configuration is invalid.

    Raised when a transform is missing or not callable, or when an
    environment variable holds a value that cannot be parsed.

    Attributes:
        message: Error message
        config_key: Transform or configuration key at fault (if available)
        config_value: Offending value (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
