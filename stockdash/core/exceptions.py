"""Custom exceptions for the application."""

from typing import Any


class BaseAppException(Exception):
    """Base exception for all application errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class InvalidInputError(BaseAppException):
    """Missing or malformed input (symbol, range code, reference record)."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "INVALID_INPUT", details)


class NotFoundError(BaseAppException):
    """Symbol or historical series absent from the stores."""

    status_code = 404

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "NOT_FOUND", details)


class StorageError(BaseAppException):
    """Key-value or object store failures."""

    status_code = 502

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "STORAGE_ERROR", details)


class MarketDataError(BaseAppException):
    """Third-party market data provider failures."""

    status_code = 502

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "MARKET_DATA_ERROR", details)


class ConfigurationError(BaseAppException):
    """Configuration-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)
