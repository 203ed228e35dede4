"""
Commodity Price Exceptions - Exception hierarchy for quote sources.

Upstream failures are recovered inside the sources and the fetcher;
only caller-level validation errors reach the caller.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class DataSourceError(Exception):
    """Base exception for all price source errors."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source_name = source_name
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source_name": self.source_name,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.source_name:
            parts.append(f"[source={self.source_name}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)



class FetchError(DataSourceError):
    """Upstream could not be reached, answered with an error status, or sent an undecodable body."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        status_code: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, original_error, context)
        self.status_code = status_code
        self.request_url = request_url


class ParseError(DataSourceError):
    """Upstream answered but the expected page or payload structure is missing."""


class NormalizationError(DataSourceError):
    """A raw quote could not be converted to USD per metric ton."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        raw_data: Optional[Any] = None,
        field_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, original_error, context)
        self.raw_data = raw_data
        self.field_name = field_name


class ConfigurationError(DataSourceError):
    """The fetcher is not set up for the requested operation."""


class InvalidCommodityError(DataSourceError, ValueError):
    """Requested commodity name does not resolve to a supported commodity."""

    def __init__(
        self,
        message: str,
        commodity: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, None, None, context)
        self.commodity = commodity

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["commodity"] = self.commodity
        return data
