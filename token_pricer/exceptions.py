"""
Exception hierarchy for the token pricer.

Only InvalidAddress (and InvalidQuoteCurrency, raised before any remote
call) ever reach the caller of a resolution. Remote and metadata failures
are raised internally and absorbed by the tier that produced them.
"""

from typing import Any, Dict, Optional


class TokenPricerError(Exception):
    """Base exception for all token pricer errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(TokenPricerError):
    """Raised when the configuration is invalid or cannot be loaded."""

    pass


# Short name used by the config loader and the CLI
ConfigError = ConfigurationError


class ValidationError(TokenPricerError):
    """Raised when caller input fails validation."""

    pass


class InvalidAddress(ValidationError):
    """Raised when a token identifier is not a well-formed 20-byte hex string."""

    def __init__(self, value: Any, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Invalid address: {value!r}", details)
        self.value = value


class InvalidQuoteCurrency(ValidationError):
    """Raised when a quote currency selector is not recognised."""

    def __init__(self, value: Any, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Unknown quote currency: {value!r}", details)
        self.value = value


class TransientRemoteFailure(TokenPricerError):
    """Raised when an RPC or HTTP call errors, reverts or times out."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code


class MetadataFailure(TokenPricerError):
    """Raised when a token's symbol, name or decimals cannot be read."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.address = address
