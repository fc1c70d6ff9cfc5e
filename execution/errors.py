"""
Gateway error taxonomy.

Every error the order path raises on purpose derives from GatewayError and
carries the HTTP status the route layer should answer with.
"""
from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderValidationError(GatewayError):
    """Missing or malformed field, bad credential pairing, or incompatible order type."""
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConfigurationError(GatewayError):
    """Server-side configuration needed for this request is missing."""


class MarketNotFound(GatewayError):
    """The venue does not know the requested token."""

    def __init__(self, token_id: str):
        super().__init__(
            f"Market not found for tokenID: {token_id}. "
            "Please verify the tokenID is correct and the market exists.")
        self.token_id = token_id


class CredentialDerivationFailed(GatewayError):
    """Deriving CLOB API credentials for a signing key failed."""


class UpstreamOrderError(GatewayError):
    """The venue rejected or failed the order submission."""
