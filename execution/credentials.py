"""
Credential Pair Resolver — decides which signing identity governs a request.

A request either names its own (privateKey, funderAddress) pair or names
neither and falls back to the server's default signer. The resolver runs once
per request; everything downstream consumes the resulting Credentials value.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from config import DefaultSigner
from execution.errors import ConfigurationError, OrderValidationError

PAIRING_ERROR = ("Both privateKey and funderAddress must be provided together, "
                 "or neither (to use environment variables)")

# Accepted body aliases, first match wins
_SIGNING_KEY_FIELDS = ("privateKey", "signingKey")
_FUNDER_FIELDS = ("funderAddress",)


@dataclass(frozen=True)
class CredentialPair:
    """Cache identity for a venue session."""
    signing_key: str
    funder_address: str

    def __repr__(self) -> str:
        return f"CredentialPair(funder_address={short_address(self.funder_address)})"


@dataclass(frozen=True)
class DefaultCredentials:
    """Use the server-configured signer."""

    def resolve(self, signer: DefaultSigner) -> CredentialPair:
        if not signer.private_key:
            raise ConfigurationError("PRIVATE_KEY environment variable is required")
        if not signer.funder_address:
            raise ConfigurationError("FUNDER_ADDRESS environment variable is required")
        return CredentialPair(signer.private_key, signer.funder_address)


@dataclass(frozen=True)
class ExplicitCredentials:
    """Use the pair supplied with the request."""
    pair: CredentialPair

    def resolve(self, signer: DefaultSigner) -> CredentialPair:
        return self.pair


Credentials = Union[DefaultCredentials, ExplicitCredentials]


def short_address(address: str) -> str:
    """0x1234…abcd form for logs."""
    if len(address) <= 12:
        return address
    return f"{address[:6]}…{address[-4:]}"


def _first_present(body: Mapping[str, Any], names) -> Optional[str]:
    for name in names:
        value = body.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise OrderValidationError(f"{name} must be a string", field=name)
        if value.strip():
            return value.strip()
    return None


def resolve_credentials(body: Mapping[str, Any]) -> Credentials:
    """
    Pick the signing identity for a request body.

    Both fields present -> ExplicitCredentials, both absent -> DefaultCredentials,
    exactly one -> OrderValidationError. No side effects.
    """
    signing_key = _first_present(body, _SIGNING_KEY_FIELDS)
    funder = _first_present(body, _FUNDER_FIELDS)
    if signing_key and funder:
        return ExplicitCredentials(CredentialPair(signing_key, funder))
    if signing_key or funder:
        raise OrderValidationError(PAIRING_ERROR, field="privateKey" if not signing_key else "funderAddress")
    return DefaultCredentials()
