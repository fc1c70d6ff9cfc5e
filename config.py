"""
Typed configuration — single source of truth for all gateway settings.

SRP: This module's sole responsibility is loading and validating configuration.
All env-var reads are consolidated here; no other module should call os.getenv().
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Tuple
from dotenv import load_dotenv

load_dotenv()

DEFAULT_CLOB_HOST = "https://clob.polymarket.com"
POLYGON_CHAIN_ID = 137


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: str) -> int:
    return int(_env(key, default))


def _env_list(key: str, default: str) -> Tuple[str, ...]:
    return tuple(v.strip() for v in _env(key, default).split(",") if v.strip())


# ── Venue (CLOB) Config ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class VenueConfig:
    """CLOB endpoint and signing scheme, fixed for the process lifetime."""
    host: str = _env("HOST", DEFAULT_CLOB_HOST)
    chain_id: int = _env_int("CHAIN_ID", str(POLYGON_CHAIN_ID))
    signature_type: int = _env_int("SIGNATURE_TYPE", "1")


# ── Default Signer ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DefaultSigner:
    """Server-wide signing identity used when a request carries none."""
    private_key: str = _env("PRIVATE_KEY", "")
    funder_address: str = _env("FUNDER_ADDRESS", "")

    def __repr__(self) -> str:
        # never print the key
        return f"DefaultSigner(funder_address={self.funder_address!r})"


# ── HTTP Server Config ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class ServerConfig:
    """Listen address, log level and CORS origins."""
    bind_host: str = _env("BIND_HOST", "0.0.0.0")
    port: int = _env_int("PORT", "3000")
    log_level: str = _env("LOG_LEVEL", "INFO").upper()
    cors_origins: Tuple[str, ...] = _env_list("CORS_ORIGINS", "*")


# ── Top-level aggregate ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class GatewayConfig:
    """
    Root configuration object — compose all sub-configs.

    Usage:
        cfg = GatewayConfig()              # loads from env
        print(cfg.venue.host)
        print(cfg.server.port)
    """
    venue: VenueConfig = field(default_factory=VenueConfig)
    signer: DefaultSigner = field(default_factory=DefaultSigner)
    server: ServerConfig = field(default_factory=ServerConfig)
    app_name: str = "Polymarket Order Gateway"
    app_version: str = "1.0.0"


def validate_config(cfg: GatewayConfig) -> List[str]:
    """
    Validate critical configuration.
    Returns list of error messages (empty if valid).
    """
    errors = []
    if not cfg.signer.private_key:
        errors.append("PRIVATE_KEY not set (requests must supply their own credentials)")
    if not cfg.signer.funder_address:
        errors.append("FUNDER_ADDRESS not set (requests must supply their own credentials)")
    if not cfg.venue.host.startswith(("http://", "https://")):
        errors.append(f"HOST must be an http(s) URL, got {cfg.venue.host!r}")
    if cfg.venue.signature_type not in (0, 1, 2):
        errors.append(f"SIGNATURE_TYPE must be 0, 1 or 2, got {cfg.venue.signature_type}")
    return errors


# Module-level singleton (immutable, safe to share)
_cfg: GatewayConfig | None = None


def get_config() -> GatewayConfig:
    """Get the global immutable config. Created once, never mutated."""
    global _cfg
    if _cfg is None:
        _cfg = GatewayConfig()
    return _cfg
