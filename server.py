"""
FastAPI application for the Polymarket Order Gateway.

Pass-through façade: callers POST orders, the gateway signs them with the
default or per-request credentials and posts them to the CLOB.

Run with:
    polymarket-gateway serve
    uvicorn server:create_app --factory
"""
from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import validate_config
from container import ServiceContainer, get_container
from routes import health, orders


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records (uvicorn, httpx) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str = "INFO") -> None:
    """Single loguru sink on stderr; stdlib loggers routed through it."""
    logger.remove()
    logger.add(sys.stderr, level=level)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std = logging.getLogger(name)
        std.handlers = [InterceptHandler()]
        std.propagate = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg = app.state.container.cfg
    logger.info(f"Starting {cfg.app_name} v{cfg.app_version} → {cfg.venue.host} "
                f"(chain {cfg.venue.chain_id}, signature type {cfg.venue.signature_type})")
    problems = validate_config(cfg)
    if problems:
        logger.warning("Configuration issues detected:")
        for problem in problems:
            logger.warning(f"  - {problem}")
    else:
        logger.info("Configuration validated successfully")
    yield
    logger.info(f"Shutting down {cfg.app_name} "
                f"({app.state.container.session_registry.session_count()} cached sessions)")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the gateway app around a service container (one per process)."""
    container = container or get_container()
    cfg = container.cfg

    app = FastAPI(
        title=cfg.app_name,
        version=cfg.app_version,
        description="HTTP gateway for submitting limit and market orders to the Polymarket CLOB",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.server.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
    app.include_router(health.router, tags=["health"])
    return app
