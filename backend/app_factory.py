"""Builds the ecosystem simulation API.

``create_app`` has no import-time side effects: the scenario store, the live
broadcaster, connection limits and environment-derived settings are all held
by an ``AppContext``. Tests pass their own context; the server entry point
lets ``create_app`` build one from the environment.
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from backend import __version__
from backend.broadcast import LiveBroadcaster
from backend.logging_config import configure_logging
from backend.scenario_store import ScenarioStore
from backend.security import LiveConnectionLimiter, SecuritySettings, setup_security_middleware
from ecosim.config.server import DEFAULT_API_PORT, DEFAULT_FRONTEND_ORIGIN, GZIP_MINIMUM_SIZE


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def _env_origins() -> List[str]:
    return os.getenv("ALLOWED_ORIGINS", DEFAULT_FRONTEND_ORIGIN).split(",")


@dataclass
class AppContext:
    """Per-application services and settings."""

    scenario_store: ScenarioStore = field(default_factory=ScenarioStore)
    broadcaster: LiveBroadcaster = field(default_factory=LiveBroadcaster)
    security: SecuritySettings = field(default_factory=SecuritySettings.from_env)
    # Built from ``security`` when left unset
    live_limiter: Optional[LiveConnectionLimiter] = None

    server_version: str = __version__
    api_port: int = field(
        default_factory=lambda: int(os.getenv("ECOSIM_API_PORT", str(DEFAULT_API_PORT)))
    )
    production_mode: bool = field(default_factory=lambda: _env_flag("PRODUCTION"))
    allowed_origins: List[str] = field(default_factory=_env_origins)

    server_start_time: float = field(default_factory=time.time)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("backend"))

    def __post_init__(self) -> None:
        if self.live_limiter is None:
            self.live_limiter = LiveConnectionLimiter.from_settings(self.security)

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self.server_start_time


def create_app(
    *,
    production_mode: Optional[bool] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        production_mode: Overrides ``context.production_mode`` when given
        context: Services and settings to use; a fresh one from the
            environment if None

    Returns:
        The application, with the context stored on ``app.state.context``
    """
    logger = configure_logging(extra_loggers=("backend",))

    context = context or AppContext()
    if production_mode is not None:
        context.production_mode = production_mode
    context.logger = logger

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = app.state.context
        ctx.logger.info(
            "Serving on port %s (production=%s, scenarios=%d)",
            ctx.api_port,
            ctx.production_mode,
            ctx.scenario_store.count,
        )
        yield
        ctx.logger.info(
            "Stopping after %.1fs; %d live clients still attached",
            ctx.uptime_seconds,
            ctx.broadcaster.client_count,
        )

    # Interactive docs are a development convenience only
    docs_enabled = not context.production_mode
    app = FastAPI(
        title="Ecosystem Simulation API",
        version=context.server_version,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.allowed_origins if context.production_mode else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    # Compresses large bodies such as full run results
    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)
    setup_security_middleware(
        app, context.security, enable_rate_limiting=context.production_mode
    )

    _include_routers(app, context)
    return app


def _include_routers(app: FastAPI, ctx: AppContext) -> None:
    from backend.routers import health, scenarios, simulation, websocket

    app.include_router(health.setup_router())
    app.include_router(simulation.setup_router(ctx.scenario_store, ctx.broadcaster))
    app.include_router(scenarios.setup_router(ctx.scenario_store))
    app.include_router(websocket.setup_router(ctx.broadcaster, ctx.live_limiter))

    ctx.logger.debug("Routers mounted: %d routes", len(app.routes))
