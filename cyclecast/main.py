"""Cyclecast API: FastAPI application entry point.

Run locally:
    uvicorn cyclecast.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cyclecast.config import Settings, get_settings
from cyclecast.middleware.rate_limit import RateLimitMiddleware
from cyclecast.routers import health, predictions

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cyclecast")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting Cyclecast API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    yield
    logger.info("Cyclecast API shut down")


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Cyclecast API",
        description="Menstrual cycle prediction from daily flow logs.",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # ---------- Middleware ----------

    app.add_middleware(RateLimitMiddleware, settings=settings)

    # CORS added last so it wraps everything and answers preflight itself
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    app.include_router(predictions.router, prefix="/api/v1")

    return app


app = create_app()
