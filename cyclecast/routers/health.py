"""Health check endpoint. Public, no auth required."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from cyclecast.dependencies import AppSettings, get_config
from cyclecast.models.base import utc_now
from cyclecast.prediction.config_loader import ConfigValidationError

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclecast.health")


@router.get("/health")
async def health_check(settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also checks that the prediction config loads.
    """
    config_version: str | None = None
    try:
        config_version = get_config(settings).version
    except (ConfigValidationError, FileNotFoundError) as exc:
        logger.warning("Health check config probe failed: %s", exc)

    return {
        "status": "healthy" if config_version else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "prediction_config": config_version or "unavailable",
        "timestamp": utc_now().isoformat(),
    }
