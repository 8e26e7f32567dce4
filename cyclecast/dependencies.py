"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from fastapi import Depends

from cyclecast.config import Settings, get_settings
from cyclecast.prediction.config_loader import PredictionConfig, get_prediction_config
from cyclecast.prediction.cycle_predictor import CyclePredictor


def get_config(settings: Annotated[Settings, Depends(get_settings)]) -> PredictionConfig:
    """Resolve the prediction config, honouring CYCLECAST_PREDICTION_CONFIG_PATH."""
    if settings.prediction_config_path:
        return get_prediction_config(Path(settings.prediction_config_path))
    return get_prediction_config()


def get_predictor(
    config: Annotated[PredictionConfig, Depends(get_config)],
) -> CyclePredictor:
    """A predictor per request; it holds no state beyond the config."""
    return CyclePredictor(config)


# Annotated shortcuts for route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
Predictor = Annotated[CyclePredictor, Depends(get_predictor)]
