"""Cycle prediction for Cyclecast.

Modules:
    intervals        Daily log records, log parsing, period segmentation
    cycle_predictor  Next period / fertile window / phase prediction
    config_loader    Load/validate/hot-reload prediction_config.yaml
"""

from cyclecast.prediction.config_loader import PredictionConfig, get_prediction_config
from cyclecast.prediction.cycle_predictor import (
    CyclePrediction,
    CyclePredictor,
    PhasePrediction,
    predict,
)
from cyclecast.prediction.intervals import DailyLog, PeriodInterval, parse_daily_logs

__all__ = [
    "CyclePredictor",
    "CyclePrediction",
    "PhasePrediction",
    "DailyLog",
    "PeriodInterval",
    "PredictionConfig",
    "get_prediction_config",
    "parse_daily_logs",
    "predict",
]
