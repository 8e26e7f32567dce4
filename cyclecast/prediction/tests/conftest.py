"""Shared fixtures and log builders for the prediction test suite."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from cyclecast.models.tracking import FlowLevel
from cyclecast.prediction.config_loader import PredictionConfig, load_prediction_config
from cyclecast.prediction.cycle_predictor import CyclePredictor
from cyclecast.prediction.intervals import DailyLog

# Reference "today" for predictions that need an anchor
TEST_DATE = date(2026, 2, 23)


def make_period(
    start: date, days: int = 5, flow: FlowLevel = FlowLevel.medium
) -> list[DailyLog]:
    """Consecutive flow-day logs starting at ``start``."""
    return [DailyLog(date=start + timedelta(days=i), flow=flow) for i in range(days)]


def build_regular_history(
    n: int, cycle_length: int = 28, period_days: int = 5, first_start: date = date(2025, 1, 1)
) -> list[DailyLog]:
    """Build ``n`` evenly spaced periods."""
    logs: list[DailyLog] = []
    start = first_start
    for _ in range(n):
        logs.extend(make_period(start, period_days))
        start += timedelta(days=cycle_length)
    return logs


@pytest.fixture
def prediction_config() -> PredictionConfig:
    """Load the real bundled prediction config."""
    return load_prediction_config()


@pytest.fixture
def predictor(prediction_config: PredictionConfig) -> CyclePredictor:
    return CyclePredictor(prediction_config)
