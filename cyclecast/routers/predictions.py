"""Cycle prediction endpoint.

Stateless: the client sends its full current log set and receives a fresh
prediction.  Nothing is stored between calls.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from cyclecast.dependencies import Predictor
from cyclecast.models.base import ErrorDetail
from cyclecast.models.tracking import PredictionRequest, PredictionResponse
from cyclecast.prediction.intervals import parse_daily_logs

router = APIRouter(prefix="/predictions", tags=["predictions"])
logger = logging.getLogger("cyclecast.api.predictions")


@router.post(
    "",
    response_model=PredictionResponse,
    responses={429: {"model": ErrorDetail, "description": "Rate limit exceeded"}},
)
async def create_prediction(body: PredictionRequest, predictor: Predictor) -> Any:
    logs, skipped = parse_daily_logs(log.model_dump() for log in body.logs)
    if skipped:
        logger.info("Prediction request: skipped %d of %d logs", skipped, len(body.logs))

    prediction = predictor.predict(logs, life_stage=body.life_stage, as_of=body.as_of)

    return {
        "life_stage": body.life_stage,
        "prediction": prediction.to_dict() if prediction else None,
        "logs_considered": len(logs),
        "logs_skipped": skipped,
    }
