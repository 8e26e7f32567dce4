"""Menstrual cycle prediction engine.

Infers historical period intervals from daily logs and projects:
- Next period window
- Fertile window and ovulation date
- The four cycle phases leading up to and including the next period

With two or more observed periods the projection uses the user's own
average cycle and period lengths; otherwise it falls back to population
averages (28-day cycle, 5-day period) anchored at the last known period
start, or at today when nothing has been logged.

The predictor is a pure function of the log snapshot it is given.  It never
raises for sparse or odd data; thin history shows up as lower confidence.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from cyclecast.models.tracking import CyclePhase, LifeStage, Symptom
from cyclecast.prediction.config_loader import PredictionConfig, get_prediction_config
from cyclecast.prediction.intervals import (
    DailyLog,
    PeriodInterval,
    distinct_flow_dates,
    flow_days,
    segment_periods,
)

logger = logging.getLogger("cyclecast.prediction.cycle_predictor")

MODEL_HISTORICAL = "historical"
MODEL_DEFAULT = "default"


def round_days(value: float) -> int:
    """Round a day count to the nearest whole day, halves rounding up."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class PhasePrediction:
    """A predicted cycle phase window (inclusive on both ends)."""

    phase: CyclePhase
    start_date: date
    end_date: date
    symptoms: tuple[Symptom, ...] = ()

    @property
    def length_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class CyclePrediction:
    """Prediction for the user's next cycle.

    Attributes:
        next_period_start:          First day of the next expected period.
        next_period_end:            Last day of the next expected period.
        next_fertile_window_start:  First day of the fertile window.
        next_fertile_window_end:    Last day of the fertile window (ovulation day).
        next_ovulation_date:        Predicted ovulation day.
        confidence:                 0.0–1.0 heuristic confidence.
        phases:                     Follicular, ovulation, luteal and menstrual
                                    windows in chronological order.
        model_used:                 'historical' or 'default'.
        cycles_used:                Number of period intervals observed.
        avg_cycle_length:           Cycle length the projection was built on.
        avg_period_length:          Period length the projection was built on.
    """

    next_period_start: date
    next_period_end: date
    next_fertile_window_start: date
    next_fertile_window_end: date
    next_ovulation_date: date
    confidence: float
    phases: tuple[PhasePrediction, ...] = field(default_factory=tuple)
    model_used: str = MODEL_DEFAULT
    cycles_used: int = 0
    avg_cycle_length: float = 0.0
    avg_period_length: float = 0.0

    def phase_on(self, day: date) -> PhasePrediction | None:
        """Return the predicted phase covering ``day``, if any."""
        for phase in self.phases:
            if phase.contains(day):
                return phase
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict with ISO-8601 dates."""
        return {
            "next_period_start": self.next_period_start.isoformat(),
            "next_period_end": self.next_period_end.isoformat(),
            "next_fertile_window_start": self.next_fertile_window_start.isoformat(),
            "next_fertile_window_end": self.next_fertile_window_end.isoformat(),
            "next_ovulation_date": self.next_ovulation_date.isoformat(),
            "confidence": self.confidence,
            "phases": [
                {
                    "phase": p.phase.value,
                    "start_date": p.start_date.isoformat(),
                    "end_date": p.end_date.isoformat(),
                    "symptoms": [s.value for s in p.symptoms],
                }
                for p in self.phases
            ],
            "model_used": self.model_used,
            "cycles_used": self.cycles_used,
            "avg_cycle_length": self.avg_cycle_length,
            "avg_period_length": self.avg_period_length,
        }


class CyclePredictor:
    """Predict the next cycle from a snapshot of daily logs.

    Usage::

        predictor = CyclePredictor()
        prediction = predictor.predict(logs, life_stage=LifeStage.standard)
        print(prediction.next_period_start, prediction.confidence)

    Instances hold only read-only configuration and may be shared between
    threads.
    """

    def __init__(self, config: PredictionConfig | None = None) -> None:
        self._config = config or get_prediction_config()

    @property
    def config(self) -> PredictionConfig:
        return self._config

    def predict(
        self,
        logs: Iterable[DailyLog],
        life_stage: LifeStage = LifeStage.standard,
        as_of: date | None = None,
    ) -> CyclePrediction | None:
        """Generate a cycle prediction from the full current log set.

        Args:
            logs:       Daily logs in any order; days without flow are ignored.
            life_stage: Life stage adjusting confidence, or disabling
                        predictions altogether (pregnancy, no period).
            as_of:      Reference date used as the anchor when no flow has
                        been logged (defaults to today).

        Returns:
            A fully populated CyclePrediction, or None when the life stage
            has predictions disabled.
        """
        stage = self._config.life_stage(life_stage)
        if not stage.predictions_enabled:
            logger.debug("Predictions disabled for life stage %s", life_stage.value)
            return None

        days = flow_days(logs)
        if not days:
            logger.debug("No flow days logged; using default prediction")
            return self._default_prediction(
                anchor=as_of or date.today(),
                current_period_end=None,
                cycles_used=0,
                multiplier=stage.confidence_multiplier,
            )

        intervals = segment_periods(days, self._config.defaults.period_gap_days)
        if len(intervals) < 2:
            logger.debug("Single period on record (%s); using default prediction", intervals[-1].start)
            return self._default_prediction(
                anchor=intervals[-1].start,
                current_period_end=intervals[-1].end,
                cycles_used=len(intervals),
                multiplier=stage.confidence_multiplier,
            )

        return self._historical_prediction(
            intervals,
            distinct_days=distinct_flow_dates(days),
            multiplier=stage.confidence_multiplier,
        )

    # ------------------------------------------------------------------
    # Prediction branches
    # ------------------------------------------------------------------

    def _historical_prediction(
        self,
        intervals: list[PeriodInterval],
        distinct_days: int,
        multiplier: float,
    ) -> CyclePrediction:
        defaults = self._config.defaults
        conf = self._config.confidence

        gaps = [
            (later.start - earlier.start).days
            for earlier, later in zip(intervals, intervals[1:])
        ]
        avg_cycle = sum(gaps) / len(gaps)

        avg_period = distinct_days / len(intervals)
        if math.isnan(avg_period) or avg_period <= 0:
            avg_period = float(defaults.period_length_days)

        last = intervals[-1]
        next_start = last.start + timedelta(days=round_days(avg_cycle))
        next_end = next_start + timedelta(days=round_days(avg_period) - 1)
        ovulation = next_start - timedelta(days=round_days(avg_cycle / 2))

        base = min(conf.base + conf.per_period * len(intervals), conf.ceiling)
        logger.debug(
            "Historical prediction from %d periods: avg cycle %.1f, avg period %.1f",
            len(intervals),
            avg_cycle,
            avg_period,
        )
        return self._assemble(
            current_period_end=last.end,
            next_start=next_start,
            next_end=next_end,
            ovulation=ovulation,
            confidence=self._scaled(base, multiplier),
            model_used=MODEL_HISTORICAL,
            cycles_used=len(intervals),
            avg_cycle=round(avg_cycle, 1),
            avg_period=round(avg_period, 1),
        )

    def _default_prediction(
        self,
        anchor: date,
        current_period_end: date | None,
        cycles_used: int,
        multiplier: float,
    ) -> CyclePrediction:
        defaults = self._config.defaults

        next_start = anchor + timedelta(days=defaults.cycle_length_days)
        next_end = next_start + timedelta(days=defaults.period_length_days - 1)
        ovulation = anchor + timedelta(days=defaults.ovulation_day)
        if current_period_end is None:
            current_period_end = anchor + timedelta(days=defaults.period_length_days - 1)

        return self._assemble(
            current_period_end=current_period_end,
            next_start=next_start,
            next_end=next_end,
            ovulation=ovulation,
            confidence=self._scaled(self._config.confidence.default, multiplier),
            model_used=MODEL_DEFAULT,
            cycles_used=cycles_used,
            avg_cycle=float(defaults.cycle_length_days),
            avg_period=float(defaults.period_length_days),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _scaled(self, base: float, multiplier: float) -> float:
        return round(min(base * multiplier, self._config.confidence.ceiling), 4)

    def _assemble(
        self,
        current_period_end: date,
        next_start: date,
        next_end: date,
        ovulation: date,
        confidence: float,
        model_used: str,
        cycles_used: int,
        avg_cycle: float,
        avg_period: float,
    ) -> CyclePrediction:
        fertile_start = ovulation - timedelta(days=self._config.defaults.fertile_window_lead_days)
        return CyclePrediction(
            next_period_start=next_start,
            next_period_end=next_end,
            next_fertile_window_start=fertile_start,
            next_fertile_window_end=ovulation,
            next_ovulation_date=ovulation,
            confidence=confidence,
            phases=self._build_phases(current_period_end, fertile_start, ovulation, next_start, next_end),
            model_used=model_used,
            cycles_used=cycles_used,
            avg_cycle_length=avg_cycle,
            avg_period_length=avg_period,
        )

    def _build_phases(
        self,
        current_period_end: date,
        fertile_start: date,
        fertile_end: date,
        next_start: date,
        next_end: date,
    ) -> tuple[PhasePrediction, ...]:
        """Lay out the four phase windows back to back.

        The follicular phase runs from the day after the current period to
        the day before the fertile window.  When the current period runs into
        the fertile window it shrinks to the single preceding day.
        """
        one_day = timedelta(days=1)
        follicular_end = fertile_start - one_day
        follicular_start = min(current_period_end + one_day, follicular_end)

        windows = (
            (CyclePhase.follicular, follicular_start, follicular_end),
            (CyclePhase.ovulation, fertile_start, fertile_end),
            (CyclePhase.luteal, fertile_end + one_day, next_start - one_day),
            (CyclePhase.menstrual, next_start, next_end),
        )
        return tuple(
            PhasePrediction(
                phase=phase,
                start_date=start,
                end_date=end,
                symptoms=self._config.symptoms_for(phase),
            )
            for phase, start, end in windows
        )


def predict(
    logs: Iterable[DailyLog],
    as_of: date | None = None,
    config: PredictionConfig | None = None,
) -> CyclePrediction:
    """Predict the next cycle for the standard life stage.

    Always returns a prediction; with no flow logged it is the low-confidence
    population-average default anchored at ``as_of`` (today by default).
    """
    # the config loader refuses to disable the standard stage
    return CyclePredictor(config).predict(logs, LifeStage.standard, as_of)  # type: ignore[return-value]
