"""Pydantic models for cycle tracking: daily logs in, cycle predictions out."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import Field

from cyclecast.models.base import CyclecastBase


# ---------- Enums ----------

class FlowLevel(str, Enum):
    spotting = "spotting"
    light = "light"
    medium = "medium"
    heavy = "heavy"
    very_heavy = "very_heavy"


class Symptom(str, Enum):
    cramps = "cramps"
    headache = "headache"
    bloating = "bloating"
    fatigue = "fatigue"
    energy = "energy"
    breast_tenderness = "breast_tenderness"
    acne = "acne"
    backache = "backache"
    nausea = "nausea"
    insomnia = "insomnia"
    constipation = "constipation"
    diarrhea = "diarrhea"
    cravings = "cravings"
    mood_swings = "mood_swings"
    other = "other"


class Mood(str, Enum):
    happy = "happy"
    sensitive = "sensitive"
    sad = "sad"
    energetic = "energetic"
    tired = "tired"
    anxious = "anxious"
    irritable = "irritable"
    calm = "calm"


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


class LifeStage(str, Enum):
    first_period = "first_period"
    standard = "standard"
    trying_to_conceive = "trying_to_conceive"
    pregnancy = "pregnancy"
    perimenopause = "perimenopause"
    no_period = "no_period"


# ---------- Daily logs ----------

class DailyLogIn(CyclecastBase):
    """One day's log as submitted by a client.

    ``date`` stays a raw string here; unparseable dates are dropped by the
    predictor's log parser instead of failing the whole request.
    """

    date: str
    flow: str | None = None
    symptoms: list[str] = Field(default_factory=list)
    moods: list[str] = Field(default_factory=list)
    notes: str | None = None
    basal_temperature: float | None = None


# ---------- Predictions ----------

class PredictionRequest(CyclecastBase):
    logs: list[DailyLogIn] = Field(default_factory=list, max_length=5000)
    life_stage: LifeStage = LifeStage.standard
    as_of: date | None = None


class PhasePredictionRead(CyclecastBase):
    phase: CyclePhase
    start_date: date
    end_date: date
    symptoms: list[Symptom] = Field(default_factory=list)


class CyclePredictionRead(CyclecastBase):
    next_period_start: date
    next_period_end: date
    next_fertile_window_start: date
    next_fertile_window_end: date
    next_ovulation_date: date
    confidence: float = Field(ge=0.0, le=1.0)
    phases: list[PhasePredictionRead]
    model_used: str
    cycles_used: int
    avg_cycle_length: float
    avg_period_length: float


class PredictionResponse(CyclecastBase):
    life_stage: LifeStage
    prediction: CyclePredictionRead | None = None
    logs_considered: int
    logs_skipped: int = 0
