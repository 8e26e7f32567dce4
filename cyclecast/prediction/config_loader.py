"""Load, validate, and hot-reload the Cyclecast prediction configuration.

The config lives in ``prediction_config.yaml`` alongside this module, or in
the file named by ``CYCLECAST_PREDICTION_CONFIG_PATH``.  It is loaded once
and cached.  Call ``reload_prediction_config()`` to re-read from disk after
an update; no restart required.

Usage::

    from cyclecast.prediction.config_loader import get_prediction_config

    config = get_prediction_config()
    config.defaults.cycle_length_days                 # 28
    config.life_stage(LifeStage.trying_to_conceive).confidence_multiplier  # 1.2
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cyclecast.models.tracking import CyclePhase, LifeStage, Symptom

logger = logging.getLogger("cyclecast.prediction.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "prediction_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class DefaultsConfig:
    """Population averages used when history is missing or too short."""

    cycle_length_days: int = 28
    period_length_days: int = 5
    ovulation_day: int = 14
    fertile_window_lead_days: int = 5
    period_gap_days: int = 2


@dataclass
class ConfidenceConfig:
    """Heuristic confidence settings.

    Historical confidence is ``min(base + per_period * periods, ceiling)``.
    """

    default: float = 0.5
    base: float = 0.5
    per_period: float = 0.05
    ceiling: float = 0.95


@dataclass
class LifeStageSettings:
    """Per-life-stage prediction adjustments."""

    stage: LifeStage
    confidence_multiplier: float = 1.0
    predictions_enabled: bool = True


@dataclass
class PredictionConfig:
    """Complete, validated prediction configuration.

    Attributes:
        version:        Config schema version string.
        defaults:       Population-average cycle constants.
        confidence:     Confidence heuristic settings.
        phase_symptoms: Phase → commonly associated symptoms.
        life_stages:    Life stage → prediction adjustments.
    """

    version: str
    defaults: DefaultsConfig
    confidence: ConfidenceConfig
    phase_symptoms: dict[CyclePhase, tuple[Symptom, ...]]
    life_stages: dict[LifeStage, LifeStageSettings]

    def life_stage(self, stage: LifeStage) -> LifeStageSettings:
        """Return the settings for a life stage.

        Stages missing from the YAML get neutral settings (multiplier 1.0,
        predictions enabled).
        """
        return self.life_stages.get(stage) or LifeStageSettings(stage=stage)

    def symptoms_for(self, phase: CyclePhase) -> tuple[Symptom, ...]:
        return self.phase_symptoms.get(phase, ())


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when prediction_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    import yaml

    if not path.exists():
        raise FileNotFoundError(f"Prediction config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> PredictionConfig:
    """Validate the raw YAML dict and construct a PredictionConfig.

    Every problem found is collected and reported in a single
    ConfigValidationError.  Missing sections fall back to defaults.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, name: str, minimum: int) -> int:
        value = section.get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{name}.{key} must be an integer, got {value!r}")
            return default
        if number < minimum:
            errors.append(f"{name}.{key} = {number} must be >= {minimum}")
        return number

    def _prob(section: dict, key: str, default: float, name: str) -> float:
        value = section.get(key, default)
        try:
            number = float(value)
        except (TypeError, ValueError):
            errors.append(f"{name}.{key} must be a number, got {value!r}")
            return default
        if not (0.0 <= number <= 1.0):
            errors.append(f"{name}.{key} = {number} is out of range [0.0, 1.0]")
        return number

    version = str(raw.get("version", "1.0"))

    # ── Defaults ──
    d_raw = raw.get("defaults") or {}
    defaults = DefaultsConfig(
        cycle_length_days=_int(d_raw, "cycle_length_days", 28, "defaults", 1),
        period_length_days=_int(d_raw, "period_length_days", 5, "defaults", 1),
        ovulation_day=_int(d_raw, "ovulation_day", 14, "defaults", 1),
        fertile_window_lead_days=_int(d_raw, "fertile_window_lead_days", 5, "defaults", 0),
        period_gap_days=_int(d_raw, "period_gap_days", 2, "defaults", 1),
    )
    if defaults.period_length_days > defaults.cycle_length_days:
        errors.append("defaults.period_length_days cannot exceed defaults.cycle_length_days")
    if defaults.ovulation_day > defaults.cycle_length_days - 2:
        errors.append("defaults.ovulation_day must leave at least one luteal day before the next period")

    # ── Confidence ──
    c_raw = raw.get("confidence") or {}
    confidence = ConfidenceConfig(
        default=_prob(c_raw, "default", 0.5, "confidence"),
        base=_prob(c_raw, "base", 0.5, "confidence"),
        per_period=_prob(c_raw, "per_period", 0.05, "confidence"),
        ceiling=_prob(c_raw, "ceiling", 0.95, "confidence"),
    )
    if confidence.base > confidence.ceiling:
        errors.append("confidence.base cannot exceed confidence.ceiling")

    # ── Phase symptoms ──
    phase_symptoms: dict[CyclePhase, tuple[Symptom, ...]] = {}
    for phase_name, symptoms in (raw.get("phase_symptoms") or {}).items():
        try:
            phase = CyclePhase(phase_name)
        except ValueError:
            errors.append(f"phase_symptoms.{phase_name} is not a known cycle phase")
            continue
        if not isinstance(symptoms, list):
            errors.append(f"phase_symptoms.{phase_name} must be a list of symptoms")
            continue
        parsed: list[Symptom] = []
        for name in symptoms:
            try:
                parsed.append(Symptom(name))
            except ValueError:
                errors.append(f"phase_symptoms.{phase_name}: unknown symptom {name!r}")
        phase_symptoms[phase] = tuple(parsed)

    # ── Life stages ──
    life_stages: dict[LifeStage, LifeStageSettings] = {}
    for stage_name, cfg in (raw.get("life_stages") or {}).items():
        try:
            stage = LifeStage(stage_name)
        except ValueError:
            errors.append(f"life_stages.{stage_name} is not a known life stage")
            continue
        cfg = cfg or {}
        if not isinstance(cfg, dict):
            errors.append(f"life_stages.{stage_name} must be a mapping")
            continue
        multiplier: Any = cfg.get("confidence_multiplier", 1.0)
        try:
            multiplier = float(multiplier)
        except (TypeError, ValueError):
            errors.append(
                f"life_stages.{stage_name}.confidence_multiplier must be a number, "
                f"got {multiplier!r}"
            )
            multiplier = 1.0
        if multiplier <= 0.0:
            errors.append(f"life_stages.{stage_name}.confidence_multiplier must be positive")
        life_stages[stage] = LifeStageSettings(
            stage=stage,
            confidence_multiplier=multiplier,
            predictions_enabled=bool(cfg.get("predictions_enabled", True)),
        )
        if stage is LifeStage.standard and not life_stages[stage].predictions_enabled:
            errors.append("life_stages.standard cannot disable predictions")

    if errors:
        raise ConfigValidationError(
            f"prediction_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return PredictionConfig(
        version=version,
        defaults=defaults,
        confidence=confidence,
        phase_symptoms=phase_symptoms,
        life_stages=life_stages,
    )


def load_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Load and validate the prediction config from disk.

    Args:
        path: Override path to YAML. Uses the bundled prediction_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded prediction config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------
_config: PredictionConfig | None = None
_config_path: Path | None = None  # file the singleton was loaded from
_config_lock = threading.Lock()


def _needs_load(path: Path | None) -> bool:
    if _config is None:
        return True
    return path is not None and Path(path) != _config_path


def get_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Return the global PredictionConfig singleton, loading it on first call.

    Args:
        path: YAML file the singleton should come from.  ``None`` returns
              whichever config is active, loading the bundled file if none
              is.  A path other than the active one replaces the singleton.

    Thread-safe.  Use ``reload_prediction_config()`` to refresh after YAML changes.
    """
    global _config, _config_path
    if _needs_load(path):
        with _config_lock:
            if _needs_load(path):  # double-checked locking
                target = Path(path) if path is not None else _CONFIG_PATH
                _config = load_prediction_config(target)
                _config_path = target
    return _config


def reload_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Reload the prediction config from disk and replace the global singleton.

    Args:
        path: YAML file to read.  Defaults to the bundled prediction_config.yaml.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config, _config_path
    target = Path(path) if path is not None else _CONFIG_PATH
    new_config = load_prediction_config(target)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
        _config_path = target
    logger.info(
        "Reloaded prediction config from %s: %s → %s",
        target,
        old_version,
        new_config.version,
    )
    return new_config
