"""Daily log records and period-interval segmentation.

A *flow day* is any logged day with a flow value.  Flow days are walked in
date order and grouped into period intervals: a gap of more than
``max_gap_days`` between consecutive flow days starts a new interval, so a
gap of exactly two days still belongs to the same bleed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping, TypeVar

from cyclecast.models.tracking import FlowLevel, Mood, Symptom

logger = logging.getLogger("cyclecast.prediction.intervals")

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class DailyLog:
    """A single day's log entry.

    Only ``date`` and ``flow`` are read by the predictor; the remaining
    fields are carried for callers.

    Attributes:
        date:              Calendar day of the entry.
        flow:              Logged flow intensity, ``None`` for no flow.
        symptoms:          Symptoms logged that day.
        moods:             Moods logged that day.
        notes:             Free-text notes.
        basal_temperature: Basal body temperature in °C.
    """

    date: date
    flow: FlowLevel | None = None
    symptoms: tuple[Symptom, ...] = ()
    moods: tuple[Mood, ...] = ()
    notes: str | None = None
    basal_temperature: float | None = None

    @property
    def is_flow_day(self) -> bool:
        return self.flow is not None


@dataclass(frozen=True)
class PeriodInterval:
    """A maximal run of flow days treated as one menstrual bleed.

    Attributes:
        start:     First flow day of the run.
        end:       Last flow day of the run.
        flow_days: Number of flow-day logs in the run (duplicates included).
    """

    start: date
    end: date
    flow_days: int = 1

    @property
    def length_days(self) -> int:
        return (self.end - self.start).days + 1


def flow_days(logs: Iterable[DailyLog]) -> list[DailyLog]:
    """Return the logs that carry a flow value, oldest first."""
    return sorted((log for log in logs if log.is_flow_day), key=lambda log: log.date)


def segment_periods(
    sorted_flow_days: list[DailyLog], max_gap_days: int = 2
) -> list[PeriodInterval]:
    """Group date-sorted flow days into period intervals.

    Args:
        sorted_flow_days: Flow-day logs sorted ascending by date.
        max_gap_days:     Largest day gap that still continues an interval.

    Returns:
        Period intervals in chronological order.
    """
    intervals: list[PeriodInterval] = []
    start: date | None = None
    end: date | None = None
    count = 0

    for log in sorted_flow_days:
        if end is None or (log.date - end).days > max_gap_days:
            if start is not None and end is not None:
                intervals.append(PeriodInterval(start=start, end=end, flow_days=count))
            start = log.date
            count = 0
        end = log.date
        count += 1

    if start is not None and end is not None:
        intervals.append(PeriodInterval(start=start, end=end, flow_days=count))
    return intervals


def distinct_flow_dates(sorted_flow_days: Iterable[DailyLog]) -> int:
    """Count distinct calendar days among flow-day logs."""
    return len({log.date for log in sorted_flow_days})


# ---------------------------------------------------------------------------
# Parsing raw records
# ---------------------------------------------------------------------------


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _parse_flow(value: Any) -> FlowLevel | None:
    """Parse a flow value; raises ValueError for unknown non-empty values."""
    if value is None or value == "":
        return None
    if isinstance(value, FlowLevel):
        return value
    text = str(value).strip().lower()
    if text in ("", "none"):
        return None
    return FlowLevel(text)


def _known(enum_cls: type[E], values: Iterable[Any] | None) -> tuple[E, ...]:
    members: list[E] = []
    for value in values or ():
        try:
            members.append(enum_cls(value))
        except ValueError:
            logger.debug("Ignoring unknown %s value %r", enum_cls.__name__, value)
    return tuple(members)


def parse_daily_logs(records: Iterable[Mapping[str, Any]]) -> tuple[list[DailyLog], int]:
    """Build DailyLog objects from raw mappings (e.g. API payloads).

    Records with a missing or unparseable date, or an unknown flow value,
    are excluded and counted rather than raised.  Unknown symptoms and moods
    are dropped from otherwise valid records.

    Args:
        records: Mappings with at least a ``date`` key.

    Returns:
        Tuple of (accepted logs, number of skipped records).
    """
    logs: list[DailyLog] = []
    skipped = 0

    for record in records:
        day = _parse_date(record.get("date"))
        if day is None:
            skipped += 1
            logger.warning("Skipping daily log with invalid date: %r", record.get("date"))
            continue
        try:
            flow = _parse_flow(record.get("flow"))
        except ValueError:
            skipped += 1
            logger.warning("Skipping daily log on %s with unknown flow %r", day, record.get("flow"))
            continue

        logs.append(
            DailyLog(
                date=day,
                flow=flow,
                symptoms=_known(Symptom, record.get("symptoms") or ()),
                moods=_known(Mood, record.get("moods") or ()),
                notes=record.get("notes"),
                basal_temperature=record.get("basal_temperature"),
            )
        )

    return logs, skipped
