"""Tests for flow-day filtering, period segmentation and raw log parsing."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from cyclecast.models.tracking import FlowLevel, Mood, Symptom
from cyclecast.prediction.intervals import (
    DailyLog,
    PeriodInterval,
    _known,
    distinct_flow_dates,
    flow_days,
    parse_daily_logs,
    segment_periods,
)
from cyclecast.prediction.tests.conftest import make_period


def flow_on(*days: date) -> list[DailyLog]:
    return [DailyLog(date=d, flow=FlowLevel.light) for d in days]


class TestFlowDays:
    def test_filters_and_sorts(self) -> None:
        logs = [
            DailyLog(date=date(2025, 1, 3), flow=FlowLevel.heavy),
            DailyLog(date=date(2025, 1, 2)),
            DailyLog(date=date(2025, 1, 1), flow=FlowLevel.spotting),
        ]
        result = flow_days(logs)
        assert [log.date for log in result] == [date(2025, 1, 1), date(2025, 1, 3)]

    def test_empty(self) -> None:
        assert flow_days([]) == []


class TestSegmentPeriods:
    def test_gap_of_two_days_stays_in_one_period(self) -> None:
        days = flow_on(date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 4))
        intervals = segment_periods(days)
        assert intervals == [
            PeriodInterval(start=date(2025, 1, 1), end=date(2025, 1, 4), flow_days=3)
        ]

    def test_gap_of_three_days_splits(self) -> None:
        days = flow_on(date(2025, 1, 1), date(2025, 1, 4))
        assert [i.start for i in segment_periods(days)] == [date(2025, 1, 1), date(2025, 1, 4)]

    def test_gap_of_four_days_splits(self) -> None:
        days = flow_on(date(2025, 1, 1), date(2025, 1, 5))
        intervals = segment_periods(days)
        assert len(intervals) == 2
        assert [i.start for i in intervals] == [date(2025, 1, 1), date(2025, 1, 5)]

    def test_two_full_periods(self) -> None:
        days = make_period(date(2025, 1, 1)) + make_period(date(2025, 1, 29))
        intervals = segment_periods(days)
        assert [(i.start, i.end) for i in intervals] == [
            (date(2025, 1, 1), date(2025, 1, 5)),
            (date(2025, 1, 29), date(2025, 2, 2)),
        ]
        assert all(i.length_days == 5 for i in intervals)

    def test_custom_gap(self) -> None:
        days = flow_on(date(2025, 1, 1), date(2025, 1, 4))
        assert len(segment_periods(days, max_gap_days=3)) == 1

    def test_no_flow_days(self) -> None:
        assert segment_periods([]) == []

    def test_same_day_duplicates(self) -> None:
        days = flow_on(date(2025, 1, 1), date(2025, 1, 1), date(2025, 1, 2))
        intervals = segment_periods(days)
        assert len(intervals) == 1
        assert intervals[0].flow_days == 3
        assert distinct_flow_dates(days) == 2


class TestParseDailyLogs:
    def test_parses_valid_records(self) -> None:
        logs, skipped = parse_daily_logs(
            [
                {
                    "date": "2025-01-01",
                    "flow": "heavy",
                    "symptoms": ["cramps", "made_up"],
                    "moods": ["tired"],
                    "notes": "rough day",
                    "basal_temperature": 36.4,
                },
                {"date": "2025-01-02"},
            ]
        )
        assert skipped == 0
        assert logs[0] == DailyLog(
            date=date(2025, 1, 1),
            flow=FlowLevel.heavy,
            symptoms=(Symptom.cramps,),
            moods=(Mood.tired,),
            notes="rough day",
            basal_temperature=36.4,
        )
        assert logs[1].flow is None

    @pytest.mark.parametrize("value", ["not-a-date", "2025-13-45", "", None, 20250101])
    def test_invalid_dates_are_skipped(self, value: object) -> None:
        logs, skipped = parse_daily_logs([{"date": value, "flow": "light"}])
        assert logs == []
        assert skipped == 1

    def test_unknown_flow_is_skipped(self) -> None:
        logs, skipped = parse_daily_logs(
            [{"date": "2025-01-01", "flow": "gushing"}, {"date": "2025-01-02", "flow": "light"}]
        )
        assert [log.date for log in logs] == [date(2025, 1, 2)]
        assert skipped == 1

    @pytest.mark.parametrize("flow", [None, "", "none", "None"])
    def test_empty_flow_means_no_flow(self, flow: object) -> None:
        logs, _ = parse_daily_logs([{"date": "2025-01-01", "flow": flow}])
        assert logs[0].flow is None

    def test_flow_is_case_insensitive(self) -> None:
        logs, _ = parse_daily_logs([{"date": "2025-01-01", "flow": " Very_Heavy "}])
        assert logs[0].flow is FlowLevel.very_heavy

    @pytest.mark.parametrize(
        "value",
        [
            "2025-01-01T08:30:00",
            "2025-01-01T08:30:00Z",
            "2025-01-01T08:30:00+02:00",
            datetime(2025, 1, 1, 8, 30),
            date(2025, 1, 1),
        ],
    )
    def test_datetime_values_reduce_to_calendar_day(self, value: object) -> None:
        logs, skipped = parse_daily_logs([{"date": value}])
        assert skipped == 0
        assert logs[0].date == date(2025, 1, 1)


class TestKnownMembers:
    def test_keeps_known_values_as_members(self) -> None:
        assert _known(Symptom, ["cramps", Symptom.acne, "hiccups"]) == (
            Symptom.cramps,
            Symptom.acne,
        )

    def test_none_gives_empty_tuple(self) -> None:
        assert _known(Mood, None) == ()
