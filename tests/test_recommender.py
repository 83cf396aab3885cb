"""Tests for the course-correction rule table."""

from __future__ import annotations

from datetime import date

import pytest

from goalkernel.engine.models import (
    AdjustmentType,
    CourseCorrection,
    HealthStatus,
    ProgressAnalysis,
    Severity,
    Trend,
)
from goalkernel.engine.recommender import format_time, recommend, sort_corrections
from tests.conftest import make_goal


def _analysis(goal, **overrides) -> ProgressAnalysis:
    defaults = dict(
        goal_id=goal.id,
        goal_type=goal.type,
        as_of=date(2026, 9, 22),
        current_value=0.0,
        target_value=goal.target_value,
        progress_percentage=0.0,
        projected_completion_percentage=0.0,
        days_remaining=100,
        days_elapsed=264,
        status=HealthStatus.behind,
        severity=Severity.major,
    )
    defaults.update(overrides)
    return ProgressAnalysis(**defaults)


def _pace_goal():
    return make_goal(type="pace", unit="seconds", target_value=1800, race_distance=5000)


class TestNotBehind:
    @pytest.mark.parametrize("status", [HealthStatus.ahead, HealthStatus.on_track])
    def test_no_corrections(self, status):
        goal = make_goal()
        analysis = _analysis(goal, status=status, severity=Severity.none, projected_completion_percentage=120.0)
        assert recommend(goal, analysis) == []


class TestDistance:
    def test_minor_gap_sized_over_remaining_weeks(self):
        goal = make_goal()
        analysis = _analysis(
            goal, current_value=600_000, progress_percentage=60.0,
            projected_completion_percentage=80.0, severity=Severity.minor,
        )
        corrections = recommend(goal, analysis)
        assert len(corrections) == 1
        c = corrections[0]
        assert c.adjustment_type is AdjustmentType.increase_distance
        assert c.severity is Severity.minor
        # 200 km projected gap over 100/7 weeks
        assert c.weekly_distance_delta == pytest.approx(14_000.0)

    def test_major_with_timeline_fallback(self):
        goal = make_goal()
        analysis = _analysis(
            goal, current_value=100_000, progress_percentage=10.0, projected_completion_percentage=10.0,
        )
        corrections = recommend(goal, analysis)
        assert [c.adjustment_type for c in corrections] == [
            AdjustmentType.increase_distance,
            AdjustmentType.adjust_timeline,
        ]
        assert corrections[0].weekly_distance_delta == pytest.approx(63_000.0)
        # Capped at the original 364-day timeline
        assert corrections[1].timeline_adjustment_days == 364

    def test_major_but_reachable_has_no_timeline(self):
        goal = make_goal()
        # 10 days elapsed with 300 km: 210 km/week average, 700 km over 100 days is easy.
        analysis = _analysis(
            goal, current_value=300_000, progress_percentage=30.0,
            projected_completion_percentage=35.0, days_elapsed=10,
        )
        corrections = recommend(goal, analysis)
        assert [c.adjustment_type for c in corrections] == [AdjustmentType.increase_distance]

    def test_no_running_yet_proposes_full_extension(self):
        goal = make_goal()
        corrections = recommend(goal, _analysis(goal))
        assert corrections[-1].adjustment_type is AdjustmentType.adjust_timeline
        assert corrections[-1].timeline_adjustment_days == 364

    def test_trend_down_adds_action(self):
        goal = make_goal()
        analysis = _analysis(
            goal, current_value=600_000, projected_completion_percentage=80.0,
            severity=Severity.minor, trend=Trend.down,
        )
        actions = recommend(goal, analysis)[0].specific_actions
        assert any("dropping" in a for a in actions)


class TestDeadlinePassed:
    def test_distance_has_no_weekly_delta(self):
        goal = make_goal()
        analysis = _analysis(
            goal, current_value=600_000, progress_percentage=60.0,
            projected_completion_percentage=60.0, days_remaining=0, days_elapsed=364,
        )
        corrections = recommend(goal, analysis)
        assert [c.adjustment_type for c in corrections] == [
            AdjustmentType.increase_distance,
            AdjustmentType.adjust_timeline,
        ]
        assert corrections[0].weekly_distance_delta is None
        assert "400.0 km" in corrections[0].specific_actions[0]
        # 600 km over 52 weeks, +50%: 400 km more takes 162 days
        assert corrections[1].timeline_adjustment_days == 162

    def test_frequency_has_no_weekly_delta(self):
        goal = make_goal(type="frequency", unit="count", target_value=12, race_type="any")
        analysis = _analysis(
            goal, current_value=3, progress_percentage=25.0,
            projected_completion_percentage=25.0, days_remaining=0, days_elapsed=364,
        )
        corrections = recommend(goal, analysis)
        assert corrections[0].adjustment_type is AdjustmentType.increase_frequency
        assert corrections[0].weekly_frequency_delta is None
        assert "9 activities" in corrections[0].specific_actions[0]
        assert corrections[1].timeline_adjustment_days == 364


class TestPace:
    def test_improve_pace_delta(self):
        goal = _pace_goal()
        analysis = _analysis(
            goal, current_value=2000, progress_percentage=90.0,
            projected_completion_percentage=50.0, severity=Severity.moderate,
        )
        corrections = recommend(goal, analysis)
        assert len(corrections) == 1
        assert corrections[0].adjustment_type is AdjustmentType.improve_pace
        # 200 s over 5 km: 40 s/km faster
        assert corrections[0].target_pace_delta == pytest.approx(-40.0)

    def test_no_baseline_suggests_time_trial(self):
        goal = _pace_goal()
        corrections = recommend(goal, _analysis(goal))
        assert len(corrections) == 1
        assert corrections[0].target_pace_delta is None
        assert "time trial" in corrections[0].specific_actions[0]

    def test_major_gap_extends_timeline(self):
        goal = _pace_goal()
        analysis = _analysis(goal, current_value=2400, progress_percentage=75.0, days_remaining=30)
        corrections = recommend(goal, analysis)
        assert [c.adjustment_type for c in corrections] == [
            AdjustmentType.improve_pace,
            AdjustmentType.adjust_timeline,
        ]
        # 25% faster at 1% per week = 175 days, 30 remain
        assert corrections[1].timeline_adjustment_days == 145

    def test_race_goal_uses_improve_pace(self):
        goal = make_goal(type="race", unit="seconds", target_value=7200, race_distance=21_097)
        analysis = _analysis(goal, current_value=7500, severity=Severity.moderate)
        assert recommend(goal, analysis)[0].adjustment_type is AdjustmentType.improve_pace


class TestFrequency:
    def test_weekly_frequency_delta(self):
        goal = make_goal(type="frequency", unit="count", target_value=12, race_type="any")
        analysis = _analysis(
            goal, current_value=3, progress_percentage=25.0, projected_completion_percentage=50.0,
            severity=Severity.moderate, days_remaining=183, days_elapsed=181,
        )
        corrections = recommend(goal, analysis)
        assert len(corrections) == 1
        c = corrections[0]
        assert c.adjustment_type is AdjustmentType.increase_frequency
        assert c.weekly_frequency_delta == pytest.approx(0.23)
        assert "Register for upcoming races" in c.specific_actions


class TestConsistency:
    def _goal(self):
        return make_goal(type="consistency", unit="count", target_value=52)

    def test_qualitative_only(self):
        goal = self._goal()
        analysis = _analysis(goal, current_value=0.7, projected_completion_percentage=70.0, severity=Severity.minor)
        c = recommend(goal, analysis)[0]
        assert c.adjustment_type is AdjustmentType.increase_frequency
        assert c.weekly_frequency_delta is None
        assert c.weekly_distance_delta is None
        assert c.specific_actions

    def test_unreachable_band_extends_timeline(self):
        goal = self._goal()
        analysis = _analysis(goal, current_value=0.2, projected_completion_percentage=20.0, days_elapsed=181)
        corrections = recommend(goal, analysis)
        assert corrections[0].adjustment_type is AdjustmentType.increase_frequency
        assert corrections[1].adjustment_type is AdjustmentType.adjust_timeline
        assert corrections[1].timeline_adjustment_days == 364


class TestOrdering:
    def test_severity_then_adjustment_type(self):
        items = [
            CourseCorrection(severity=Severity.major, adjustment_type=AdjustmentType.adjust_timeline),
            CourseCorrection(severity=Severity.minor, adjustment_type=AdjustmentType.increase_frequency),
            CourseCorrection(severity=Severity.major, adjustment_type=AdjustmentType.improve_pace),
            CourseCorrection(severity=Severity.moderate, adjustment_type=AdjustmentType.increase_distance),
        ]
        ordered = sort_corrections(items)
        assert [(c.severity, c.adjustment_type) for c in ordered] == [
            (Severity.major, AdjustmentType.improve_pace),
            (Severity.major, AdjustmentType.adjust_timeline),
            (Severity.moderate, AdjustmentType.increase_distance),
            (Severity.minor, AdjustmentType.increase_frequency),
        ]

    def test_independent_of_input_order(self):
        items = [
            CourseCorrection(severity=Severity.major, adjustment_type=t) for t in reversed(list(AdjustmentType))
        ]
        assert sort_corrections(items) == sort_corrections(list(reversed(items)))


class TestFormatTime:
    def test_minutes(self):
        assert format_time(1700) == "28:20"

    def test_hours(self):
        assert format_time(7265) == "2:01:05"
