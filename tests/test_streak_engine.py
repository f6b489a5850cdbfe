"""Tests for StreakEngine.

Current streak walks backward from a reference date; best streak scans every
maximal run of consecutive complete calendar dates from its segment head.
"""

from __future__ import annotations

from typing import Any

import pytest

from custom_components.immersion_tracker import const
from custom_components.immersion_tracker.data_builders import build_daily_entry
from custom_components.immersion_tracker.engines.streak_engine import StreakEngine
from custom_components.immersion_tracker.utils.dt_utils import (
    InvalidDateError,
    dt_iter_date_keys,
)
from tests.helpers import make_complete_entry, make_history

# =============================================================================
# Reference scenario
# =============================================================================


@pytest.fixture
def three_days() -> dict[str, dict[str, Any]]:
    """2025-08-18 and 19 complete, 2025-08-20 one card short."""
    return make_history(
        {
            "2025-08-18": True,
            "2025-08-19": True,
            "2025-08-20": False,
        }
    )


class TestReferenceScenario:
    """Three recorded days, the last one incomplete."""

    def test_current_streak_on_last_complete_day(
        self, three_days: dict[str, Any], default_goals: dict[str, Any]
    ) -> None:
        """Two days ending 2025-08-19."""
        assert StreakEngine.current_streak(three_days, default_goals, "2025-08-19") == 2

    def test_current_streak_on_incomplete_day(
        self, three_days: dict[str, Any], default_goals: dict[str, Any]
    ) -> None:
        """An incomplete end date yields 0."""
        assert StreakEngine.current_streak(three_days, default_goals, "2025-08-20") == 0

    def test_best_streak(
        self, three_days: dict[str, Any], default_goals: dict[str, Any]
    ) -> None:
        """The longest run is the first two days."""
        assert StreakEngine.best_streak(three_days, default_goals) == 2


# =============================================================================
# Current streak
# =============================================================================


class TestCurrentStreak:
    """Backward walk."""

    def test_missing_end_date(self, default_goals: dict[str, Any]) -> None:
        """No entry on the end date means no streak."""
        entries = make_history({"2025-08-18": True})
        assert StreakEngine.current_streak(entries, default_goals, "2025-08-19") == 0

    def test_gap_breaks_streak(self, default_goals: dict[str, Any]) -> None:
        """A missing calendar day stops the walk."""
        entries = make_history(
            {"2025-08-15": True, "2025-08-16": True, "2025-08-18": True}
        )
        assert StreakEngine.current_streak(entries, default_goals, "2025-08-18") == 1

    def test_walk_crosses_month_and_year(self, default_goals: dict[str, Any]) -> None:
        """Consecutive days over a year boundary."""
        entries = make_history(
            {day: True for day in dt_iter_date_keys("2024-12-28", "2025-01-03")}
        )
        assert StreakEngine.current_streak(entries, default_goals, "2025-01-03") == 7

    def test_invalid_end_date(self, default_goals: dict[str, Any]) -> None:
        """A malformed end date fails fast."""
        with pytest.raises(InvalidDateError):
            StreakEngine.current_streak({}, default_goals, "2025-02-30")

    def test_reset_day_breaks_streak(self, default_goals: dict[str, Any]) -> None:
        """A zeroed entry stays recorded but is incomplete."""
        entries = make_history({"2025-08-18": True, "2025-08-20": True})
        entries["2025-08-19"] = build_daily_entry()
        assert "2025-08-19" in entries
        assert StreakEngine.current_streak(entries, default_goals, "2025-08-20") == 1
        assert StreakEngine.best_streak(entries, default_goals) == 1


# =============================================================================
# Best streak
# =============================================================================


class TestBestStreak:
    """Segment-head scan."""

    def test_empty_history(self, default_goals: dict[str, Any]) -> None:
        """No entries, no streak."""
        assert StreakEngine.best_streak({}, default_goals) == 0

    def test_counts_calendar_runs_not_entry_runs(
        self, default_goals: dict[str, Any]
    ) -> None:
        """Complete entries separated by a gap are two runs."""
        entries = make_history(
            {
                "2025-08-01": True,
                "2025-08-02": True,
                "2025-08-04": True,
                "2025-08-05": True,
                "2025-08-06": True,
            }
        )
        assert StreakEngine.best_streak(entries, default_goals) == 3

    def test_incomplete_head_then_complete_run(
        self, default_goals: dict[str, Any]
    ) -> None:
        """A run that starts after an incomplete head is still found."""
        entries = make_history(
            {
                "2025-08-01": False,
                "2025-08-02": True,
                "2025-08-03": True,
                "2025-08-04": True,
                "2025-08-05": False,
                "2025-08-06": True,
            }
        )
        assert StreakEngine.best_streak(entries, default_goals) == 3

    def test_sparse_future_dates(self, default_goals: dict[str, Any]) -> None:
        """Far-apart future entries never join an older run."""
        entries = make_history(
            {
                "2025-08-01": True,
                "2025-08-02": True,
                "2026-01-01": True,
                "2030-06-15": True,
                "2030-06-16": True,
            }
        )
        assert StreakEngine.best_streak(entries, default_goals) == 2
        assert StreakEngine.current_streak(entries, default_goals, "2030-06-16") == 2
        assert StreakEngine.current_streak(entries, default_goals, "2026-01-01") == 1

    def test_runs_at_calendar_edges(self, default_goals: dict[str, Any]) -> None:
        """Runs touching 0001-01-01 or 9999-12-31 are measured, not overflowed."""
        entries = make_history(
            {
                "0001-01-01": True,
                "0001-01-02": True,
                "9999-12-30": True,
                "9999-12-31": True,
                "2025-08-18": True,
            }
        )
        assert StreakEngine.best_streak(entries, default_goals) == 2
        assert StreakEngine.current_streak(entries, default_goals, "0001-01-02") == 2
        assert StreakEngine.current_streak(entries, default_goals, "9999-12-31") == 2

    def test_insertion_order_irrelevant(self, default_goals: dict[str, Any]) -> None:
        """Entries need not be sorted."""
        entries = make_history(
            {"2025-08-03": True, "2025-08-01": True, "2025-08-02": True}
        )
        assert StreakEngine.best_streak(entries, default_goals) == 3

    def test_invalid_keys_skipped(self, default_goals: dict[str, Any]) -> None:
        """Keys that are not DateKeys are ignored."""
        entries = make_history({"2025-08-01": True, "2025-08-02": True})
        entries["not-a-date"] = make_complete_entry()
        assert StreakEngine.best_streak(entries, default_goals) == 2

    def test_best_at_least_current_everywhere(
        self, default_goals: dict[str, Any]
    ) -> None:
        """best_streak >= current_streak(d) for every recorded date."""
        pattern = {
            "2025-07-28": True,
            "2025-07-29": False,
            "2025-07-30": True,
            "2025-07-31": True,
            "2025-08-01": True,
            "2025-08-03": True,
            "2025-08-04": True,
        }
        entries = make_history(pattern)
        best = StreakEngine.best_streak(entries, default_goals)
        assert best == 3
        for day in dt_iter_date_keys("2025-07-27", "2025-08-05"):
            assert StreakEngine.current_streak(entries, default_goals, day) <= best

    def test_goal_change_applies_retroactively(
        self, default_goals: dict[str, Any]
    ) -> None:
        """Raising a goal re-evaluates the whole history."""
        entries = make_history({"2025-08-01": True, "2025-08-02": True})
        default_goals[const.TRACK_JAPANESE][const.METRIC_MINE] = 10
        assert StreakEngine.best_streak(entries, default_goals) == 0


# =============================================================================
# Summary
# =============================================================================


class TestSummarize:
    """Snapshot used by the coordinator."""

    def test_stored_best_never_decreases(
        self, three_days: dict[str, Any], default_goals: dict[str, Any]
    ) -> None:
        """A stored 10 wins over a computed 2."""
        summary = StreakEngine.summarize(three_days, default_goals, "2025-08-19", 10)
        assert summary == {
            "current_streak": 2,
            "best_streak_computed": 2,
            "best_streak": 10,
            "today_complete": True,
        }

    def test_computed_best_wins_when_larger(
        self, three_days: dict[str, Any], default_goals: dict[str, Any]
    ) -> None:
        """Stored 1 is raised to the computed 2."""
        summary = StreakEngine.summarize(three_days, default_goals, "2025-08-20", 1)
        assert summary["best_streak"] == 2
        assert summary["current_streak"] == 0
        assert summary["today_complete"] is False

    @pytest.mark.parametrize("stored", [-3, None, "7"])
    def test_bad_stored_best_ignored(
        self,
        three_days: dict[str, Any],
        default_goals: dict[str, Any],
        stored: Any,
    ) -> None:
        """Garbage stored values fall back to the computed best."""
        summary = StreakEngine.summarize(three_days, default_goals, "2025-08-19", stored)
        assert summary["best_streak"] == 2
