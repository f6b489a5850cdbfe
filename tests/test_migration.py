"""Tests for migrate() and get_default_structure().

migrate() must turn any payload into a valid state without raising.
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from custom_components.immersion_tracker import const
from custom_components.immersion_tracker.data_builders import build_daily_entry
from custom_components.immersion_tracker.migration import (
    get_default_structure,
    migrate,
)
from tests.helpers import make_complete_entry

JA = const.TRACK_JAPANESE
KO = const.TRACK_KOREAN


class TestDefaultStructure:
    """Canonical empty state."""

    def test_shape(self) -> None:
        """Every section present, best streak zero, current schema."""
        state = get_default_structure()
        assert state[const.DATA_CONFIG][const.DATA_CONFIG_GOALS] == const.DEFAULT_GOALS
        assert (
            state[const.DATA_CONFIG][const.DATA_CONFIG_WEEKLY]
            == const.DEFAULT_WEEKLY_CONFIG
        )
        assert state[const.DATA_ENTRIES] == {}
        assert state[const.DATA_WEEKLY] == {}
        assert state[const.DATA_META] == {
            const.DATA_META_BEST_STREAK: 0,
            const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
        }


class TestMigrateShapes:
    """Whole-payload repair."""

    @pytest.mark.parametrize("raw", [None, [], "state", 42])
    def test_non_dict_payload(self, raw: Any) -> None:
        """Anything that is not an object yields defaults."""
        assert migrate(raw) == get_default_structure()

    def test_empty_dict(self) -> None:
        """Missing sections are filled."""
        assert migrate({}) == get_default_structure()

    @pytest.mark.parametrize(
        "section",
        [const.DATA_CONFIG, const.DATA_ENTRIES, const.DATA_WEEKLY, const.DATA_META],
    )
    def test_wrong_section_type(self, section: str) -> None:
        """A list where an object belongs is replaced with defaults."""
        state = migrate({section: ["oops"]})
        assert state == get_default_structure()

    def test_unknown_top_level_keys_dropped(self) -> None:
        """Only the known sections survive."""
        state = migrate({"theme": "dark", const.DATA_ENTRIES: {}})
        assert set(state) == {
            const.DATA_CONFIG,
            const.DATA_ENTRIES,
            const.DATA_WEEKLY,
            const.DATA_META,
        }

    def test_input_not_modified(self) -> None:
        """migrate() never mutates what it is given."""
        raw = {
            const.DATA_ENTRIES: {"2025-08-18": {JA: {"watch": "x"}}},
            const.DATA_META: {"bestStreak": 3},
        }
        snapshot = copy.deepcopy(raw)
        migrate(raw)
        assert raw == snapshot

    def test_valid_state_round_trips(self) -> None:
        """A valid current state comes back unchanged."""
        state = get_default_structure()
        state[const.DATA_ENTRIES]["2025-08-18"] = make_complete_entry()
        state[const.DATA_META][const.DATA_META_BEST_STREAK] = 1
        state[const.DATA_CONFIG][const.DATA_CONFIG_UI] = {"compact": True}
        assert migrate(copy.deepcopy(state)) == state


class TestMigrateEntries:
    """Per-entry repair."""

    def test_bad_keys_and_values_dropped(self) -> None:
        """Invalid DateKeys and non-object entries disappear."""
        state = migrate(
            {
                const.DATA_ENTRIES: {
                    "2025-08-18": make_complete_entry(),
                    "2025-02-30": make_complete_entry(),
                    "yesterday": make_complete_entry(),
                    "2025-08-19": "done",
                }
            }
        )
        assert list(state[const.DATA_ENTRIES]) == ["2025-08-18"]

    def test_metric_coercion(self) -> None:
        """Non-numbers become 0; negatives survive; bools coerce."""
        state = migrate(
            {
                const.DATA_ENTRIES: {
                    "2025-08-18": {
                        JA: {
                            "watch": "30",
                            "read": -5,
                            "mine": float("nan"),
                            "anki": 1,
                            "shadowing": None,
                        },
                        KO: "broken",
                        "notes": 12,
                    }
                }
            }
        )
        entry = state[const.DATA_ENTRIES]["2025-08-18"]
        assert entry[JA] == {
            "watch": 0,
            "read": -5,
            "mine": 0,
            "anki": True,
            "shadowing": False,
        }
        assert entry[KO] == build_daily_entry()[KO]
        assert entry[const.DATA_ENTRY_NOTES] == "12"

    def test_legacy_note_field(self) -> None:
        """Entry-level `note` becomes `notes`."""
        state = migrate(
            {const.DATA_ENTRIES: {"2025-08-18": {"note": "first day"}}}
        )
        entry = state[const.DATA_ENTRIES]["2025-08-18"]
        assert entry[const.DATA_ENTRY_NOTES] == "first day"
        assert "note" not in entry


class TestMigrateConfig:
    """Goal and weekly configuration repair."""

    def test_partial_goals_merged_over_defaults(self) -> None:
        """Stored thresholds win; missing ones come from defaults."""
        state = migrate(
            {const.DATA_CONFIG: {const.DATA_CONFIG_GOALS: {JA: {"watch": 60}}}}
        )
        goals = state[const.DATA_CONFIG][const.DATA_CONFIG_GOALS]
        assert goals[JA]["watch"] == 60
        assert goals[JA]["read"] == 20
        assert goals[KO] == const.DEFAULT_GOALS[KO]

    def test_invalid_goals_ignored(self) -> None:
        """Negative or non-numeric thresholds fall back to defaults."""
        state = migrate(
            {
                const.DATA_CONFIG: {
                    const.DATA_CONFIG_GOALS: {
                        JA: {"watch": -1, "read": "20", "anki": "yes"},
                        "french": {"watch": 10},
                    }
                }
            }
        )
        assert state[const.DATA_CONFIG][const.DATA_CONFIG_GOALS] == const.DEFAULT_GOALS

    def test_weekly_config(self) -> None:
        """Known obligations with bool values only."""
        state = migrate(
            {
                const.DATA_CONFIG: {
                    const.DATA_CONFIG_WEEKLY: {
                        const.WEEKLY_REVIEW_NOTES: True,
                        const.WEEKLY_KOREAN_LESSON: "no",
                        "gym": True,
                    }
                }
            }
        )
        assert state[const.DATA_CONFIG][const.DATA_CONFIG_WEEKLY] == {
            const.WEEKLY_JAPANESE_LESSON: True,
            const.WEEKLY_KOREAN_LESSON: True,
            const.WEEKLY_REVIEW_NOTES: True,
        }


class TestMigrateWeekly:
    """Weekly entries are keyed by Monday."""

    def test_non_monday_keys_folded(self) -> None:
        """Two keys of the same week merge with OR."""
        state = migrate(
            {
                const.DATA_WEEKLY: {
                    "2025-08-20": {const.WEEKLY_JAPANESE_LESSON: True},
                    "2025-08-18": {
                        const.WEEKLY_JAPANESE_LESSON: False,
                        const.WEEKLY_KOREAN_LESSON: True,
                    },
                    "bad": {const.WEEKLY_REVIEW_NOTES: True},
                }
            }
        )
        assert state[const.DATA_WEEKLY] == {
            "2025-08-18": {
                const.WEEKLY_JAPANESE_LESSON: True,
                const.WEEKLY_KOREAN_LESSON: True,
                const.WEEKLY_REVIEW_NOTES: False,
            }
        }


class TestMigrateMeta:
    """Best streak and schema version."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ({const.DATA_META: {"best_streak": 4}}, 4),
            ({const.DATA_META: {"bestStreak": 6}}, 6),
            ({"bestStreak": 8}, 8),
            ({const.DATA_META: {"best_streak": 2, "bestStreak": 9}}, 2),
            ({const.DATA_META: {"best_streak": -1}}, 0),
            ({const.DATA_META: {"best_streak": 2.5}}, 0),
            ({const.DATA_META: {"best_streak": "7"}}, 0),
        ],
    )
    def test_best_streak_sources(self, raw: dict[str, Any], expected: int) -> None:
        """Current key first, then the legacy camelCase ones."""
        state = migrate(raw)
        assert state[const.DATA_META][const.DATA_META_BEST_STREAK] == expected

    def test_schema_version_upgraded(self) -> None:
        """Legacy payloads are stamped with the current version."""
        state = migrate({const.DATA_META: {const.DATA_META_SCHEMA_VERSION: 1}})
        assert (
            state[const.DATA_META][const.DATA_META_SCHEMA_VERSION]
            == const.SCHEMA_VERSION_CURRENT
        )
