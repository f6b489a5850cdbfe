"""Test helpers for Immersion Tracker tests.

    from tests.helpers import make_complete_entry, make_history

See individual modules for full documentation:
- scenarios.py: Daily entries and histories for engine and service tests
"""

from tests.helpers.scenarios import (
    make_complete_entry,
    make_history,
    make_incomplete_entry,
)

__all__ = [
    "make_complete_entry",
    "make_history",
    "make_incomplete_entry",
]
