# File: helpers/__init__.py
"""Home Assistant-bound helper functions for Immersion Tracker.

Functions that depend on Home Assistant utilities belong here, NOT in utils/.

Submodules:
    - backup_helpers: Export / import of the persisted state

Usage:
    from .helpers import backup_helpers as bh
"""

from . import backup_helpers

__all__ = ["backup_helpers"]
