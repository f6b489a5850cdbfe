# File: utils/__init__.py
"""Pure Python utilities for Immersion Tracker.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: DateKey parsing, calendar arithmetic, week keys

Usage:
    from .utils import dt_utils
    from .utils.dt_utils import dt_shift, dt_week_key
"""

from . import dt_utils

__all__ = ["dt_utils"]
