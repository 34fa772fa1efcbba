# File: utils/__init__.py
"""Pure Python utilities for BabyCare.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: Date parsing, month arithmetic and display formatting
    - math_utils: Progress percentage calculations

Usage:
    from . import dt_utils
    from .math_utils import calculate_percentage
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
