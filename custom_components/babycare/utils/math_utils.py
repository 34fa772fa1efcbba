# File: utils/math_utils.py
"""Math and calculation utilities for BabyCare.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

NO `homeassistant.*` imports allowed.

Functions:
    - round_half_up: Rounding with halves going up
    - calculate_percentage: Whole-number progress percentage
    - parse_leading_int: Parse the leading integer of a free-text value
"""

from __future__ import annotations

import logging
import math
import re

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Leading integer of a token, "3months" parses as 3
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    Python's built-in ``round`` uses banker's rounding (``round(12.5) == 12``),
    progress percentages must show 12.5 as 13.

    Examples:
        round_half_up(13.04) → 13
        round_half_up(12.5) → 13
        round_half_up(0.49) → 0
    """
    return math.floor(value + 0.5)


def calculate_percentage(current: int, total: int) -> int:
    """Calculate a whole-number completion percentage.

    Args:
        current: Number of completed items
        total: Total number of items

    Returns:
        Percentage (0-100), or 0 if total is 0

    Examples:
        calculate_percentage(3, 23) → 13
        calculate_percentage(23, 23) → 100
        calculate_percentage(5, 0) → 0  # Division by zero protection
    """
    if total <= 0:
        return 0
    return round_half_up((current / total) * 100)


def parse_leading_int(text: str | None, default: int = 0) -> int:
    """Parse the first space-separated token of ``text`` as an integer.

    Digits at the start of the token are used; a token without leading
    digits falls back to ``default``.

    Examples:
        parse_leading_int("3 months") → 3
        parse_leading_int("3months") → 3
        parse_leading_int("abc days") → 0
        parse_leading_int("") → 0
    """
    if not text or not isinstance(text, str):
        return default

    match = _LEADING_INT_RE.match(text.split(" ")[0])
    if match is None:
        _LOGGER.debug("Non-numeric leading token in %r, using %s", text, default)
        return default
    return int(match.group(1))
