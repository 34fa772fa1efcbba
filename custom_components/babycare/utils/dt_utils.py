# File: utils/dt_utils.py
"""Date and time utilities for BabyCare.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

NO `homeassistant.*` imports allowed.
   Uses standard library datetime and zoneinfo, plus dateutil.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_parse_date: Parse date strings and date-like values
    - dt_add_months: Calendar month arithmetic
    - dt_subtract_units: Subtract N days / months / years from a date
    - dt_start_of_month: First day of a date's month
    - dt_is_same_month: Same calendar month and year check
    - dt_format_long: Format a date as "March 1, 2024"
"""

from __future__ import annotations

from datetime import date, datetime
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Unit constants
TIME_UNIT_DAYS = "days"
TIME_UNIT_MONTHS = "months"
TIME_UNIT_YEARS = "years"

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


# ==============================================================================
# Date Parsing
# ==============================================================================


def dt_parse_date(value: str | date | datetime | None) -> date | None:
    """Safely normalize a date-like value into a `datetime.date`.

    Accepts:
    - datetime.date / datetime.datetime (time part dropped)
    - "2025-04-07" (ISO format)
    - "2025-04-07T10:00:00+00:00" (ISO datetime, date part kept)
    - "04/07/2025" (US format)

    Returns:
        datetime.date or None if parsing fails.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None

    text = value.strip()

    # Try ISO format first (most common)
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("Unable to parse date value: %r", value)
    return None


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_add_months(base: date, months: int) -> date:
    """Add calendar months to a date.

    Day-of-month is clamped to the last valid day of the target month.

    Examples:
        dt_add_months(date(2024, 1, 15), 2) → date(2024, 3, 15)
        dt_add_months(date(2024, 1, 31), 1) → date(2024, 2, 29)
    """
    return base + relativedelta(months=months)


def dt_subtract_units(base: date, amount: int, unit: str) -> date:
    """Subtract ``amount`` days, months or years from ``base``.

    Unknown units leave ``base`` unchanged.
    """
    if unit == TIME_UNIT_DAYS:
        return base - relativedelta(days=amount)
    if unit == TIME_UNIT_MONTHS:
        return base - relativedelta(months=amount)
    if unit == TIME_UNIT_YEARS:
        return base - relativedelta(years=amount)

    _LOGGER.warning("Unsupported time unit '%s', date left unchanged", unit)
    return base


def dt_start_of_month(value: date) -> date:
    """Return the first day of ``value``'s month."""
    return value.replace(day=1)


def dt_is_same_month(first: date, second: date) -> bool:
    """Return True when both dates fall in the same calendar month and year."""
    return first.year == second.year and first.month == second.month


# ==============================================================================
# Formatting
# ==============================================================================


def dt_format_long(value: date) -> str:
    """Format a date the long US way.

    ``strftime`` pads the day and depends on the process locale, so the month
    name comes from a fixed table.

    Example:
        dt_format_long(date(2024, 3, 1)) → "March 1, 2024"
    """
    return f"{_MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"
