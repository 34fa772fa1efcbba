"""Engine modules for BabyCare integration.

Contains specialized computation engines:
- vaccination_engine: Birth-date estimation, dose schedule generation,
  date grouping, status classification and progress
"""

# Use relative imports within package to avoid mypy module resolution issues
from .vaccination_engine import (
    VACCINE_DOSE_IDS,
    VACCINE_DOSES,
    DateGroup,
    RelevantDates,
    ScheduleView,
    VaccinationEngine,
    VaccinationEntry,
    VaccinationProgress,
    VaccineDose,
)

__all__ = [
    "VACCINE_DOSES",
    "VACCINE_DOSE_IDS",
    "DateGroup",
    "RelevantDates",
    "ScheduleView",
    "VaccinationEngine",
    "VaccinationEntry",
    "VaccinationProgress",
    "VaccineDose",
]
