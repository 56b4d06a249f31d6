"""
Core package — schema definitions, configuration, parameter state and shared utilities.
No forecasting logic lives here.
"""

from .schema import BASELINE_COLUMNS, COHORT_COLUMNS, PERSISTED_FIELDS
from .config import ForecastConfig, HazardParams, InterventionPolicy
from .exceptions import ForecastError, InvalidParameter
from .state import ScenarioState
from .utils import require_columns, clamp, excel_round

__all__ = [
    "BASELINE_COLUMNS",
    "COHORT_COLUMNS",
    "PERSISTED_FIELDS",
    "ForecastConfig",
    "HazardParams",
    "InterventionPolicy",
    "ForecastError",
    "InvalidParameter",
    "ScenarioState",
    "require_columns",
    "clamp",
    "excel_round",
]
