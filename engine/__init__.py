"""
Forecast engine — expected failure counts and fielded population, plus the runner query surface.
"""

from .forecast import cohort_contributions, expected_count, field_population, top_contributors
from .runner import ForecastRunner, ScenarioResult, run_scenario

__all__ = [
    "cohort_contributions",
    "expected_count",
    "field_population",
    "top_contributors",
    "ForecastRunner",
    "ScenarioResult",
    "run_scenario",
]
