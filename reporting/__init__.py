"""
Reporting — display-ready summaries of an evaluated scenario.
"""

from .summary import ForecastSummary, generate_forecast_summary

__all__ = [
    "ForecastSummary",
    "generate_forecast_summary",
]
