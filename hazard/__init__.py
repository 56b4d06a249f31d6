"""
Hazard models — convert a unit's age in months into a failure probability.
"""

from .weibull import cdf, monthly_hazard, hazard_curve, WeibullHazardModel

__all__ = [
    "cdf",
    "monthly_hazard",
    "hazard_curve",
    "WeibullHazardModel",
]
