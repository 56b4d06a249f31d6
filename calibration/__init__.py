"""
Calibration — align model output with an observed baseline rate.

  baseline.py — spike-filtered recent average of observed counts
  factor.py   — scalar correction observed / reference, clamped
"""

from .baseline import BaselineWindow, BaselineSummary, filtered_average, summarize_baseline, toggle_exclusion
from .factor import derive_factor

__all__ = [
    "BaselineWindow",
    "BaselineSummary",
    "filtered_average",
    "summarize_baseline",
    "toggle_exclusion",
    "derive_factor",
]
