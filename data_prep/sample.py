"""
Demonstration dataset: 18 months of production and 12 months of observed complaints.

Toy values, used by the dashboard when no files are supplied. The complaint
series has one deliberate spike (month 7) for the exclusion exercise.
"""

from __future__ import annotations

from typing import Tuple

import pandas as pd

from calibration.baseline import BaselineWindow
from cohorts.ledger import CohortLedger

SAMPLE_PRODUCTION: Tuple[int, ...] = (
    780, 820, 760, 790, 810, 845, 870, 860, 830,
    800, 790, 805, 820, 835, 860, 880, 900, 910,
)

SAMPLE_COMPLAINTS: Tuple[int, ...] = (8, 10, 9, 12, 11, 10, 9, 13, 12, 11, 10, 9)
SAMPLE_SPIKE_OFFSET = 7
SAMPLE_SPIKE_VALUE = 45


def sample_ledger() -> CohortLedger:
    """Cohorts at month_index -17..0."""
    return CohortLedger.from_counts(SAMPLE_PRODUCTION)


def sample_baseline(with_spike: bool = True) -> BaselineWindow:
    counts = [
        SAMPLE_SPIKE_VALUE if (with_spike and i == SAMPLE_SPIKE_OFFSET) else v
        for i, v in enumerate(SAMPLE_COMPLAINTS)
    ]
    return BaselineWindow.from_counts(counts)


def sample_cohort_frame() -> pd.DataFrame:
    return sample_ledger().to_frame().loc[:, ["month_index", "unit_count"]]
