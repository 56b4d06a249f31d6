from __future__ import annotations

from typing import Optional

import pandas as pd

from .cohort_builder import (
    build_cohorts_from_production,
    select_baseline_columns,
    select_cohort_columns,
)


def load_cohort_csv(path: str) -> pd.DataFrame:
    """
    Load a cohort table (month_index, unit_count). Common header variants such as
    monthIndex / machines are accepted.
    """
    return select_cohort_columns(pd.read_csv(path))


def load_production_csv(path: str, as_of: Optional[pd.Timestamp] = None) -> pd.DataFrame:
    """
    Load raw production records (one row per lot or unit) and aggregate them into
    a cohort table. The latest production month is month_index 0 unless as_of is given.
    """
    return build_cohorts_from_production(pd.read_csv(path), as_of)


def load_baseline_csv(path: str) -> pd.DataFrame:
    """Load an observed-complaints table (offset, observed_count)."""
    return select_baseline_columns(pd.read_csv(path))
