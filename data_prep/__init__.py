"""
Data preparation — loading CSVs, building cohort tables, validation, demo data.
"""

from .loader import load_cohort_csv, load_production_csv, load_baseline_csv
from .cohort_builder import (
    canonicalize_columns,
    months_between,
    build_cohorts_from_production,
    select_cohort_columns,
    select_baseline_columns,
)
from .validators import ValidationResult, validate_cohorts, validate_baseline
from .sample import sample_ledger, sample_baseline

__all__ = [
    "load_cohort_csv",
    "load_production_csv",
    "load_baseline_csv",
    "canonicalize_columns",
    "months_between",
    "build_cohorts_from_production",
    "select_cohort_columns",
    "select_baseline_columns",
    "ValidationResult",
    "validate_cohorts",
    "validate_baseline",
    "sample_ledger",
    "sample_baseline",
]
