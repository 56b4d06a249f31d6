"""
Data quality validation for cohort and baseline tables before they enter the model.

Catches problems early:
- Missing columns
- Duplicate or future month indices
- Negative or non-integer unit counts
- Negative observed complaint counts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np
import pandas as pd

from core.schema import BASELINE_COLUMNS, COHORT_COLUMNS


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a table."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_cohorts(cohorts: pd.DataFrame) -> ValidationResult:
    """
    Run all validation checks on a historical cohort table.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    missing = [c for c in COHORT_COLUMNS if c not in cohorts.columns]
    if missing:
        result.errors.append(f"Missing required columns: {missing}")
        return result

    if len(cohorts) == 0:
        result.warnings.append("Cohort table is empty; every forecast will be 0.")
        return result

    idx = pd.to_numeric(cohorts["month_index"], errors="coerce")
    units = pd.to_numeric(cohorts["unit_count"], errors="coerce")

    # --- month_index ---
    n_null = int(idx.isna().sum())
    if n_null > 0:
        result.errors.append(f"{n_null} rows have null/unparseable month_index.")
    n_dup = int(idx.dropna().duplicated().sum())
    if n_dup > 0:
        result.errors.append(f"{n_dup} duplicate month_index values found.")
    n_future = int((idx > 0).sum())
    if n_future > 0:
        result.errors.append(
            f"{n_future} rows have month_index > 0 — historical cohorts cannot be in the future."
        )
    valid_idx = idx.dropna()
    if len(valid_idx) > 1:
        span = int(valid_idx.max() - valid_idx.min()) + 1
        n_gaps = span - int(valid_idx.nunique())
        if n_gaps > 0:
            result.warnings.append(
                f"{n_gaps} months missing inside the cohort span "
                "(not filled; projections average only the months present)."
            )
    if len(valid_idx) and valid_idx.max() < 0:
        result.warnings.append("No cohort at month_index 0 — most recent month has no production data.")

    # --- unit_count ---
    n_null = int(units.isna().sum())
    if n_null > 0:
        result.errors.append(f"{n_null} rows have null/unparseable unit_count.")
    n_neg = int((units < 0).sum())
    if n_neg > 0:
        result.errors.append(f"{n_neg} rows have negative unit_count.")
    vals = units.dropna().to_numpy(dtype=float)
    n_frac = int((~np.isclose(vals, np.round(vals))).sum())
    if n_frac > 0:
        result.warnings.append(f"{n_frac} rows have fractional unit_count (will be truncated).")

    return result


def validate_baseline(baseline: pd.DataFrame) -> ValidationResult:
    """Validate an observed-complaints table (offset, observed_count)."""
    result = ValidationResult()

    missing = [c for c in BASELINE_COLUMNS if c not in baseline.columns]
    if missing:
        result.errors.append(f"Missing required columns: {missing}")
        return result

    if len(baseline) == 0:
        result.errors.append("Baseline table is empty (0 rows).")
        return result

    offsets = pd.to_numeric(baseline["offset"], errors="coerce")
    counts = pd.to_numeric(baseline["observed_count"], errors="coerce")

    if offsets.isna().any():
        result.errors.append(f"{int(offsets.isna().sum())} rows have null/unparseable offset.")
    n_dup = int(offsets.dropna().duplicated().sum())
    if n_dup > 0:
        result.errors.append(f"{n_dup} duplicate offsets found.")
    if counts.isna().any():
        result.errors.append(f"{int(counts.isna().sum())} rows have null/unparseable observed_count.")
    n_neg = int((counts < 0).sum())
    if n_neg > 0:
        result.errors.append(f"{n_neg} rows have negative observed_count.")
    if len(baseline) < 6:
        result.warnings.append(f"Only {len(baseline)} baseline months — the average will be noisy.")

    return result
