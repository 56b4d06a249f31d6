"""
Expected failure counts and fielded population from a set of cohorts.

For a target month `target_offset` months from now (0 = the current month):

    age_c      = -month_index_c + target_offset
    expected   = calibration_factor * sum_c( units_c * h(age_c) * cm_c )

where h is the discrete monthly Weibull hazard and cm_c is the policy's
cm_factor for cohorts produced strictly after the countermeasure cutoff
(1.0 otherwise). Cohorts not yet built at the target month (age < 0) and
cohorts beyond an enabled end-of-life horizon contribute nothing.

All functions are pure: the same cohorts and parameters always give the same
numbers, bit for bit.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from cohorts.ledger import Cohort
from core.config import HazardParams, InterventionPolicy
from hazard.weibull import monthly_hazard


def _as_arrays(cohorts: Sequence[Cohort]) -> Tuple[np.ndarray, np.ndarray]:
    idx = np.fromiter((c.month_index for c in cohorts), dtype=int, count=len(cohorts))
    units = np.fromiter((c.unit_count for c in cohorts), dtype=float, count=len(cohorts))
    return idx, units


def _cm_factors(idx: np.ndarray, policy: InterventionPolicy) -> np.ndarray:
    return np.where(idx > policy.cm_start_index, float(policy.cm_factor), 1.0)


def _eol_mask(idx: np.ndarray, policy: InterventionPolicy) -> np.ndarray:
    """True where the cohort is still counted under the policy's EOL horizon."""
    if not policy.eol_enabled:
        return np.ones(len(idx), dtype=bool)
    return idx <= policy.eol_horizon


def cohort_contributions(
    target_offset: int,
    cohorts: Sequence[Cohort],
    hazard_params: HazardParams,
    policy: InterventionPolicy,
    calibration_factor: float = 1.0,
) -> pd.DataFrame:
    """
    Per-cohort breakdown of expected_count().

    Returns
    -------
    DataFrame with one row per cohort:
        month_index, unit_count, age, hazard, cm_factor, contribution
    Cohorts that do not exist yet (age < 0) or are past EOL have contribution 0.
    """
    idx, units = _as_arrays(cohorts)
    age = -idx + int(target_offset)
    haz = monthly_hazard(age, hazard_params.alpha, hazard_params.beta) if len(idx) else np.zeros(0)
    cm = _cm_factors(idx, policy)
    live = (age >= 0) & _eol_mask(idx, policy)
    contrib = np.where(live, units * haz * cm, 0.0) * float(calibration_factor)
    return pd.DataFrame({
        "month_index": idx,
        "unit_count": units.astype(int),
        "age": age,
        "hazard": np.asarray(haz, dtype=float),
        "cm_factor": cm,
        "contribution": contrib,
    })


def expected_count(
    target_offset: int,
    cohorts: Sequence[Cohort],
    hazard_params: HazardParams,
    policy: InterventionPolicy,
    calibration_factor: float = 1.0,
) -> float:
    """Expected failures in the month `target_offset` months ahead (>= 0)."""
    if len(cohorts) == 0:
        return 0.0
    idx, units = _as_arrays(cohorts)
    age = -idx + int(target_offset)
    live = (age >= 0) & _eol_mask(idx, policy)
    if not live.any():
        return 0.0
    haz = monthly_hazard(age[live], hazard_params.alpha, hazard_params.beta)
    total = float(np.sum(units[live] * haz * _cm_factors(idx[live], policy)))
    return total * float(calibration_factor)


def field_population(
    offset: int,
    cohorts: Sequence[Cohort],
    policy: InterventionPolicy,
) -> int:
    """Units in the field `offset` months ahead: every cohort built by then, minus anything past EOL."""
    if len(cohorts) == 0:
        return 0
    idx, units = _as_arrays(cohorts)
    keep = (idx <= int(offset)) & _eol_mask(idx, policy)
    return int(units[keep].sum())


def top_contributors(contributions: pd.DataFrame, n: int = 3) -> pd.DataFrame:
    """The n cohorts contributing most; ties keep month order."""
    return contributions.sort_values("contribution", ascending=False, kind="mergesort").head(n)
