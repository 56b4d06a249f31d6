"""
Weibull aging curve.

    F(t) = 1 - exp(-(t / alpha) ** beta),  t > 0
    F(t) = 0,                              t <= 0

The forecast works in whole months, so the quantity actually consumed is the
discrete monthly hazard: the probability mass of failing inside [m, m + 1),
i.e. F(m + 1) - F(m). This is the unconditional per-month failure share of a
cohort, which is what gets multiplied by the cohort's unit count.

Ages may be scalars or numpy arrays. Negative ages are legal and yield 0 — the
engine routinely asks about cohorts that have not been built yet.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from core.config import HazardParams, validate_hazard_params


def cdf(t, alpha: float, beta: float):
    """Cumulative failure probability at age t (months)."""
    validate_hazard_params(alpha, beta)
    t_arr = np.asarray(t, dtype=float)
    pos = np.maximum(t_arr, 0.0)
    out = np.where(t_arr > 0, 1.0 - np.exp(-np.power(pos / alpha, beta)), 0.0)
    return float(out) if out.ndim == 0 else out


def monthly_hazard(m, alpha: float, beta: float):
    """Probability that a unit of age m fails within [m, m + 1), clamped to [0, 1]."""
    m_arr = np.asarray(m, dtype=float)
    raw = np.asarray(cdf(m_arr + 1.0, alpha, beta)) - np.asarray(cdf(m_arr, alpha, beta))
    out = np.where(m_arr < 0, 0.0, np.clip(raw, 0.0, 1.0))
    return float(out) if out.ndim == 0 else out


def hazard_curve(params: HazardParams, max_age: int = 60) -> pd.DataFrame:
    """
    Monthly hazard over ages 0..max_age, plus a copy normalized to its peak.

    The normalized column is for plotting only; the engine never reads it.
    """
    if max_age < 0:
        raise ValueError(f"max_age must be >= 0, got {max_age}")
    ages = np.arange(0, int(max_age) + 1)
    haz = monthly_hazard(ages, params.alpha, params.beta)
    peak = float(haz.max()) if len(haz) else 0.0
    denom = peak if peak > 0 else 1.0
    return pd.DataFrame({
        "age": ages,
        "hazard": haz,
        "normalized": haz / denom,
    })


@dataclass(frozen=True)
class WeibullHazardModel:
    """Bound form of the curve for callers that pass one object around."""

    params: HazardParams = HazardParams()

    def cdf(self, t):
        return cdf(t, self.params.alpha, self.params.beta)

    def monthly_hazard(self, m):
        return monthly_hazard(m, self.params.alpha, self.params.beta)

    def curve(self, max_age: int = 60) -> pd.DataFrame:
        return hazard_curve(self.params, max_age)
