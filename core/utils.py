from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def clamp(x, lo: float, hi: float):
    """Clamp scalars or arrays into [lo, hi]."""
    if np.ndim(x) == 0:
        return max(lo, min(hi, float(x)))
    return np.clip(np.asarray(x, dtype=float), lo, hi)


def excel_round(x, decimals: int = 2):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def cohort_month_start(as_of_date: pd.Timestamp, month_index: int) -> pd.Timestamp:
    """
    Calendar month-start for a cohort month index.
    month_index 0 is the month containing as_of_date; -1 the month before, etc.
    """
    base = pd.Timestamp(as_of_date).to_period("M").to_timestamp(how="start")
    return pd.Timestamp(base + relativedelta(months=int(month_index)))
