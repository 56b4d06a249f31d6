"""
Build cohort and baseline tables from raw production / complaint records.

Raw production data usually arrives as one row per unit (or per batch) with a
production date. The forecast wants one row per production month, indexed
relative to the as-of month: 0 for the as-of month itself, -1 for the month
before, etc.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd

from core.schema import BASELINE_COLUMNS, COHORT_COLUMNS
from core.utils import require_columns


_COLUMN_ALIASES: Dict[str, str] = {
    # cohort tables
    "monthIndex": "month_index",
    "MonthIndex": "month_index",
    "machines": "unit_count",
    "units": "unit_count",
    "unitCount": "unit_count",
    "Units": "unit_count",
    # baseline tables
    "observedCount": "observed_count",
    "complaints": "observed_count",
    "Complaints": "observed_count",
    # raw records
    "Production Date": "production_date",
    "ProductionDate": "production_date",
    "productionDate": "production_date",
    "Quantity": "quantity",
    "qty": "quantity",
}


def canonicalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with common column name aliases normalized and duplicates coalesced."""
    if df.empty:
        return df.copy()

    ren = {c: _COLUMN_ALIASES.get(c, c) for c in df.columns}
    out = df.rename(columns=ren).copy()

    # aliases can collide with an already-canonical column; take first non-null
    if out.columns.duplicated().any():
        new_cols: List[str] = []
        parts: List[pd.Series] = []
        cols = list(out.columns)
        for name in dict.fromkeys(cols):
            idxs = [i for i, c in enumerate(cols) if c == name]
            s = out.iloc[:, idxs[0]]
            for j in idxs[1:]:
                s = s.combine_first(out.iloc[:, j])
            new_cols.append(name)
            parts.append(s)
        out = pd.concat(parts, axis=1)
        out.columns = new_cols

    return out


def months_between(start: pd.Timestamp, end: pd.Timestamp) -> int:
    """Whole calendar months from start's month to end's month (negative if end is earlier)."""
    s = pd.Timestamp(start)
    e = pd.Timestamp(end)
    return (e.year - s.year) * 12 + (e.month - s.month)


def build_cohorts_from_production(
    records: pd.DataFrame,
    as_of: Optional[pd.Timestamp] = None,
    *,
    date_col: str = "production_date",
    quantity_col: Optional[str] = "quantity",
) -> pd.DataFrame:
    """
    Aggregate production records into monthly cohorts.

    - If `as_of` is None, the latest production month becomes month_index 0.
    - Records after the as-of month are dropped (they are not history yet).
    - Without a quantity column every record counts as one unit.
    - Months with no production inside the observed span appear with 0 units.
    """
    df = canonicalize_columns(records)
    if date_col not in df.columns:
        raise ValueError(f"Missing required column: {date_col!r}")

    df["_ts"] = pd.to_datetime(df[date_col], errors="coerce")
    df = df.dropna(subset=["_ts"])
    if df.empty:
        raise ValueError("No parseable production dates.")

    as_of_ts = pd.Timestamp(as_of) if as_of is not None else df["_ts"].max()
    df = df[df["_ts"].dt.to_period("M") <= as_of_ts.to_period("M")].copy()
    if df.empty:
        raise ValueError("No production at or before the provided as_of date.")

    if quantity_col and quantity_col in df.columns:
        df["_qty"] = pd.to_numeric(df[quantity_col], errors="coerce").fillna(0).astype(int)
    else:
        df["_qty"] = 1

    df["month_index"] = [months_between(as_of_ts, ts) for ts in df["_ts"]]
    grouped = df.groupby("month_index")["_qty"].sum()

    full = pd.RangeIndex(int(grouped.index.min()), 1, name="month_index")
    cohorts = grouped.reindex(full, fill_value=0).rename("unit_count").reset_index()
    cohorts["unit_count"] = cohorts["unit_count"].astype(int)
    return cohorts.loc[:, list(COHORT_COLUMNS)]


def select_cohort_columns(df: pd.DataFrame) -> pd.DataFrame:
    d2 = canonicalize_columns(df)
    require_columns(d2, COHORT_COLUMNS)
    return d2.loc[:, list(COHORT_COLUMNS)].copy()


def select_baseline_columns(df: pd.DataFrame) -> pd.DataFrame:
    d2 = canonicalize_columns(df)
    require_columns(d2, BASELINE_COLUMNS)
    return d2.loc[:, list(BASELINE_COLUMNS)].copy()
