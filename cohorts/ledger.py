"""
CohortLedger — the session's historical production cohorts.

month_index 0 is the most recent observed production month, -1 the month
before it, and so on. Projected cohorts (month_index >= 1) are derived on
demand from the history and are never stored back into the ledger.

Two horizon-truncation modes exist because consumers need different things:
  - forecast_cohorts(): GENERATION truncation. With EOL active, projected
    cohorts past the horizon are simply not produced.
  - binned(): CONTRIBUTION truncation. A fixed range of month bins is always
    returned (stable chart axes); bins past an active horizon are present but
    carry zero units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from core.config import ForecastConfig, InterventionPolicy
from core.schema import COHORT_COLUMNS
from core.utils import cohort_month_start, excel_round, require_columns

from .projection import Perturbation, SinusoidalPerturbation

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cohort:
    month_index: int
    unit_count: int


@dataclass(frozen=True)
class CohortLedger:
    """Immutable, month-ordered historical cohorts."""

    cohorts: Tuple[Cohort, ...] = ()

    def __post_init__(self):
        ordered = tuple(sorted(self.cohorts, key=lambda c: c.month_index))
        idx = [c.month_index for c in ordered]
        dup = sorted({i for i in idx if idx.count(i) > 1})
        if dup:
            raise ValueError(f"Duplicate cohort month_index values: {dup}")
        neg = [c.month_index for c in ordered if c.unit_count < 0]
        if neg:
            raise ValueError(f"Negative unit_count for month_index {neg}")
        future = [i for i in idx if i > 0]
        if future:
            raise ValueError(f"Historical cohorts must have month_index <= 0, got {future}")
        object.__setattr__(self, "cohorts", ordered)

    # --- construction ---

    @classmethod
    def from_counts(cls, counts: Sequence[int]) -> "CohortLedger":
        """Oldest first; the last count becomes month_index 0."""
        n = len(counts)
        return cls(tuple(
            Cohort(month_index=i - (n - 1), unit_count=int(c)) for i, c in enumerate(counts)
        ))

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "CohortLedger":
        require_columns(frame, COHORT_COLUMNS)
        return cls(tuple(
            Cohort(month_index=int(mi), unit_count=int(uc))
            for mi, uc in zip(frame["month_index"], frame["unit_count"])
        ))

    # --- access ---

    def __len__(self) -> int:
        return len(self.cohorts)

    def __iter__(self) -> Iterator[Cohort]:
        return iter(self.cohorts)

    @property
    def month_indices(self) -> Tuple[int, ...]:
        return tuple(c.month_index for c in self.cohorts)

    def trailing_mean(self, window: int) -> float:
        """Mean unit_count of the last `window` historical cohorts (0.0 if empty)."""
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        recent = [c.unit_count for c in self.cohorts[-window:]]
        return float(np.mean(recent)) if recent else 0.0

    # --- projection ---

    def project(
        self,
        average_window: int,
        horizon: int,
        perturbation: Perturbation,
        *,
        eol_horizon: Optional[int] = None,
    ) -> Tuple[Cohort, ...]:
        """
        Projected cohorts for month_index 1..horizon.

        unit_count = max(0, round(mean + perturbation(month_index))), where mean is
        the trailing average of the last `average_window` historical cohorts.
        Generation stops once month_index exceeds eol_horizon (when given).
        An empty history projects nothing.
        """
        if not self.cohorts:
            return ()
        mean = self.trailing_mean(average_window)
        out = []
        for mi in range(1, int(horizon) + 1):
            if eol_horizon is not None and mi > eol_horizon:
                break
            units = float(excel_round(mean + perturbation(mi), 0))
            out.append(Cohort(month_index=mi, unit_count=max(0, int(units))))
        log.debug("projected %d cohorts from trailing mean %.2f", len(out), mean)
        return tuple(out)

    def forecast_cohorts(
        self,
        policy: InterventionPolicy,
        config: ForecastConfig,
        *,
        perturbation: Optional[Perturbation] = None,
        include_projected: bool = True,
    ) -> Tuple[Cohort, ...]:
        """History plus projection, generation-truncated when the policy enables EOL."""
        if not include_projected:
            return self.cohorts
        projected = self.project(
            config.average_window,
            config.projection_horizon,
            perturbation or default_perturbation(config),
            eol_horizon=policy.eol_horizon if policy.eol_enabled else None,
        )
        return self.cohorts + projected

    def binned(
        self,
        min_index: int,
        max_index: int,
        *,
        policy: InterventionPolicy,
        config: ForecastConfig,
        perturbation: Optional[Perturbation] = None,
    ) -> pd.DataFrame:
        """
        One row per month bin in [min_index, max_index].

        Projection is generated without EOL truncation; bins beyond an active
        horizon are then zeroed instead of dropped. Past bins with no history hold 0.
        """
        full = self.forecast_cohorts(
            policy.with_changes(eol_enabled=False), config, perturbation=perturbation
        )
        units = {c.month_index: c.unit_count for c in full}
        bins = np.arange(int(min_index), int(max_index) + 1)
        beyond = np.array([policy.beyond_eol(int(i)) for i in bins], dtype=bool)
        counts = np.array([units.get(int(i), 0) for i in bins], dtype=int)
        return pd.DataFrame({
            "month_index": bins,
            "unit_count": np.where(beyond, 0, counts),
            "projected": bins > 0,
            "beyond_eol": beyond,
        })

    # --- display ---

    def to_frame(
        self,
        now_offset: int = 0,
        *,
        cohorts: Optional[Iterable[Cohort]] = None,
        as_of_date: Optional[pd.Timestamp] = None,
    ) -> pd.DataFrame:
        """
        Tabular view with each cohort's age relative to a "now" marker.

        now_offset moves the marker forward in months (0 = today); age < 0 means
        the cohort is still in the future relative to the marker.
        """
        rows = list(cohorts) if cohorts is not None else list(self.cohorts)
        df = pd.DataFrame({
            "month_index": [c.month_index for c in rows],
            "unit_count": [c.unit_count for c in rows],
        })
        df["age"] = int(now_offset) - df["month_index"]
        if as_of_date is not None:
            df["month_start"] = [cohort_month_start(as_of_date, mi) for mi in df["month_index"]]
        return df


def default_perturbation(config: ForecastConfig) -> SinusoidalPerturbation:
    return SinusoidalPerturbation(
        amplitude=config.perturbation_amplitude,
        frequency=config.perturbation_frequency,
    )
