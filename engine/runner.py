"""
Forecast runner — the query surface the presentation layer calls.

A ForecastRunner binds one session's historical ledger to a ForecastConfig.
Every query receives the operator parameters explicitly (or as one
ScenarioState snapshot via run_scenario), recomputes projected cohorts, and
returns plain numbers or DataFrames. Nothing is cached between calls, so a
query always sees one consistent set of inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Optional

import pandas as pd

from calibration.baseline import BaselineWindow, filtered_average
from calibration.factor import derive_factor
from cohorts.ledger import CohortLedger
from cohorts.projection import Perturbation
from core.config import ForecastConfig, HazardParams, InterventionPolicy
from core.state import ScenarioState
from hazard.weibull import WeibullHazardModel

from .forecast import cohort_contributions, expected_count, field_population

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastRunner:
    ledger: CohortLedger
    config: ForecastConfig = field(default_factory=ForecastConfig)
    perturbation: Optional[Perturbation] = None

    def _cohorts(self, policy: InterventionPolicy, *, include_projected: bool = True):
        return self.ledger.forecast_cohorts(
            policy,
            self.config,
            perturbation=self.perturbation,
            include_projected=include_projected,
        )

    # --- query surface ---

    def compute_forecast_series(
        self,
        start_offset: int,
        count: int,
        hazard_params: HazardParams,
        policy: InterventionPolicy,
        calibration_factor: float = 1.0,
    ) -> pd.DataFrame:
        """Expected counts for offsets start_offset .. start_offset + count - 1."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        cohorts = self._cohorts(policy)
        offsets = list(range(int(start_offset), int(start_offset) + int(count)))
        values = [
            expected_count(k, cohorts, hazard_params, policy, calibration_factor)
            for k in offsets
        ]
        return pd.DataFrame({"offset": offsets, "expected_count": values})

    def compute_field_population(self, offset: int, policy: InterventionPolicy) -> int:
        return field_population(offset, self._cohorts(policy), policy)

    def compute_baseline_average(
        self, window: BaselineWindow, exclusions: AbstractSet[int]
    ) -> float:
        return filtered_average(window, exclusions)

    def reference_forecast(self, hazard_params: HazardParams) -> float:
        """Uncalibrated, history-only, no-intervention forecast for the current month."""
        neutral = InterventionPolicy.neutral()
        return expected_count(
            0, self._cohorts(neutral, include_projected=False), hazard_params, neutral, 1.0
        )

    def compute_calibration_factor(
        self, observed_baseline: float, hazard_params: HazardParams
    ) -> float:
        return derive_factor(
            observed_baseline,
            self.reference_forecast(hazard_params),
            bounds=self.config.calibration_bounds,
        )

    def calibrate_from_baseline(
        self,
        window: BaselineWindow,
        exclusions: AbstractSet[int],
        hazard_params: HazardParams,
    ) -> float:
        """Calibration factor against the spike-filtered baseline average."""
        return self.compute_calibration_factor(
            filtered_average(window, exclusions), hazard_params
        )

    def get_hazard_curve(
        self, hazard_params: HazardParams, max_age: Optional[int] = None
    ) -> pd.DataFrame:
        return WeibullHazardModel(hazard_params).curve(
            self.config.curve_max_age if max_age is None else max_age
        )

    # --- analysis views ---

    def contributions(
        self,
        target_offset: int,
        hazard_params: HazardParams,
        policy: InterventionPolicy,
        calibration_factor: float = 1.0,
        *,
        include_projected: bool = False,
    ) -> pd.DataFrame:
        return cohort_contributions(
            target_offset,
            self._cohorts(policy, include_projected=include_projected),
            hazard_params,
            policy,
            calibration_factor,
        )

    def cohort_bins(self, policy: InterventionPolicy) -> pd.DataFrame:
        """Fixed-axis cohort bins with EOL applied by zeroing (contribution truncation)."""
        lo, hi = self.config.bin_range
        return self.ledger.binned(
            lo, hi, policy=policy, config=self.config, perturbation=self.perturbation
        )

    def countermeasure_bins(self, policy: InterventionPolicy) -> pd.DataFrame:
        """Per-bin base units and the units still at full risk after the countermeasure."""
        bins = self.cohort_bins(policy)
        after_cm = bins["month_index"].map(policy.cm_applies).astype(bool)
        bins["after_cm"] = after_cm
        bins["effective_units"] = bins["unit_count"].where(
            ~after_cm, bins["unit_count"] * float(policy.cm_factor)
        ).astype(float)
        return bins


@dataclass
class ScenarioResult:
    series: pd.DataFrame
    series_total: float
    output_offset: int
    expected_at_output: float
    population_at_output: int
    rate_at_output: float
    reference_forecast: float
    calibrated_reference: float
    meta: Dict[str, object] = field(default_factory=dict)


def run_scenario(
    runner: ForecastRunner,
    state: ScenarioState,
    *,
    series_length: Optional[int] = None,
) -> ScenarioResult:
    """
    Evaluate one ScenarioState snapshot end to end.

    Returns
    -------
    ScenarioResult with the forecast series (offsets 0..series_length-1), its sum,
    expected count / fielded population / rate at config.output_offset, and the
    history-only reference before and after calibration.
    """
    cfg = runner.config
    n = cfg.series_length if series_length is None else series_length
    params = state.hazard_params
    policy = state.policy
    scale = state.calibration_scale

    series = runner.compute_forecast_series(0, n, params, policy, scale)
    cohorts = runner._cohorts(policy)
    at_output = expected_count(cfg.output_offset, cohorts, params, policy, scale)
    population = field_population(cfg.output_offset, cohorts, policy)
    reference = runner.reference_forecast(params)

    log.debug(
        "scenario alpha=%s beta=%s cm=%s@%s eol=%s@%s scale=%s",
        state.alpha, state.beta, state.cm_effectiveness, state.cm_start_index,
        state.eol_enabled, state.eol_horizon_months, scale,
    )
    return ScenarioResult(
        series=series,
        series_total=float(series["expected_count"].sum()),
        output_offset=cfg.output_offset,
        expected_at_output=at_output,
        population_at_output=population,
        rate_at_output=at_output / population if population > 0 else 0.0,
        reference_forecast=reference,
        calibrated_reference=reference * scale,
        meta={"n_cohorts": len(cohorts), "n_historical": len(runner.ledger)},
    )
