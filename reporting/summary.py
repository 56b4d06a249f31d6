"""
Forecast summary — the numbers an operator reads off the output panel.

  "How many complaints next year?"       → sum of the 12-month series
  "What does month N look like?"         → expected count, fielded units, rate
  "How much did calibration move things?" → reference before / after scaling
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from core.state import ScenarioState
from engine.runner import ScenarioResult


@dataclass
class ForecastSummary:
    """Structured output-panel content."""
    scenario_name: str
    series_months: int
    series_total: float
    peak_offset: Optional[int]
    peak_expected: float

    output_offset: int
    expected_at_output: float
    population_at_output: int
    rate_at_output: float

    reference_forecast: float
    calibrated_reference: float
    calibration_scale: float

    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Scenario", "Value": self.scenario_name, "Unit": ""},
            {"Metric": f"Expected ({self.series_months} months)", "Value": f"{self.series_total:.1f}", "Unit": "complaints"},
            {"Metric": "Peak Month",
             "Value": f"+{self.peak_offset}" if self.peak_offset is not None else "N/A", "Unit": "months"},
            {"Metric": "Peak Expected", "Value": f"{self.peak_expected:.2f}", "Unit": "complaints"},
            {"Metric": f"Expected at +{self.output_offset}", "Value": f"{self.expected_at_output:.2f}", "Unit": "complaints"},
            {"Metric": f"Units in Field at +{self.output_offset}", "Value": f"{self.population_at_output:,d}", "Unit": "units"},
            {"Metric": f"Rate at +{self.output_offset}", "Value": f"{self.rate_at_output:.4%}", "Unit": "per unit"},
            {"Metric": "Reference (uncalibrated)", "Value": f"{self.reference_forecast:.2f}", "Unit": "complaints"},
            {"Metric": "Reference (calibrated)", "Value": f"{self.calibrated_reference:.2f}", "Unit": "complaints"},
            {"Metric": "Scale Factor", "Value": f"{self.calibration_scale:.2f}", "Unit": ""},
        ]
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags), "Unit": ""})
        return pd.DataFrame(rows)


def generate_forecast_summary(
    result: ScenarioResult,
    state: ScenarioState,
    *,
    scenario_name: str = "Current",
    calibration_bounds: Tuple[float, float] = (0.2, 5.0),
) -> ForecastSummary:
    """
    Build the output-panel summary from an evaluated scenario.

    Parameters
    ----------
    result : ScenarioResult
        Output of engine.runner.run_scenario() for `state`.
    state : ScenarioState
        The parameter snapshot the result was computed from.
    calibration_bounds : tuple of float
        Bounds the scale factor was clamped to; a factor sitting on a bound is flagged.
    """
    series = result.series
    if len(series):
        peak_row = series.loc[series["expected_count"].idxmax()]
        peak_offset = int(peak_row["offset"])
        peak_expected = float(peak_row["expected_count"])
    else:
        peak_offset, peak_expected = None, 0.0

    flags = []
    lo, hi = calibration_bounds
    if state.calibration_scale in (lo, hi):
        flags.append("CALIBRATION_AT_BOUND: scale factor hit its clamp limit")
    if state.eol_enabled and state.eol_horizon_months < result.output_offset:
        flags.append(f"EOL_BEFORE_OUTPUT: production ends at +{state.eol_horizon_months}")
    if state.spike_exclusion_offsets:
        flags.append(f"SPIKES_EXCLUDED: {len(state.spike_exclusion_offsets)} baseline month(s) ignored")

    return ForecastSummary(
        scenario_name=scenario_name,
        series_months=len(series),
        series_total=result.series_total,
        peak_offset=peak_offset,
        peak_expected=peak_expected,
        output_offset=result.output_offset,
        expected_at_output=result.expected_at_output,
        population_at_output=result.population_at_output,
        rate_at_output=result.rate_at_output,
        reference_forecast=result.reference_forecast,
        calibrated_reference=result.calibrated_reference,
        calibration_scale=state.calibration_scale,
        flags=flags,
    )
