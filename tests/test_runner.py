import logging

import pandas as pd
import pytest

from cohorts.ledger import CohortLedger
from cohorts.projection import no_perturbation
from core.config import ForecastConfig, HazardParams, InterventionPolicy
from core.state import ScenarioState
from data_prep.sample import sample_baseline
from engine.forecast import expected_count, field_population
from engine.runner import ForecastRunner, run_scenario


def test_forecast_series_layout(runner, params):
    series = runner.compute_forecast_series(3, 12, params, InterventionPolicy(), 1.0)
    assert list(series.columns) == ["offset", "expected_count"]
    assert series["offset"].tolist() == list(range(3, 15))
    assert (series["expected_count"] >= 0).all()


def test_forecast_series_zero_length(runner, params):
    assert len(runner.compute_forecast_series(0, 0, params, InterventionPolicy(), 1.0)) == 0
    with pytest.raises(ValueError):
        runner.compute_forecast_series(0, -1, params, InterventionPolicy(), 1.0)


def test_forecast_series_matches_engine(runner, ledger, params):
    policy = InterventionPolicy(cm_start_index=-6, cm_factor=0.7, eol_enabled=True, eol_horizon=6)
    cohorts = ledger.forecast_cohorts(policy, runner.config)
    series = runner.compute_forecast_series(0, 12, params, policy, 1.5)
    for offset, value in zip(series["offset"], series["expected_count"]):
        assert value == expected_count(offset, cohorts, params, policy, 1.5)


def test_calibrated_series_scales(runner, params):
    policy = InterventionPolicy(cm_factor=0.7)
    raw = runner.compute_forecast_series(0, 12, params, policy, 1.0)["expected_count"]
    scaled = runner.compute_forecast_series(0, 12, params, policy, 2.0)["expected_count"]
    assert scaled.tolist() == pytest.approx((raw * 2.0).tolist())


def test_field_population_query(runner, ledger):
    policy = InterventionPolicy(eol_enabled=True, eol_horizon=4)
    cohorts = ledger.forecast_cohorts(policy, runner.config)
    assert runner.compute_field_population(10, policy) == field_population(10, cohorts, policy)
    assert runner.compute_field_population(10, policy) == runner.compute_field_population(4, policy)


def test_reference_forecast_is_history_only_and_neutral(runner, ledger, params):
    neutral = InterventionPolicy.neutral()
    assert runner.reference_forecast(params) == expected_count(0, ledger.cohorts, params, neutral, 1.0)


def test_calibration_factor_aligns_reference(runner, params):
    reference = runner.reference_forecast(params)
    factor = runner.compute_calibration_factor(reference * 1.8, params)
    assert factor == pytest.approx(1.8)


def test_calibration_factor_clamped(runner, params):
    assert runner.compute_calibration_factor(1e9, params) == 5.0
    narrow = ForecastRunner(runner.ledger, ForecastConfig(calibration_bounds=(0.5, 2.0)))
    assert narrow.compute_calibration_factor(1e9, params) == 2.0


def test_calibrate_from_filtered_baseline(runner, params):
    window = sample_baseline()
    with_spike = runner.calibrate_from_baseline(window, set(), params)
    without_spike = runner.calibrate_from_baseline(window, {7}, params)
    assert without_spike < with_spike
    expected = runner.compute_calibration_factor(runner.compute_baseline_average(window, {7}), params)
    assert without_spike == expected


def test_empty_ledger_runner(params, caplog):
    empty = ForecastRunner(CohortLedger())
    series = empty.compute_forecast_series(0, 6, params, InterventionPolicy(), 1.0)
    assert (series["expected_count"] == 0.0).all()
    assert empty.compute_field_population(12, InterventionPolicy()) == 0
    with caplog.at_level(logging.WARNING, logger="calibration.factor"):
        assert empty.compute_calibration_factor(11.0, params) == 1.0
    assert caplog.records


def test_hazard_curve_query(runner, params):
    assert len(runner.get_hazard_curve(params)) == runner.config.curve_max_age + 1
    assert len(runner.get_hazard_curve(params, 24)) == 25


def test_countermeasure_bins(runner):
    policy = InterventionPolicy(cm_start_index=-6, cm_factor=0.7)
    bins = runner.countermeasure_bins(policy)
    lo, hi = runner.config.bin_range
    assert bins["month_index"].tolist() == list(range(lo, hi + 1))
    after = bins[bins["after_cm"]]
    before = bins[~bins["after_cm"]]
    assert (after["month_index"] > -6).all()
    assert after["effective_units"].tolist() == pytest.approx((after["unit_count"] * 0.7).tolist())
    assert before["effective_units"].tolist() == before["unit_count"].astype(float).tolist()


def test_pluggable_perturbation(ledger, params):
    flat = ForecastRunner(ledger, perturbation=no_perturbation)
    bins = flat.cohort_bins(InterventionPolicy())
    assert set(bins.loc[bins["projected"], "unit_count"]) == {868}


def test_run_scenario(runner):
    state = ScenarioState(cmEffectiveness=0.7, cmStartIndex=-6, calibrationScale=1.4)
    result = run_scenario(runner, state)
    assert len(result.series) == runner.config.series_length
    assert result.series_total == pytest.approx(result.series["expected_count"].sum())
    assert result.output_offset == runner.config.output_offset
    assert result.population_at_output > 0
    assert result.rate_at_output == pytest.approx(result.expected_at_output / result.population_at_output)
    assert result.calibrated_reference == pytest.approx(result.reference_forecast * 1.4)


def test_run_scenario_is_repeatable(runner):
    state = ScenarioState(eolEnabled=True, eolHorizonMonths=5)
    first = run_scenario(runner, state, series_length=18)
    second = run_scenario(runner, state, series_length=18)
    pd.testing.assert_frame_equal(first.series, second.series, check_exact=True)
    assert first.expected_at_output == second.expected_at_output
