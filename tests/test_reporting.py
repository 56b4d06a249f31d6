from core.state import ScenarioState
from engine.runner import run_scenario
from reporting.summary import generate_forecast_summary


def test_summary_table(runner):
    state = ScenarioState(cmEffectiveness=0.7)
    result = run_scenario(runner, state)
    summary = generate_forecast_summary(result, state)
    assert summary.series_months == runner.config.series_length
    assert summary.series_total == result.series_total
    assert summary.peak_expected == result.series["expected_count"].max()
    assert summary.flags == []

    table = summary.to_dataframe()
    assert list(table.columns) == ["Metric", "Value", "Unit"]
    assert table["Metric"].iloc[0] == "Scenario"


def test_summary_flags(runner):
    state = ScenarioState(
        calibrationScale=5.0, eolEnabled=True, eolHorizonMonths=6, spikeExclusionOffsets=[7],
    )
    summary = generate_forecast_summary(run_scenario(runner, state), state)
    assert len(summary.flags) == 3
    assert summary.to_dataframe()["Metric"].iloc[-1] == "FLAGS"


def test_summary_with_empty_series(runner):
    state = ScenarioState()
    summary = generate_forecast_summary(run_scenario(runner, state, series_length=0), state)
    assert summary.peak_offset is None
    assert summary.series_total == 0.0
