import json

import pandas as pd
import pytest
from pydantic import ValidationError

from core.config import InterventionPolicy
from core.exceptions import InvalidParameter
from core.schema import PERSISTED_FIELDS
from core.state import ScenarioState


def test_defaults_and_record_shape():
    state = ScenarioState()
    record = state.to_record()
    assert tuple(record) == PERSISTED_FIELDS
    assert record["alpha"] == 60.0
    assert record["beta"] == 3.5
    assert record["cmEffectiveness"] == 0.70
    assert record["cmStartIndex"] == -6
    assert record["eolEnabled"] is False
    assert record["eolHorizonMonths"] == 18
    assert record["spikeExclusionOffsets"] == []


def test_typed_views():
    state = ScenarioState(cmStartIndex=-3, cmEffectiveness=0.4, eolEnabled=True, eolHorizonMonths=9)
    assert state.policy == InterventionPolicy(cm_start_index=-3, cm_factor=0.4, eol_enabled=True, eol_horizon=9)
    assert state.hazard_params.alpha == 60.0


def test_with_changes_accepts_both_spellings():
    state = ScenarioState()
    a = state.with_changes(cm_start_index=2)
    b = state.with_changes(cmStartIndex=2)
    assert a == b
    assert a.cm_start_index == 2
    assert state.cm_start_index == -6


def test_with_changes_rejects_unknown_fields():
    state = ScenarioState()
    with pytest.raises(InvalidParameter, match="cm_strat_index"):
        state.with_changes(cm_strat_index=2)
    with pytest.raises(InvalidParameter):
        state.with_changes(cmStartIndex=2, eolHorizon=4)


def test_state_is_immutable():
    state = ScenarioState()
    with pytest.raises(ValidationError):
        state.alpha = 10.0


def test_exclusions_are_normalized():
    state = ScenarioState(spikeExclusionOffsets={7, 3, 7})
    assert state.spike_exclusion_offsets == (3, 7)
    assert state.exclusions == frozenset({3, 7})


def test_toggle_exclusion_on_state():
    state = ScenarioState().toggle_exclusion(7)
    assert state.spike_exclusion_offsets == (7,)
    assert state.toggle_exclusion(7).spike_exclusion_offsets == ()


@pytest.mark.parametrize("field,value", [
    ("cmEffectiveness", 1.5),
    ("cmEffectiveness", -0.1),
    ("calibrationScale", 0.0),
    ("movedMonths", -1),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        ScenarioState(**{field: value})


def test_invalid_hazard_parameters_surface_on_use():
    state = ScenarioState(alpha=0.0)
    with pytest.raises(InvalidParameter):
        state.hazard_params


def test_unknown_record_keys_ignored():
    state = ScenarioState.from_record({"alpha": 42.0, "legacyField": "x"})
    assert state.alpha == 42.0


def test_json_round_trip_is_lossless():
    state = ScenarioState(
        movedMonths=5, alpha=57.3, beta=3.14159, calibrationScale=1 / 3,
        cmEffectiveness=0.73, cmStartIndex=-4, eolEnabled=True, eolHorizonMonths=11,
        spikeExclusionOffsets=[7, 2], displayToggle=True,
    )
    text = state.to_json()
    assert json.loads(text)["calibrationScale"] == 1 / 3
    assert ScenarioState.from_json(text) == state
    assert ScenarioState.from_record(state.to_record()) == state


def test_restored_state_reproduces_forecast_exactly(runner):
    state = ScenarioState(
        alpha=57.3, beta=3.14159, calibrationScale=1.2345678901234567,
        cmEffectiveness=0.61, cmStartIndex=-2, eolEnabled=True, eolHorizonMonths=7,
    )
    restored = ScenarioState.from_json(state.to_json())

    def series(s):
        return runner.compute_forecast_series(0, 24, s.hazard_params, s.policy, s.calibration_scale)

    pd.testing.assert_frame_equal(series(state), series(restored), check_exact=True)
