import logging

import pandas as pd
import pytest

from calibration.baseline import (
    BaselineWindow,
    filtered_average,
    summarize_baseline,
    toggle_exclusion,
)
from calibration.factor import derive_factor
from tests.conftest import QUIET_MONTHS


# --- calibration factor ---

def test_factor_is_ratio_inside_bounds():
    assert derive_factor(11.0, 5.5) == pytest.approx(2.0)
    assert derive_factor(3.0, 6.0) == pytest.approx(0.5)


@pytest.mark.parametrize("reference", [0.0, -2.0])
def test_non_positive_reference_degrades_to_one(caplog, reference):
    with caplog.at_level(logging.WARNING, logger="calibration.factor"):
        assert derive_factor(11.0, reference) == 1.0
    assert any("reference forecast" in r.getMessage() for r in caplog.records)


def test_factor_clamped_to_bounds(caplog):
    with caplog.at_level(logging.WARNING, logger="calibration.factor"):
        assert derive_factor(100.0, 1.0) == 5.0
        assert derive_factor(0.01, 1.0) == 0.2
    assert len([r for r in caplog.records if "clamped" in r.getMessage()]) == 2


def test_custom_bounds():
    assert derive_factor(100.0, 1.0, bounds=(0.5, 20.0)) == 20.0
    assert derive_factor(0.0, 1.0, bounds=(0.5, 20.0)) == 0.5


# --- spike-filtered baseline ---

def test_filtered_average_excludes_flagged_month(quiet_window):
    remaining = [v for i, v in enumerate(QUIET_MONTHS) if i != 7]
    assert len(remaining) == 11
    assert filtered_average(quiet_window, {7}) == sum(remaining) / 11


def test_average_recomputed_on_toggle(quiet_window):
    excl = toggle_exclusion(frozenset(), 7)
    assert excl == frozenset({7})
    assert filtered_average(quiet_window, excl) == sum(QUIET_MONTHS[:7] + QUIET_MONTHS[8:]) / 11

    excl = toggle_exclusion(excl, 7)
    assert excl == frozenset()
    assert filtered_average(quiet_window, excl) == sum(QUIET_MONTHS) / 12


def test_toggle_returns_new_set():
    original = frozenset({1, 2})
    toggled = toggle_exclusion(original, 3)
    assert original == frozenset({1, 2})
    assert toggled == frozenset({1, 2, 3})


def test_fully_excluded_window_averages_zero_with_warning(quiet_window, caplog):
    everything = set(quiet_window.offsets)
    with caplog.at_level(logging.WARNING, logger="calibration.baseline"):
        summary = summarize_baseline(quiet_window, everything)
    assert summary.average == 0.0
    assert summary.n_included == 0
    assert summary.n_excluded == 12
    assert summary.warnings
    assert caplog.records
    assert filtered_average(quiet_window, everything) == 0.0


def test_unknown_exclusions_are_ignored(quiet_window):
    assert filtered_average(quiet_window, {99, -4}) == sum(QUIET_MONTHS) / 12


def test_spike_pulls_average_up_until_excluded():
    spiked = BaselineWindow.from_counts([45 if i == 7 else v for i, v in enumerate(QUIET_MONTHS)])
    assert filtered_average(spiked, set()) > filtered_average(spiked, {7})


def test_window_construction_and_trailing():
    window = BaselineWindow.from_counts(range(14), start=-13)
    assert window.offsets[0] == -13
    assert window.offsets[-1] == 0
    last = window.trailing(12)
    assert len(last) == 12
    assert last.offsets[0] == -11
    with pytest.raises(ValueError):
        window.trailing(0)


def test_window_validation():
    with pytest.raises(ValueError):
        BaselineWindow(offsets=(0, 1), counts=(1.0,))
    with pytest.raises(ValueError):
        BaselineWindow(offsets=(0, 0), counts=(1.0, 2.0))


def test_window_from_frame_sorts_by_offset():
    frame = pd.DataFrame({"offset": [2, 0, 1], "observed_count": [30, 10, 20]})
    window = BaselineWindow.from_frame(frame)
    assert window.offsets == (0, 1, 2)
    assert window.counts == (10.0, 20.0, 30.0)
    marked = window.to_frame({1})
    assert marked["excluded"].tolist() == [False, True, False]
