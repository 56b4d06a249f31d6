"""
Cohort Failure Forecast — Dashboard
===================================

Walks through the model one concept at a time:
  1. Cohorts:         production months, with a movable "now" marker
  2. Aging Curve:     Weibull alpha/beta and the monthly hazard
  3. Contributions:   which cohorts drive next month's complaints
  4. Calibration:     scale the model to the observed baseline
  5. Countermeasure:  reduced risk for cohorts after a cutoff
  6. End of Life:     stop production at a horizon
  7. Spikes:          hand-pick anomalous months to exclude from the baseline
  8. Output:          the resulting forecast summary

Every control change produces a new ScenarioState, which is written to
data/scenario_state.json so the session resumes where it left off.

Run: streamlit run app/streamlit_app.py
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import altair as alt
import pandas as pd
import streamlit as st

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import ForecastConfig
from core.state import ScenarioState

from data_prep.loader import load_baseline_csv, load_cohort_csv, load_production_csv
from data_prep.sample import sample_baseline, sample_ledger
from data_prep.validators import validate_baseline, validate_cohorts

from calibration.baseline import BaselineWindow, summarize_baseline
from cohorts.ledger import CohortLedger

from engine.forecast import top_contributors
from engine.runner import ForecastRunner, run_scenario

from reporting.summary import generate_forecast_summary

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data / state locations
# ---------------------------------------------------------------------------
DATA_DIR = PROJECT_ROOT / "data"
STATE_PATH = Path(os.environ.get("COHORT_FORECAST_STATE", DATA_DIR / "scenario_state.json"))
COHORT_CSV = DATA_DIR / "cohorts.csv"
PRODUCTION_CSV = DATA_DIR / "production.csv"
BASELINE_CSV = DATA_DIR / "baseline.csv"

CONFIG = ForecastConfig()


# ---------------------------------------------------------------------------
# Persistence (external to the model: the model only produces/consumes records)
# ---------------------------------------------------------------------------
def _load_state() -> ScenarioState:
    if STATE_PATH.exists():
        try:
            return ScenarioState.from_json(STATE_PATH.read_text(encoding="utf-8"))
        except ValueError as exc:
            log.warning("ignoring unreadable %s: %s", STATE_PATH, exc)
    return ScenarioState()


def _save_state(state: ScenarioState) -> None:
    STATE_PATH.parent.mkdir(parents=True, exist_ok=True)
    STATE_PATH.write_text(state.to_json(), encoding="utf-8")


def _commit(new_state: ScenarioState) -> ScenarioState:
    """Replace the session state and persist it when anything changed."""
    if new_state != st.session_state["scenario"]:
        st.session_state["scenario"] = new_state
        _save_state(new_state)
    return new_state


def _reset_spikes() -> None:
    st.session_state["spike_pick"] = []


def _slider(container, label, lo, hi, current, **kwargs):
    """Slider whose range always covers the stored value, so an untouched slider returns it as is."""
    return container.slider(label, min(lo, current), max(hi, current), current, **kwargs)


# ---------------------------------------------------------------------------
# Cached loaders
# ---------------------------------------------------------------------------
@st.cache_data(show_spinner="Loading cohorts...")
def _load_cohorts() -> pd.DataFrame:
    if COHORT_CSV.exists():
        return load_cohort_csv(str(COHORT_CSV))
    if PRODUCTION_CSV.exists():
        return load_production_csv(str(PRODUCTION_CSV))
    return sample_ledger().to_frame().loc[:, ["month_index", "unit_count"]]


@st.cache_data(show_spinner="Loading baseline...")
def _load_baseline() -> pd.DataFrame:
    if BASELINE_CSV.exists():
        return load_baseline_csv(str(BASELINE_CSV))
    return sample_baseline().to_frame().loc[:, ["offset", "observed_count"]]


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def _bar(df, *, x, y, title, color=None, height=280):
    enc = {"x": alt.X(f"{x}:O", title=x), "y": alt.Y(f"{y}:Q", title=y)}
    if color is not None:
        enc["color"] = alt.Color(f"{color}:N")
    chart = alt.Chart(df).mark_bar().encode(**enc).properties(title=title, height=height)
    st.altair_chart(chart, use_container_width=True)


def _line(df, *, x, y, title, height=280):
    chart = (
        alt.Chart(df).mark_line(point=True)
        .encode(x=alt.X(f"{x}:Q", title=x), y=alt.Y(f"{y}:Q", title=y))
        .properties(title=title, height=height)
    )
    st.altair_chart(chart, use_container_width=True)


# ===========================================================================
# Page
# ===========================================================================
st.set_page_config(page_title="Cohort Failure Forecast", layout="wide")
st.title("Cohort Failure Forecast")

if "scenario" not in st.session_state:
    st.session_state["scenario"] = _load_state()
state: ScenarioState = st.session_state["scenario"]

cohort_df = _load_cohorts()
baseline_df = _load_baseline()

for label, check in (("Cohorts", validate_cohorts(cohort_df)), ("Baseline", validate_baseline(baseline_df))):
    if not check.is_valid:
        st.error(f"{label} data failed validation:\n\n{check.summary()}")
        st.stop()
    if check.warnings:
        st.warning(f"{label}: " + " ".join(check.warnings))

ledger = CohortLedger.from_frame(cohort_df)
window = BaselineWindow.from_frame(baseline_df)
runner = ForecastRunner(ledger, CONFIG)

tabs = st.tabs([
    "Cohorts", "Aging Curve", "Contributions", "Calibration",
    "Countermeasure", "End of Life", "Spikes", "Output",
])

# --- 1. Cohorts ---
with tabs[0]:
    moved = _slider(st, "Move 'now' forward (months)", 0, 24, state.moved_months)
    state = _commit(state.with_changes(moved_months=moved))
    bins = runner.cohort_bins(state.policy.with_changes(eol_enabled=False))
    bins["age_vs_now"] = state.moved_months - bins["month_index"]
    bins["status"] = bins["age_vs_now"].map(lambda a: "future" if a < 0 else "in field")
    _bar(bins, x="month_index", y="unit_count", color="status",
         title=f"Units per production month (now = M{state.moved_months})")

# --- 2. Aging curve ---
with tabs[1]:
    c1, c2 = st.columns(2)
    alpha = _slider(c1, "alpha (scale, months)", 10.0, 150.0, float(state.alpha), step=0.5, key="alpha_slider")
    beta = _slider(c2, "beta (shape)", 0.5, 6.0, float(state.beta), step=0.1, key="beta_slider")
    state = _commit(state.with_changes(alpha=alpha, beta=beta))
    curve = runner.get_hazard_curve(state.hazard_params)
    _line(curve, x="age", y="normalized", title="Relative monthly risk by age")
    age = st.slider("Inspect age (months)", 0, CONFIG.curve_max_age, 24)
    st.metric(f"Monthly failure probability at {age} months",
              f"{curve.loc[curve['age'] == age, 'hazard'].iloc[0]:.3%}")

# --- 3. Contributions ---
with tabs[2]:
    show_top = st.toggle("Highlight top contributors", value=state.display_toggle)
    state = _commit(state.with_changes(display_toggle=show_top))
    contrib = runner.contributions(0, state.hazard_params, state.policy, state.calibration_scale)
    top = set(top_contributors(contrib, 3)["month_index"]) if state.display_toggle else set()
    contrib["top"] = contrib["month_index"].isin(top).map({True: "top 3", False: "other"})
    _bar(contrib, x="month_index", y="contribution", color="top",
         title="Expected complaints next month by cohort")
    st.metric("Next month total", f"{contrib['contribution'].sum():.1f}")

# --- 4. Calibration ---
with tabs[3]:
    baseline = summarize_baseline(window, state.exclusions)
    reference = runner.reference_forecast(state.hazard_params)
    st.write(f"Observed baseline (spike-filtered): **{baseline.average:.2f}**")
    if st.button("Calibrate to baseline"):
        factor = runner.compute_calibration_factor(baseline.average, state.hazard_params)
        state = _commit(state.with_changes(calibration_scale=factor))
    st.dataframe(pd.DataFrame([
        {"Series": "Observed", "Value": baseline.average},
        {"Series": "Model (before)", "Value": reference},
        {"Series": "Model (after)", "Value": reference * state.calibration_scale},
    ]), hide_index=True)
    st.caption(f"Scale factor: {state.calibration_scale:.2f}")

# --- 5. Countermeasure ---
with tabs[4]:
    lo, hi = CONFIG.bin_range
    c1, c2 = st.columns(2)
    cm_start = _slider(c1, "Countermeasure after month", lo, 12, state.cm_start_index)
    shown_pct = state.cm_effectiveness * 100.0
    picked_pct = _slider(c2, "Remaining risk after countermeasure (%)", 0.0, 100.0, shown_pct,
                         step=1.0, key="cm_pct_slider")
    cm_eff = state.cm_effectiveness if picked_pct == shown_pct else picked_pct / 100.0
    state = _commit(state.with_changes(cm_start_index=cm_start, cm_effectiveness=cm_eff))
    cm_bins = runner.countermeasure_bins(state.policy.with_changes(eol_enabled=False))
    cm_bins = cm_bins[cm_bins["month_index"] <= 12]
    _bar(cm_bins, x="month_index", y="effective_units", color="after_cm",
         title="Units at full risk (after countermeasure)")
    series = runner.compute_forecast_series(
        0, CONFIG.series_length, state.hazard_params,
        state.policy.with_changes(eol_enabled=False), state.calibration_scale,
    )
    _line(series, x="offset", y="expected_count", title="Forecast, next 12 months")
    st.metric("12-month total", f"{series['expected_count'].sum():.1f}")

# --- 6. End of life ---
with tabs[5]:
    c1, c2 = st.columns(2)
    eol_on = c1.toggle("End of life", value=state.eol_enabled)
    eol_h = _slider(c2, "EOL horizon (months ahead)", 0, CONFIG.projection_horizon, state.eol_horizon_months)
    state = _commit(state.with_changes(eol_enabled=eol_on, eol_horizon_months=eol_h))
    _bar(runner.cohort_bins(state.policy), x="month_index", y="unit_count", color="beyond_eol",
         title="Production with end of life applied")
    series = runner.compute_forecast_series(
        0, CONFIG.series_length, state.hazard_params, state.policy, state.calibration_scale
    )
    _line(series, x="offset", y="expected_count", title="Forecast, next 12 months")

# --- 7. Spikes ---
with tabs[6]:
    if "spike_pick" not in st.session_state:
        st.session_state["spike_pick"] = [o for o in state.spike_exclusion_offsets if o in window.offsets]
    picked = st.multiselect(
        "Exclude months (operator judgement)", options=list(window.offsets), key="spike_pick"
    )
    st.button("Reset exclusions", on_click=_reset_spikes)
    # offsets outside the loaded window are kept as stored
    outside = set(state.spike_exclusion_offsets) - set(window.offsets)
    state = _commit(state.with_changes(spike_exclusion_offsets=outside | set(picked)))
    summary = summarize_baseline(window, state.exclusions)
    frame = window.to_frame(state.exclusions)
    _bar(frame, x="offset", y="observed_count", color="excluded", title="Observed complaints")
    st.metric("Filtered average", f"{summary.average:.2f}")
    for w in summary.warnings:
        st.warning(w)

# --- 8. Output ---
with tabs[7]:
    result = run_scenario(runner, state, series_length=18)
    report = generate_forecast_summary(result, state, calibration_bounds=CONFIG.calibration_bounds)
    st.dataframe(report.to_dataframe(), hide_index=True)
    _line(result.series, x="offset", y="expected_count", title="Forecast, next 18 months")
