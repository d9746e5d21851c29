"""Retirement Corpus Calculator with Monte Carlo Simulation - Streamlit App."""

from __future__ import annotations

import logging

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from corpus.config import BOUNDS, DEFAULTS
from corpus.params import PlanParameters
from corpus.planner import run_advanced_plan, run_basic_plan
from corpus.report import advanced_report, basic_report, report_filename, scenario_summaries
from corpus.returns import RandomSource
from corpus.simulator import MonteCarloEngine, ProgressEvent
from corpus.tracker import CarryForward
from corpus.validation import validate_plan
from utils.helpers import format_currency, format_percent, to_fraction

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Retirement Corpus Calculator", layout="wide")

st.title("Retirement Corpus Calculator with Monte Carlo Simulation")


def parse_currency(value: str, fallback: float) -> float:
    """Parse a currency string to float."""
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return fallback
    try:
        return float(cleaned)
    except ValueError:
        return fallback


def currency_input(label: str, value: float, key: str, help_text: str | None = None) -> float:
    """Create a currency input field."""
    raw_value = st.text_input(
        label,
        key=key,
        help=help_text,
        value=st.session_state.get(key, format_currency(value)),
    )
    return parse_currency(raw_value, value)


# =============================================================================
# SIDEBAR INPUTS
# =============================================================================

with st.sidebar:
    mode = st.radio("Mode", ["Basic", "Advanced"], horizontal=True)

    if mode == "Basic":
        st.header("Retirement")
        annual_expense = currency_input(
            "Annual expense",
            value=DEFAULTS.basic_annual_expense,
            key="basic_expense",
            help_text="Enter a dollar amount (commas and $ optional).",
        )
        retirement_period = st.number_input(
            "Retirement period (years)",
            min_value=BOUNDS.min_retirement_period,
            max_value=BOUNDS.max_retirement_period,
            value=DEFAULTS.retirement_period,
        )
    else:
        st.header("Profile")
        current_age = st.number_input(
            "Current age", min_value=BOUNDS.min_age, max_value=BOUNDS.max_age - 2,
            value=DEFAULTS.current_age,
        )
        retirement_age = st.number_input(
            "Retirement age", min_value=current_age + 1, max_value=BOUNDS.max_age - 1,
            value=max(DEFAULTS.retirement_age, current_age + 1),
        )
        life_expectancy = st.number_input(
            "Life expectancy", min_value=retirement_age + 1, max_value=BOUNDS.max_age,
            value=max(DEFAULTS.life_expectancy, retirement_age + 1),
        )

        st.header("Savings and spending")
        current_corpus = currency_input(
            "Current corpus", value=DEFAULTS.current_corpus, key="current_corpus"
        )
        annual_expense = currency_input(
            "Annual expense (today's dollars)",
            value=DEFAULTS.advanced_annual_expense,
            key="advanced_expense",
        )
        annual_contribution = currency_input(
            "Annual contribution", value=DEFAULTS.annual_contribution, key="contribution"
        )
        additional_income = currency_input(
            "Additional retirement income",
            value=DEFAULTS.additional_income,
            key="additional_income",
            help_text="Pension, Social Security or other income during retirement.",
        )

    st.header("Assumptions")
    expected_return = st.slider(
        "Expected return (%)",
        min_value=BOUNDS.min_expected_return * 100,
        max_value=BOUNDS.max_expected_return * 100,
        value=DEFAULTS.expected_return * 100,
        step=0.5,
    )
    standard_deviation = st.slider(
        "Standard deviation (%)",
        min_value=BOUNDS.min_standard_deviation * 100,
        max_value=BOUNDS.max_standard_deviation * 100,
        value=DEFAULTS.standard_deviation * 100,
        step=0.5,
    )
    inflation = st.slider(
        "Inflation (%)",
        min_value=BOUNDS.min_inflation * 100,
        max_value=BOUNDS.max_inflation * 100,
        value=DEFAULTS.inflation * 100,
        step=0.25,
    )
    adjust_for_inflation = st.checkbox("Grow withdrawals with inflation", value=True)
    target_success_rate = st.slider(
        "Target success rate (%)",
        min_value=50.0,
        max_value=BOUNDS.max_target_success_rate,
        value=DEFAULTS.target_success_rate,
        step=0.5,
    )

    st.header("Simulation settings")
    num_trials = st.slider(
        "Trials",
        min_value=BOUNDS.min_trials,
        max_value=BOUNDS.max_trials,
        value=DEFAULTS.num_trials,
        step=500,
    )
    seed_text = st.text_input("Random seed (optional)", value="")
    if mode == "Advanced":
        carry_forward = st.selectbox(
            "Year-by-year seeding",
            [c.value for c in CarryForward],
            help="median: every trial restarts from the previous median; "
            "paths: every trial continues from its own value.",
        )

    run_clicked = st.button("Run simulation", type="primary")

# =============================================================================
# VALIDATION
# =============================================================================

common_inputs = dict(
    annual_expense=annual_expense,
    expected_return=to_fraction(expected_return),
    standard_deviation=to_fraction(standard_deviation),
    inflation=to_fraction(inflation),
    adjust_for_inflation=adjust_for_inflation,
    num_trials=int(num_trials),
    target_success_rate=target_success_rate,
)
if mode == "Basic":
    params = PlanParameters.basic(retirement_period=int(retirement_period), **common_inputs)
else:
    params = PlanParameters.advanced(
        current_age=int(current_age),
        retirement_age=int(retirement_age),
        life_expectancy=int(life_expectancy),
        current_corpus=current_corpus,
        annual_contribution=annual_contribution,
        additional_income=additional_income,
        **common_inputs,
    )

validation_result = validate_plan(params)
seed = None
if seed_text.strip():
    try:
        seed = int(seed_text)
    except ValueError:
        validation_result.add_error("seed", "Must be a whole number")

if not validation_result.is_valid():
    st.error("Please fix the following input errors:")
    for error_msg in validation_result.error_messages():
        st.warning(error_msg)
    st.stop()

if not run_clicked:
    st.info("Set your inputs in the sidebar and press **Run simulation**.")
    st.stop()

# =============================================================================
# SIMULATION
# =============================================================================

progress_bar = st.progress(0.0, text="Starting simulation...")


def update_progress(event: ProgressEvent) -> None:
    progress_bar.progress(min(event.fraction, 1.0), text=event.label)


engine = MonteCarloEngine(random_source=RandomSource(seed), progress_callback=update_progress)

if mode == "Basic":
    basic_result = run_basic_plan(params, engine)
    report_text = basic_report(basic_result)
    simulation = basic_result.simulation
else:
    advanced_result = run_advanced_plan(
        params, engine, include_tracking=True, carry_forward=CarryForward(carry_forward)
    )
    report_text = advanced_report(advanced_result)
    simulation = advanced_result.simulation

progress_bar.empty()

# =============================================================================
# CHARTS
# =============================================================================

histogram = go.Figure(
    data=[go.Histogram(x=simulation.terminal_values, nbinsx=30, marker_color="#0d6efd")]
)
histogram.update_layout(
    title="Terminal Corpus Distribution", xaxis_title="Corpus", yaxis_title="Count"
)

if mode == "Advanced" and advanced_result.tracking is not None:
    frame = advanced_result.tracking.to_frame()

    fan_chart = go.Figure()
    fan_chart.add_traces(
        [
            go.Scatter(
                x=frame["age"],
                y=frame["percentile_95"],
                line=dict(color="rgba(0,0,0,0)"),
                showlegend=False,
                hoverinfo="skip",
            ),
            go.Scatter(
                x=frame["age"],
                y=frame["percentile_5"],
                fill="tonexty",
                fillcolor="rgba(0, 123, 255, 0.2)",
                line=dict(color="rgba(0,0,0,0)"),
                name="5-95%",
            ),
            go.Scatter(
                x=frame["age"],
                y=frame["end_corpus"],
                line=dict(color="#0d6efd", width=3),
                name="Median",
            ),
        ]
    )
    fan_chart.add_vline(
        x=params.retirement_age,
        line_dash="dot",
        line_color="gray",
        annotation_text="Retirement",
        annotation_position="top left",
    )
    fan_chart.update_layout(
        title="Corpus Percentiles by Age",
        xaxis_title="Age",
        yaxis_title="Corpus",
        hovermode="x unified",
        xaxis=dict(dtick=5),
    )

    success_chart = go.Figure(
        data=[
            go.Scatter(
                x=frame["age"],
                y=frame["point_success_rate"],
                line=dict(color="#198754", width=3),
                name="Point success",
            )
        ]
    )
    success_chart.update_layout(
        title="Point Success Rate by Age",
        xaxis_title="Age",
        yaxis_title="Success Rate (%)",
        yaxis_range=[0, 100],
        xaxis=dict(dtick=5),
    )

# =============================================================================
# DISPLAY
# =============================================================================

summary_cols = st.columns(4)
if mode == "Basic":
    summary_cols[0].metric("Required corpus", format_currency(basic_result.required_corpus))
    summary_cols[1].metric("Success rate", format_percent(basic_result.success_rate))
    summary_cols[2].metric(
        "Initial withdrawal rate", format_percent(basic_result.initial_withdrawal_rate)
    )
    summary_cols[3].metric(
        "Median terminal corpus", format_currency(float(np.median(simulation.terminal_values)))
    )
    if not basic_result.calibration.converged:
        st.warning(
            "The corpus search did not settle within tolerance; the figure above is a best estimate."
        )
else:
    summary_cols[0].metric("Projected corpus", format_currency(advanced_result.projected_corpus))
    summary_cols[1].metric(
        "Required corpus",
        format_currency(advanced_result.required_corpus),
        delta=format_currency(advanced_result.surplus),
        help="Delta shows the surplus (or shortfall) of the projection.",
    )
    summary_cols[2].metric(
        "Success probability", format_percent(advanced_result.success_probability)
    )
    summary_cols[3].metric(
        "Expense at retirement", format_currency(advanced_result.expense_at_retirement)
    )

if mode == "Basic":
    tabs = st.tabs(["Distribution", "Report"])
    with tabs[0]:
        st.plotly_chart(histogram, use_container_width=True)
    report_tab = tabs[1]
else:
    tabs = st.tabs(["Overview", "Scenarios", "Year by year", "Distribution", "Report"])
    with tabs[0]:
        st.plotly_chart(fan_chart, use_container_width=True)
        st.plotly_chart(success_chart, use_container_width=True)
    with tabs[1]:
        scenarios = advanced_result.scenarios
        if scenarios.meets_target:
            st.success(
                f"Your current plan meets the {format_percent(scenarios.target_success_rate)} target."
            )
        else:
            st.dataframe(
                [
                    {
                        "Lever": adj.lever.value.replace("_", " ").title(),
                        "Change": (
                            f"{int(adj.amount)} years"
                            if adj.lever.value == "retirement_delay"
                            else f"{format_currency(adj.amount)}/year"
                        ),
                        "Success rate": format_percent(adj.success_rate),
                        "Increase": f"{adj.success_rate_increase:+.1f} pts",
                    }
                    for adj in scenarios.adjustments()
                ],
                use_container_width=True,
            )
        for title, text in scenario_summaries(scenarios).items():
            st.markdown(f"**{title.title()}**: {text}")
    with tabs[2]:
        st.dataframe(frame, use_container_width=True)
    with tabs[3]:
        st.plotly_chart(histogram, use_container_width=True)
    report_tab = tabs[4]

with report_tab:
    st.text(report_text)
    st.download_button(
        "Download report",
        data=report_text,
        file_name=report_filename(params.mode),
        mime="text/plain",
    )
