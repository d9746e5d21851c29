"""Plain-text reports and report export."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from corpus.config import REPORT_FILE_FORMAT, REPORT_TIMESTAMP_FORMAT
from corpus.params import PlanMode, PlanParameters
from corpus.planner import AdvancedPlanResult, BasicPlanResult
from corpus.scenarios import ScenarioAnalysis
from corpus.tracker import CorpusTracking
from utils.helpers import format_currency, format_money, format_percent

# Configure module logger
logger = logging.getLogger(__name__)

RULE = "=" * 53
HIGH_RISK_THRESHOLD = 40.0
MODERATE_RISK_THRESHOLD = 10.0
LOW_SUCCESS_THRESHOLD = 80.0

TABLE_ROW = (
    "{:<5}| {:<14}| {:<12}| {:<12}| {:<12}| {:<12}| {:<14}| {:<14}| {:<14}| {:<7}| {:<9}"
)


def _header(title: str) -> list[str]:
    return [RULE, title.center(len(RULE)).rstrip(), RULE, ""]


def basic_report(result: BasicPlanResult) -> str:
    """Report for a basic-mode run."""
    params = result.params
    lines = _header("RETIREMENT CORPUS CALCULATOR REPORT")

    lines += [
        "INPUTS:",
        f"- Annual Expense: {format_money(params.annual_expense)}",
        f"- Retirement Period: {params.retirement_period} years",
        f"- Expected Return: {format_percent(params.expected_return * 100)}",
        f"- Standard Deviation: {format_percent(params.standard_deviation * 100)}",
        f"- Inflation: {format_percent(params.inflation * 100)}",
        f"- Adjust for Inflation: {'Yes' if params.adjust_for_inflation else 'No'}",
        "",
        "OUTPUTS:",
        f"- Required Corpus: {format_money(result.required_corpus)}",
        f"- Initial Withdrawal Rate: {format_percent(result.initial_withdrawal_rate)}",
        f"- Success Probability: {format_percent(result.success_rate)}",
        "",
        "WHAT THIS MEANS:",
        f"Based on your inputs, you would need approximately {format_money(result.required_corpus)} "
        f"to fund your retirement. This would give you a {format_percent(result.success_rate)} "
        f"chance of not running out of money over your {params.retirement_period}-year "
        "retirement period.",
        "",
    ]

    if result.success_rate < LOW_SUCCESS_THRESHOLD:
        lines += [
            "NOTE: Your success probability is below 80%. You may want to consider:",
            "- Increasing your retirement corpus",
            "- Reducing your annual expenses",
            "- Adjusting your investment strategy",
            "",
        ]

    return "\n".join(lines)


def scenario_summaries(analysis: ScenarioAnalysis) -> dict[str, str]:
    """Titled one-line summaries of a scenario analysis."""
    if analysis.meets_target:
        return {
            "CURRENT PLAN": (
                f"Your current plan has a {format_percent(analysis.current_success_rate)} success "
                f"rate, which meets your target of {format_percent(analysis.target_success_rate)}."
            )
        }

    summaries = {}
    if analysis.contribution is not None:
        adj = analysis.contribution
        relative = f" (+{adj.percent_of_current:.1f}%)" if adj.percent_of_current is not None else ""
        summaries["SCENARIO 1 - CONTRIBUTION"] = (
            f"Required additional contribution: {format_currency(adj.amount)}/year{relative}"
        )
    if analysis.retirement_delay is not None:
        adj = analysis.retirement_delay
        years = int(adj.amount)
        summaries["SCENARIO 2 - RETIREMENT AGE"] = (
            f"Delaying retirement by {years} year{'s' if years != 1 else ''} would increase "
            f"success rate by {adj.success_rate_increase:.1f} points"
        )
    if analysis.expense_reduction is not None:
        adj = analysis.expense_reduction
        relative = f" ({adj.percent_of_current:.2f}%)" if adj.percent_of_current is not None else ""
        summaries["SCENARIO 3 - EXPENSES"] = (
            f"Reducing expenses by {format_currency(adj.amount)}/year{relative} would increase "
            f"success rate by {adj.success_rate_increase:.1f} points"
        )
    if analysis.balanced is not None and analysis.balanced.description:
        summaries["BALANCED RECOMMENDATION"] = analysis.balanced.description

    return summaries


def advanced_report(result: AdvancedPlanResult) -> str:
    """Report for an advanced-mode run (tracking table appended when present)."""
    params = result.params
    lines = _header("PERSONALIZED RETIREMENT PLANNING REPORT")

    lines += [
        "INPUTS:",
        f"- Current Age: {params.current_age}",
        f"- Target Retirement Age: {params.retirement_age}",
        f"- Life Expectancy: {params.life_expectancy}",
        f"- Current Retirement Corpus: {format_money(params.current_corpus)}",
        f"- Current Annual Expenses: {format_money(params.annual_expense)}",
        f"- Annual Contribution: {format_money(params.annual_contribution)}",
        f"- Additional Retirement Income: {format_money(params.additional_income)}",
        f"- Expected Return: {format_percent(params.expected_return * 100)}",
        f"- Standard Deviation: {format_percent(params.standard_deviation * 100)}",
        f"- Inflation: {format_percent(params.inflation * 100)}",
        f"- Target Success Rate: {format_percent(params.effective_target_success_rate)}",
        "",
        "RETIREMENT READINESS:",
        f"- Projected Corpus at Retirement: {format_money(result.projected_corpus)}",
        f"- Required Corpus for Target Success Rate: {format_money(result.required_corpus)}",
    ]

    if result.on_track:
        lines.append(f"- Current Status: On Track (Surplus of {format_money(result.surplus)})")
    else:
        lines.append(f"- Current Status: Shortfall (Shortfall of {format_money(-result.surplus)})")

    lines += [
        f"- Success Probability: {format_percent(result.success_probability)}",
        "",
        "Note: Success Probability represents the likelihood of your retirement corpus lasting",
        "      throughout your entire retirement period from your retirement age to life expectancy,",
        "      based on the projected corpus at retirement and your planned withdrawal rate.",
        "",
        "SCENARIO ANALYSIS:",
    ]
    for title, text in scenario_summaries(result.scenarios).items():
        lines += [f"{title}:", text, ""]

    lines += [
        "INFLATION IMPACT:",
        f"- Current Annual Expense: {format_money(params.annual_expense)}",
        f"- Projected Annual Expense at Retirement: {format_money(result.expense_at_retirement)}",
        "",
    ]

    if result.tracking is not None:
        lines.append(year_by_year_report(params, result.tracking))

    return "\n".join(lines)


def key_insights(params: PlanParameters, tracking: CorpusTracking) -> list[str]:
    """Bullet points summarising a year-by-year tracking run."""
    insights = []

    at_retirement = tracking.find_age(params.retirement_age)
    if at_retirement is not None:
        insights.append(
            f"- At retirement (age {params.retirement_age}), your projected corpus is "
            f"{format_money(at_retirement.start_corpus)} with a "
            f"{format_percent(at_retirement.point_success_rate)} success rate."
        )

    risk_age = tracking.first_age_exceeding_risk(MODERATE_RISK_THRESHOLD, params.retirement_age)
    if risk_age is not None:
        insights.append(f"- Depletion risk first exceeds 10% at age {risk_age}.")
    else:
        insights.append(
            "- Your retirement plan maintains a high success rate throughout your expected lifetime."
        )

    if len(tracking) and tracking[-1].point_success_rate < LOW_SUCCESS_THRESHOLD:
        insights.append(
            "- RECOMMENDATION: Consider adjusting your retirement plan to improve your "
            "long-term success rate."
        )
    else:
        insights.append("- Your retirement plan appears sustainable through your expected lifetime.")

    return insights


def year_by_year_report(params: PlanParameters, tracking: CorpusTracking) -> str:
    """Per-age table with depletion warnings and key insights."""
    lines = _header("YEAR-BY-YEAR RETIREMENT CORPUS TRACKING")

    lines.append(
        TABLE_ROW.format(
            "Age", "Start Corpus", "Contribution", "Withdrawal", "Expected Exp", "Returns",
            "End Corpus", "5th %tile", "95th %tile", "Risk", "Point Succ",
        ).rstrip()
    )
    lines.append("|".join("-" * width for width in (5, 15, 14, 14, 14, 14, 15, 15, 15, 8, 10)))

    for s in tracking:
        lines.append(
            TABLE_ROW.format(
                s.age,
                format_money(s.start_corpus),
                format_money(s.contribution),
                format_money(s.withdrawal),
                format_money(s.expected_expense),
                format_money(s.returns),
                format_money(s.end_corpus),
                format_money(s.percentile_5),
                format_money(s.percentile_95),
                f"{s.depletion_risk:.1f} %",
                f"{s.point_success_rate:.1f} %",
            ).rstrip()
        )
        if s.depletion_risk > HIGH_RISK_THRESHOLD:
            lines.append(" " * 20 + "!!! WARNING: HIGH DEPLETION RISK IN THIS PERIOD !!!")
        elif s.depletion_risk > MODERATE_RISK_THRESHOLD:
            lines.append(" " * 20 + "^ CAUTION: MODERATE DEPLETION RISK IN THIS PERIOD ^")

    lines += [
        "",
        "NOTE ABOUT SUCCESS METRICS:",
        "- 'Point Succ' (Point Success Rate): The probability of having funds remaining AT this "
        "specific age,",
        "  given the median corpus carried forward from the previous year. It does not account "
        "for depletion in earlier years.",
        "- 'Success Probability' (in the Retirement Readiness section): The probability of your "
        "corpus lasting",
        "  THROUGHOUT your entire retirement period, from retirement age to life expectancy.",
        "  These metrics measure different aspects of retirement success and may differ, "
        "especially in later years.",
    ]
    if tracking.overall_success_probability is not None:
        lines.append(
            f"- Overall Success Probability: {format_percent(tracking.overall_success_probability)}"
        )

    lines += ["", "KEY INSIGHTS:"]
    lines += key_insights(params, tracking)
    lines.append("")

    return "\n".join(lines)


def report_filename(mode: PlanMode | str, now: datetime | None = None) -> str:
    """Timestamped report file name, e.g. RetirementReport_Basic_20250101_120000.txt."""
    now = now or datetime.now()
    return REPORT_FILE_FORMAT.format(
        mode=PlanMode(mode).value.capitalize(),
        timestamp=now.strftime(REPORT_TIMESTAMP_FORMAT),
    )


def save_report(
    text: str,
    filename: str | None = None,
    directory: str | Path | None = None,
    mode: PlanMode | str = PlanMode.BASIC,
) -> Path | None:
    """
    Write a report to disk.

    Args:
        text: Report contents
        filename: File name (timestamped from `mode` if None)
        directory: Target directory (the user's home directory if None)
        mode: Plan mode used in the default file name

    Returns:
        Path of the written file, or None if writing failed
    """
    directory = Path(directory) if directory is not None else Path.home()
    path = directory / (filename or report_filename(mode))

    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        logger.error(f"Error saving report to {path}: {e}")
        return None

    logger.info(f"Report saved to {path}")
    return path
