"""Command-line front end for the corpus calculator."""

from __future__ import annotations

import argparse
import logging
import sys

from corpus.config import DEFAULTS
from corpus.exceptions import ValidationError
from corpus.params import PlanMode, PlanParameters
from corpus.planner import run_advanced_plan, run_basic_plan
from corpus.report import advanced_report, basic_report, save_report
from corpus.returns import RandomSource
from corpus.simulator import MonteCarloEngine, ProgressEvent
from corpus.tracker import CarryForward
from corpus.validation import validate_plan
from utils.helpers import to_fraction

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--expected-return", type=float, default=DEFAULTS.expected_return * 100,
                        help="Expected annual return in percent")
    parser.add_argument("--std-dev", type=float, default=DEFAULTS.standard_deviation * 100,
                        help="Annual standard deviation of returns in percent")
    parser.add_argument("--inflation", type=float, default=DEFAULTS.inflation * 100,
                        help="Annual inflation in percent")
    parser.add_argument("--no-inflation-adjustment", action="store_true",
                        help="Keep withdrawals flat instead of growing them with inflation")
    parser.add_argument("--trials", type=int, default=DEFAULTS.num_trials,
                        help="Number of Monte Carlo trials")
    parser.add_argument("--seed", type=int, help="Seed for reproducible results")
    parser.add_argument("--workers", type=int, default=1, help="Worker threads for simulation")
    parser.add_argument("--save", action="store_true", help="Save the report to the home directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Estimate a retirement corpus with Monte Carlo simulation.",
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    basic = subparsers.add_parser("basic", help="Corpus needed for a fixed retirement period")
    basic.add_argument("--annual-expense", type=float, default=DEFAULTS.basic_annual_expense)
    basic.add_argument("--retirement-period", type=int, default=DEFAULTS.retirement_period)
    basic.add_argument("--target", type=float, default=0.0,
                       help="Target success rate in percent (default 85)")
    _add_common_arguments(basic)

    advanced = subparsers.add_parser("advanced", help="Age-based plan with scenario analysis")
    advanced.add_argument("--current-age", type=int, default=DEFAULTS.current_age)
    advanced.add_argument("--retirement-age", type=int, default=DEFAULTS.retirement_age)
    advanced.add_argument("--life-expectancy", type=int, default=DEFAULTS.life_expectancy)
    advanced.add_argument("--current-corpus", type=float, default=DEFAULTS.current_corpus)
    advanced.add_argument("--annual-expense", type=float, default=DEFAULTS.advanced_annual_expense)
    advanced.add_argument("--annual-contribution", type=float, default=DEFAULTS.annual_contribution)
    advanced.add_argument("--additional-income", type=float, default=DEFAULTS.additional_income)
    advanced.add_argument("--target", type=float, default=DEFAULTS.target_success_rate,
                          help="Target success rate in percent")
    advanced.add_argument("--tracking", action="store_true",
                          help="Include the year-by-year tracking table")
    advanced.add_argument("--carry-forward", choices=[c.value for c in CarryForward],
                          default=CarryForward.MEDIAN.value,
                          help="How each tracked year seeds the next")
    _add_common_arguments(advanced)

    return parser


def params_from_args(args: argparse.Namespace) -> PlanParameters:
    """Build plan parameters from parsed arguments (percent inputs become decimals)."""
    common = dict(
        annual_expense=args.annual_expense,
        expected_return=to_fraction(args.expected_return),
        standard_deviation=to_fraction(args.std_dev),
        inflation=to_fraction(args.inflation),
        adjust_for_inflation=not args.no_inflation_adjustment,
        num_trials=args.trials,
        target_success_rate=args.target,
    )
    if args.mode == PlanMode.BASIC.value:
        return PlanParameters.basic(retirement_period=args.retirement_period, **common)
    return PlanParameters.advanced(
        current_age=args.current_age,
        retirement_age=args.retirement_age,
        life_expectancy=args.life_expectancy,
        current_corpus=args.current_corpus,
        annual_contribution=args.annual_contribution,
        additional_income=args.additional_income,
        **common,
    )


def log_progress(event: ProgressEvent) -> None:
    if event.stage == "end":
        logger.debug(f"{event.label}: done")
    elif event.stage == "progress":
        logger.debug(f"{event.label}: {event.fraction:.0%}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        params = params_from_args(args)
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    validation = validate_plan(params)
    if not validation.is_valid():
        for message in validation.error_messages():
            print(f"Invalid input: {message}", file=sys.stderr)
        return 2

    try:
        engine = MonteCarloEngine(
            random_source=RandomSource(args.seed),
            workers=args.workers,
            progress_callback=log_progress,
        )
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    if params.is_advanced:
        result = run_advanced_plan(
            params,
            engine,
            include_tracking=args.tracking,
            carry_forward=CarryForward(args.carry_forward),
        )
        report = advanced_report(result)
    else:
        report = basic_report(run_basic_plan(params, engine))

    print(report)

    if args.save:
        path = save_report(report, mode=params.mode)
        if path is None:
            print("Error saving report.", file=sys.stderr)
            return 1
        print(f"Report saved to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
