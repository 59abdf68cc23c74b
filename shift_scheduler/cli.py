"""Command-line interface for the shift scheduler."""

from __future__ import annotations

import argparse
import datetime
import logging
import sys
from pathlib import Path

from shift_scheduler.config import DEFAULT_SEED
from shift_scheduler.data_access.requirements_loader import load_day_policies
from shift_scheduler.data_access.staff_loader import load_staff_roster
from shift_scheduler.domain.policy import build_global_policy, default_day_policies
from shift_scheduler.engine.solver import generate_monthly_schedule, generate_weekly_schedule
from shift_scheduler.reporting.console import print_report, print_schedule

EXIT_UNDERSTAFFED = 3  # schedule produced, but some shift is below minimum staffing


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a staffed weekly or monthly shift schedule from a staff roster.",
        epilog=(
            "Exit status: 0 when every shift meets its minimum staffing, 1 on invalid input, "
            f"2 on usage errors, {EXIT_UNDERSTAFFED} when the schedule was generated but at least "
            "one shift is below its minimum."
        ),
    )
    parser.add_argument(
        "staff_csv",
        type=Path,
        help="CSV file containing staff ids, names, skills and preferences.",
    )
    parser.add_argument(
        "--requirements",
        type=Path,
        default=None,
        metavar="CSV",
        help=(
            "CSV file with one row per enabled (day, kind) shift and its staffing bounds. "
            "Defaults to morning/afternoon/night on weekdays and day/night on weekends."
        ),
    )
    period = parser.add_mutually_exclusive_group(required=True)
    period.add_argument(
        "--week",
        metavar="YYYY-MM-DD",
        help="Generate the week starting on this Monday.",
    )
    period.add_argument(
        "--month",
        metavar="YYYY-MM",
        help="Generate every day of this calendar month.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Random seed for tie-breaking (default: {DEFAULT_SEED}). Same seed, same schedule.",
    )
    parser.add_argument("--max-hours-week", type=float, default=None, help="Weekly hour cap per staff member.")
    parser.add_argument("--min-hours-week", type=float, default=None, help="Weekly minimum hours used in the report.")
    parser.add_argument("--max-consecutive", type=int, default=None, help="Maximum consecutive working days.")
    parser.add_argument("--min-rest-hours", type=float, default=None, help="Minimum rest hours between shifts.")
    parser.add_argument(
        "--strict",
        action="store_true",
        help=(
            "Leave out candidates who break rest, consecutive-day, hour or skill rules, are on holiday "
            "or a preferred day off, or prefer other shift kinds. Short shifts are topped up from staff "
            "who only meet the rest, consecutive-day and hour rules, then by emergency fill."
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log engine progress, emergency assignments and understaffed shifts.",
    )
    return parser


def _parse_week(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid --week value '{value}'. Expected YYYY-MM-DD.") from None


def _parse_month(value: str) -> datetime.date:
    text = value.strip()
    try:
        return datetime.datetime.strptime(text, "%Y-%m").date()
    except ValueError:
        pass
    try:
        return datetime.date.fromisoformat(text).replace(day=1)
    except ValueError:
        raise ValueError(f"Invalid --month value '{value}'. Expected YYYY-MM.") from None


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        staff = load_staff_roster(args.staff_csv)
        day_policies = load_day_policies(args.requirements) if args.requirements else default_day_policies()
        policy = build_global_policy(
            {
                "max_hours_per_week": args.max_hours_week,
                "min_hours_per_week": args.min_hours_week,
                "max_consecutive_shift_days": args.max_consecutive,
                "min_rest_hours": args.min_rest_hours,
                "enforce_hard_constraints": True if args.strict else None,
            }
        )
        if args.week:
            schedule = generate_weekly_schedule(staff, policy, day_policies, _parse_week(args.week), seed=args.seed)
        else:
            schedule = generate_monthly_schedule(staff, policy, day_policies, _parse_month(args.month), seed=args.seed)
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    print_schedule(schedule, staff)
    print_report(schedule, staff, policy)
    if schedule.report.understaffed_count:
        sys.exit(EXIT_UNDERSTAFFED)


if __name__ == "__main__":
    main()
