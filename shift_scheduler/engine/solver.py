"""Greedy staff assignment and the public weekly/monthly generation entry points."""

from __future__ import annotations

import datetime
import logging
import random
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shift_scheduler.config import DEFAULT_SEED
from shift_scheduler.domain.models import (
    DayPolicy,
    GenerationReport,
    GlobalPolicy,
    PeriodKind,
    Schedule,
    ShiftInstance,
    StaffMember,
)
from shift_scheduler.domain.policy import validate_day_policies, validate_global_policy, validate_roster
from shift_scheduler.engine.constraints import violated_constraints
from shift_scheduler.engine.priority import holds_required_skill, rank_shifts
from shift_scheduler.engine.scoring import ScoringContext, score_candidate
from shift_scheduler.engine.shift_factory import build_shifts, month_dates, month_start, week_dates

logger = logging.getLogger(__name__)

Assignments = Dict[str, List[ShiftInstance]]


class GenerationCancelled(RuntimeError):
    """Raised when the caller's cancel callback asks a run to stop between shifts."""


def _passes_hard_filter(
    staff: StaffMember,
    shift: ShiftInstance,
    committed: Sequence[ShiftInstance],
    context: ScoringContext,
) -> bool:
    return not violated_constraints(shift, committed, context.policy, context.hour_cap)


def _passes_strict_filter(
    staff: StaffMember,
    shift: ShiftInstance,
    committed: Sequence[ShiftInstance],
    context: ScoringContext,
) -> bool:
    if not _passes_hard_filter(staff, shift, committed, context):
        return False
    preferences = staff.preferences
    if shift.date in preferences.holidays or shift.day in preferences.preferred_days_off:
        return False
    if preferences.preferred_shifts and shift.kind not in preferences.preferred_shifts:
        return False
    policy = context.policy
    if policy.require_skill_match and policy.minimum_skills_required and shift.required_skills:
        return holds_required_skill(staff, shift)
    return True


def _fill_from_pool(
    shift: ShiftInstance,
    pool: Sequence[StaffMember],
    context: ScoringContext,
    assignments: Assignments,
    limit: int,
) -> None:
    scored: List[Tuple[float, StaffMember]] = [
        (score_candidate(staff, shift, assignments[staff.id], context), staff) for staff in pool
    ]
    scored.sort(key=lambda pair: -pair[0])

    # Best scores first, selective once the minimum is covered.
    for score, staff in scored:
        if len(shift.assigned_staff) >= limit:
            break
        if len(shift.assigned_staff) >= shift.minimum_staff and score < 0:
            break
        shift.assign(staff.id)
        assignments[staff.id].append(shift)


def fill_shift(
    shift: ShiftInstance,
    active_staff: Sequence[StaffMember],
    context: ScoringContext,
    assignments: Assignments,
    report: GenerationReport,
) -> None:
    """Assign staff to one shift and record the result in ``assignments`` and ``report``.

    With ``enforce_hard_constraints`` the primary fill only draws on staff who
    break no constraint, are not on holiday or a preferred day off, accept the
    shift kind and hold a required skill. If that leaves the shift short, a
    relaxed pass tops it up to its minimum from staff who only satisfy the
    hour, rest and consecutive-day constraints.
    """
    candidates = [staff for staff in active_staff if staff.id not in shift.assigned_staff]
    if context.policy.enforce_hard_constraints:
        pool = [
            staff
            for staff in candidates
            if _passes_strict_filter(staff, shift, assignments[staff.id], context)
        ]
        _fill_from_pool(shift, pool, context, assignments, shift.maximum_staff)
        if len(shift.assigned_staff) < shift.minimum_staff:
            relaxed = [
                staff
                for staff in candidates
                if staff.id not in shift.assigned_staff
                and _passes_hard_filter(staff, shift, assignments[staff.id], context)
            ]
            logger.info(
                "Shift %s short after strict pass (%d/%d), relaxing to %d candidate(s)",
                shift.id,
                len(shift.assigned_staff),
                shift.minimum_staff,
                len(relaxed),
            )
            _fill_from_pool(shift, relaxed, context, assignments, shift.minimum_staff)
    else:
        _fill_from_pool(shift, candidates, context, assignments, shift.maximum_staff)

    # Emergency fill: anyone active, in roster order, regardless of score.
    if len(shift.assigned_staff) < shift.minimum_staff:
        logger.warning(
            "Shift %s only has %d/%d staff - using emergency assignment",
            shift.id,
            len(shift.assigned_staff),
            shift.minimum_staff,
        )
        for staff in active_staff:
            if len(shift.assigned_staff) >= shift.minimum_staff or len(shift.assigned_staff) >= shift.maximum_staff:
                break
            if staff.id in shift.assigned_staff:
                continue
            logger.warning("Emergency assignment: %s to %s", staff.name, shift.id)
            shift.assign(staff.id)
            assignments[staff.id].append(shift)
            report.emergency_assignments.append((shift.id, staff.id))

    if shift.is_understaffed:
        logger.error(
            "Shift %s understaffed: %d/%d staff",
            shift.id,
            len(shift.assigned_staff),
            shift.minimum_staff,
        )
        report.understaffed_shift_ids.append(shift.id)
        report.warnings.append(
            f"{shift.date.isoformat()} {shift.kind.value} shift only has "
            f"{len(shift.assigned_staff)}/{shift.minimum_staff} staff - UNDERSTAFFED"
        )


def assign_shifts(
    ranked_shifts: Sequence[ShiftInstance],
    active_staff: Sequence[StaffMember],
    context: ScoringContext,
    assignments: Optional[Assignments] = None,
    report: Optional[GenerationReport] = None,
    cancel: Optional[Callable[[], bool]] = None,
) -> Tuple[Assignments, GenerationReport]:
    """Fill shifts one at a time in the given order.

    ``assignments`` maps staff id to the shifts committed so far this run; it is
    updated after every shift so later scores see the running workload.
    """
    if assignments is None:
        assignments = {}
    for staff in active_staff:
        assignments.setdefault(staff.id, [])
    if report is None:
        report = GenerationReport()

    for shift in ranked_shifts:
        if cancel is not None and cancel():
            raise GenerationCancelled(f"Generation cancelled before shift {shift.id}")
        fill_shift(shift, active_staff, context, assignments, report)

    report.total_assignments = sum(len(committed) for committed in assignments.values())
    return assignments, report


def find_skill_mismatches(shifts: Iterable[ShiftInstance], staff_by_id: Mapping[str, StaffMember]) -> List[Tuple[str, str]]:
    """(shift_id, staff_id) for every assignee holding none of the shift's required skills."""
    mismatches: List[Tuple[str, str]] = []
    for shift in shifts:
        if not shift.required_skills:
            continue
        for staff_id in shift.assigned_staff:
            staff = staff_by_id.get(staff_id)
            if staff is None or not holds_required_skill(staff, shift):
                mismatches.append((shift.id, staff_id))
    return mismatches


def assemble_schedule(
    shifts: List[ShiftInstance],
    period_kind: PeriodKind,
    period_start: datetime.date,
    staff_roster: Sequence[StaffMember],
    report: GenerationReport,
    now: Optional[datetime.datetime] = None,
) -> Schedule:
    timestamp = now or datetime.datetime.now(datetime.timezone.utc)
    if period_kind is PeriodKind.MONTHLY:
        schedule_id = f"monthly-schedule-{period_start.strftime('%Y-%m')}"
    else:
        schedule_id = f"schedule-{period_start.isoformat()}"

    report.skill_mismatches = find_skill_mismatches(shifts, {staff.id: staff for staff in staff_roster})
    if report.skill_mismatches:
        report.warnings.append(
            f"{len(report.skill_mismatches)} assignment(s) do not match the shift's required skills"
        )

    return Schedule(
        id=schedule_id,
        period_kind=period_kind,
        period_start=period_start,
        shifts=shifts,
        created_at=timestamp,
        updated_at=timestamp,
        is_published=False,
        report=report,
    )


def _generate(
    staff_roster: Iterable[StaffMember],
    global_policy: GlobalPolicy,
    day_policies: Mapping[str, DayPolicy],
    dates: List[datetime.date],
    period_kind: PeriodKind,
    period_start: datetime.date,
    seed: int,
    rng: Optional[random.Random],
    now: Optional[datetime.datetime],
    cancel: Optional[Callable[[], bool]],
) -> Schedule:
    roster = validate_roster(staff_roster)
    validate_global_policy(global_policy)
    policies = validate_day_policies(day_policies)
    active_staff = [staff for staff in roster if staff.is_active]

    shifts = build_shifts(dates, policies)
    logger.info(
        "Generating %s schedule from %s: %d shifts, %d active staff",
        period_kind.value,
        period_start.isoformat(),
        len(shifts),
        len(active_staff),
    )

    ranked = rank_shifts(shifts, active_staff, global_policy, period_kind)
    context = ScoringContext.for_period(
        global_policy,
        period_kind,
        shift_count=len(shifts),
        active_staff_count=len(active_staff),
        rng=rng if rng is not None else random.Random(seed),
    )
    _, report = assign_shifts(ranked, active_staff, context, cancel=cancel)

    logger.info(
        "Schedule completed: %d total assignments across %d staff, %d understaffed shift(s)",
        report.total_assignments,
        len(active_staff),
        report.understaffed_count,
    )
    return assemble_schedule(shifts, period_kind, period_start, roster, report, now=now)


def generate_weekly_schedule(
    staff_roster: Iterable[StaffMember],
    global_policy: GlobalPolicy,
    day_policies: Mapping[str, DayPolicy],
    week_start_date: datetime.date,
    *,
    seed: int = DEFAULT_SEED,
    rng: Optional[random.Random] = None,
    now: Optional[datetime.datetime] = None,
    cancel: Optional[Callable[[], bool]] = None,
) -> Schedule:
    """Generate and staff every shift of the ISO week starting on ``week_start_date`` (a Monday).

    The same roster, policies and ``seed`` (or an ``rng`` in the same state) always
    give the same assignments. ``created_at`` and ``updated_at`` come from ``now``,
    which defaults to the current UTC time; pass a fixed ``now`` for a fully
    reproducible ``to_dict()``.

    Raises:
        ValueError: On a malformed roster or policy, or a non-Monday start date.
        GenerationCancelled: If ``cancel`` returns true between shifts.
    """
    return _generate(
        staff_roster,
        global_policy,
        day_policies,
        week_dates(week_start_date),
        PeriodKind.WEEKLY,
        week_start_date,
        seed,
        rng,
        now,
        cancel,
    )


def generate_monthly_schedule(
    staff_roster: Iterable[StaffMember],
    global_policy: GlobalPolicy,
    day_policies: Mapping[str, DayPolicy],
    month_start_date: datetime.date,
    *,
    seed: int = DEFAULT_SEED,
    rng: Optional[random.Random] = None,
    now: Optional[datetime.datetime] = None,
    cancel: Optional[Callable[[], bool]] = None,
) -> Schedule:
    """Generate and staff every shift of the calendar month containing ``month_start_date``.

    Hour caps and desired hours are pro-rated to the month and constraint
    penalties are halved relative to weekly generation.

    Assignments are reproducible for a given ``seed``; timestamps are too only
    when ``now`` is supplied, otherwise they are the current UTC time.
    """
    first = month_start(month_start_date)
    return _generate(
        staff_roster,
        global_policy,
        day_policies,
        month_dates(first),
        PeriodKind.MONTHLY,
        first,
        seed,
        rng,
        now,
        cancel,
    )
