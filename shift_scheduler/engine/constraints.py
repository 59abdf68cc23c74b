"""Labor rule checks for a candidate shift against a staff member's committed shifts.

The checks are pure. The solver turns violations into score penalties rather
than rejections, so a violating candidate stays assignable when nobody else is.
"""

from __future__ import annotations

import datetime
from typing import List, Sequence, Tuple

from shift_scheduler.config import (
    CONSECUTIVE_DAYS_PENALTY,
    MAX_HOURS_PENALTY,
    REST_TIME_PENALTY,
    WEEKS_PER_MONTH,
)
from shift_scheduler.domain.models import GlobalPolicy, PeriodKind, ShiftInstance


def committed_hours(committed: Sequence[ShiftInstance]) -> float:
    return sum(shift.hours for shift in committed)


def period_hour_cap(policy: GlobalPolicy, period_kind: PeriodKind) -> float:
    if period_kind is PeriodKind.MONTHLY:
        return policy.max_hours_per_week * WEEKS_PER_MONTH
    return float(policy.max_hours_per_week)


def violates_max_consecutive(shift: ShiftInstance, committed: Sequence[ShiftInstance], max_days: int) -> bool:
    """True if working ``shift`` would make the run of consecutive worked dates longer than ``max_days``."""
    if not committed:
        return False
    worked = {other.date for other in committed}
    one_day = datetime.timedelta(days=1)

    run = 1
    cursor = shift.date - one_day
    while cursor in worked:
        run += 1
        cursor -= one_day
    cursor = shift.date + one_day
    while cursor in worked:
        run += 1
        cursor += one_day
    return run > max_days


def _interval(shift: ShiftInstance, origin: datetime.date) -> Tuple[float, float]:
    """Absolute [start, end) in hours from midnight of ``origin``; midnight-crossing shifts wrap."""
    offset = (shift.date - origin).days * 24
    start = offset + shift.kind.start_hour
    end = offset + shift.kind.end_hour
    if shift.kind.crosses_midnight:
        end += 24
    return start, end


def violates_rest_time(shift: ShiftInstance, committed: Sequence[ShiftInstance], min_rest_hours: float) -> bool:
    """True if ``shift`` overlaps, or leaves less than ``min_rest_hours`` around, a shift on the same or an adjacent day."""
    start, end = _interval(shift, shift.date)
    for other in committed:
        if abs((other.date - shift.date).days) > 1:
            continue
        other_start, other_end = _interval(other, shift.date)
        if start < other_end and other_start < end:
            return True
        gap = start - other_end if other_end <= start else other_start - end
        if gap < min_rest_hours:
            return True
    return False


def violates_max_hours(shift: ShiftInstance, committed: Sequence[ShiftInstance], hour_cap: float) -> bool:
    return committed_hours(committed) + shift.hours > hour_cap


def violated_constraints(
    shift: ShiftInstance,
    committed: Sequence[ShiftInstance],
    policy: GlobalPolicy,
    hour_cap: float,
) -> List[str]:
    violations: List[str] = []
    if violates_max_consecutive(shift, committed, policy.max_consecutive_shift_days):
        violations.append("consecutive_days")
    if violates_rest_time(shift, committed, policy.min_rest_hours):
        violations.append("rest_time")
    if violates_max_hours(shift, committed, hour_cap):
        violations.append("max_hours")
    return violations


CONSTRAINT_PENALTIES = {
    "consecutive_days": CONSECUTIVE_DAYS_PENALTY,
    "rest_time": REST_TIME_PENALTY,
    "max_hours": MAX_HOURS_PENALTY,
}


def constraint_penalty(
    shift: ShiftInstance,
    committed: Sequence[ShiftInstance],
    policy: GlobalPolicy,
    hour_cap: float,
) -> float:
    """Sum of the fixed penalties for every rule the assignment would break (unscaled)."""
    return float(sum(CONSTRAINT_PENALTIES[name] for name in violated_constraints(shift, committed, policy, hour_cap)))
