"""Order shifts so the hardest to staff are filled first.

Greedy assignment depletes the candidate pool as it goes, so shifts with scarce
skills, tight bounds or critical kinds must be processed before easy ones.
"""

from __future__ import annotations

from typing import List, Sequence

from shift_scheduler.config import (
    KIND_CRITICALITY,
    LOW_FLEXIBILITY_RATIO,
    MONTH_EARLY_DATE_HORIZON,
    MONTH_EARLY_DATE_WEIGHT,
    PRIORITY_LOW_FLEXIBILITY,
    PRIORITY_PER_MINIMUM_STAFF,
    PRIORITY_PER_REQUIRED_SKILL,
    PRIORITY_SKILL_SCARCITY,
    PRIORITY_SMALL_POOL,
    PRIORITY_WEEKEND,
    SKILL_SCARCITY_RATIO,
    SMALL_POOL_RATIO,
    WEEKEND_DAYS,
)
from shift_scheduler.domain.models import GlobalPolicy, PeriodKind, ShiftInstance, StaffMember


def holds_required_skill(staff: StaffMember, shift: ShiftInstance) -> bool:
    return any(skill in staff.skills for skill in shift.required_skills)


def eligible_staff_count(shift: ShiftInstance, active_staff: Sequence[StaffMember], policy: GlobalPolicy) -> int:
    """Staff who could legally work the shift, ignoring hour and rest rules."""
    if policy.require_skill_match and policy.minimum_skills_required and shift.required_skills:
        return sum(1 for staff in active_staff if holds_required_skill(staff, shift))
    return len(active_staff)


def priority_score(
    shift: ShiftInstance,
    active_staff: Sequence[StaffMember],
    policy: GlobalPolicy,
    period_kind: PeriodKind = PeriodKind.WEEKLY,
) -> float:
    score = 0.0

    if shift.required_skills:
        score += PRIORITY_PER_REQUIRED_SKILL * len(shift.required_skills)
        skilled = sum(1 for staff in active_staff if holds_required_skill(staff, shift))
        if skilled < SKILL_SCARCITY_RATIO * shift.minimum_staff:
            score += PRIORITY_SKILL_SCARCITY

    if shift.maximum_staff / max(shift.minimum_staff, 1) < LOW_FLEXIBILITY_RATIO:
        score += PRIORITY_LOW_FLEXIBILITY

    score += KIND_CRITICALITY.get(shift.kind.value, 0)

    if shift.day in WEEKEND_DAYS:
        score += PRIORITY_WEEKEND

    score += PRIORITY_PER_MINIMUM_STAFF * shift.minimum_staff

    if eligible_staff_count(shift, active_staff, policy) < SMALL_POOL_RATIO * shift.minimum_staff:
        score += PRIORITY_SMALL_POOL

    if period_kind is PeriodKind.MONTHLY:
        score += max(0, MONTH_EARLY_DATE_HORIZON - shift.date.day) * MONTH_EARLY_DATE_WEIGHT

    return score


def rank_shifts(
    shifts: Sequence[ShiftInstance],
    active_staff: Sequence[StaffMember],
    policy: GlobalPolicy,
    period_kind: PeriodKind = PeriodKind.WEEKLY,
) -> List[ShiftInstance]:
    """Highest priority first; equal scores keep their input order."""
    scores = [priority_score(shift, active_staff, policy, period_kind) for shift in shifts]
    order = sorted(range(len(shifts)), key=lambda index: -scores[index])
    return [shifts[index] for index in order]
