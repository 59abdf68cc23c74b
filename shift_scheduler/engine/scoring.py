"""Candidate scoring: how good a fit a staff member is for one shift right now."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from shift_scheduler.config import (
    BASE_CANDIDATE_SCORE,
    HOLIDAY_PENALTY,
    MONTHLY_PENALTY_SCALE,
    NO_MATCHING_SKILL_PENALTY,
    NON_PREFERRED_SHIFT_CAP,
    OVER_ASSIGNED_SHIFT_CAP,
    OVER_ASSIGNED_SHIFT_RATE,
    OVER_TARGET_HOURS_CAP,
    OVER_TARGET_HOURS_RATE,
    PREFERRED_DAY_OFF_CAP,
    TIE_BREAK_JITTER,
    UNDER_ASSIGNED_SHIFT_CAP,
    UNDER_ASSIGNED_SHIFT_RATE,
    UNDER_TARGET_HOURS_CAP,
    UNDER_TARGET_HOURS_RATE,
    WEEKLY_PENALTY_SCALE,
    WEEKS_PER_MONTH,
)
from shift_scheduler.domain.models import GlobalPolicy, PeriodKind, ShiftInstance, StaffMember
from shift_scheduler.engine.constraints import committed_hours, constraint_penalty, period_hour_cap


@dataclass
class ScoringContext:
    """Per-run inputs shared by every score computed in one generation call."""

    policy: GlobalPolicy
    period_kind: PeriodKind
    hour_cap: float
    target_hours_scale: float
    mean_shifts_per_staff: float
    rng: random.Random

    @classmethod
    def for_period(
        cls,
        policy: GlobalPolicy,
        period_kind: PeriodKind,
        shift_count: int,
        active_staff_count: int,
        rng: random.Random,
    ) -> "ScoringContext":
        return cls(
            policy=policy,
            period_kind=period_kind,
            hour_cap=period_hour_cap(policy, period_kind),
            target_hours_scale=WEEKS_PER_MONTH if period_kind is PeriodKind.MONTHLY else 1.0,
            mean_shifts_per_staff=shift_count / max(active_staff_count, 1),
            rng=rng,
        )

    @property
    def penalty_scale(self) -> float:
        return MONTHLY_PENALTY_SCALE if self.period_kind is PeriodKind.MONTHLY else WEEKLY_PENALTY_SCALE


def preference_score(staff: StaffMember, shift: ShiftInstance, policy: GlobalPolicy) -> float:
    weights = policy.weights
    preferences = staff.preferences
    score = 0.0

    if shift.kind in preferences.preferred_shifts:
        score += weights.preferred_shift
    elif preferences.preferred_shifts:
        score += max(weights.non_preferred_shift, NON_PREFERRED_SHIFT_CAP)

    if shift.day in preferences.preferred_days_off:
        score += max(weights.preferred_day_off, PREFERRED_DAY_OFF_CAP)

    if shift.required_skills:
        matching = sum(1 for skill in shift.required_skills if skill in staff.skills)
        if matching:
            score += matching * weights.matching_skill
        else:
            score -= NO_MATCHING_SKILL_PENALTY

    if shift.date in preferences.holidays:
        score -= HOLIDAY_PENALTY

    return score


def workload_score(staff: StaffMember, committed: Sequence[ShiftInstance], context: ScoringContext) -> float:
    """Favor staff short of their desired hours and of the average shift count."""
    score = 0.0

    hours = committed_hours(committed)
    target = staff.preferences.desired_hours_per_week * context.target_hours_scale
    if hours < target:
        score += min((target - hours) * UNDER_TARGET_HOURS_RATE, UNDER_TARGET_HOURS_CAP)
    elif hours > target:
        score -= min((hours - target) * OVER_TARGET_HOURS_RATE, OVER_TARGET_HOURS_CAP)

    count = len(committed)
    mean = context.mean_shifts_per_staff
    if count < mean:
        score += min((mean - count) * UNDER_ASSIGNED_SHIFT_RATE, UNDER_ASSIGNED_SHIFT_CAP)
    elif count > mean:
        score -= min((count - mean) * OVER_ASSIGNED_SHIFT_RATE, OVER_ASSIGNED_SHIFT_CAP)

    return score


def score_candidate(
    staff: StaffMember,
    shift: ShiftInstance,
    committed: Sequence[ShiftInstance],
    context: ScoringContext,
) -> float:
    """Score a (staff, shift) pair given the staff member's shifts committed so far this period.

    No floor is applied: negative scores only rank a candidate lower, they
    never disqualify. A small seeded jitter breaks ties between equal fits.
    """
    score = float(BASE_CANDIDATE_SCORE)
    score += preference_score(staff, shift, context.policy)
    score += workload_score(staff, committed, context)
    score -= constraint_penalty(shift, committed, context.policy, context.hour_cap) * context.penalty_scale
    score += context.rng.uniform(0.0, TIE_BREAK_JITTER)
    return score
