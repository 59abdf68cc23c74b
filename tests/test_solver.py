"""
Tests for staff assignment and the weekly/monthly generation entry points.
"""

import datetime
import json
import random

import pytest
from conftest import FIXED_NOW, MONDAY, make_staff, uniform_day_policies

from shift_scheduler.config import DAY_NAMES
from shift_scheduler.domain.models import DayPolicy, GlobalPolicy, PeriodKind, ShiftKind, StaffRequirement
from shift_scheduler.domain.policy import default_day_policies
from shift_scheduler.engine.solver import (
    GenerationCancelled,
    generate_monthly_schedule,
    generate_weekly_schedule,
)
from shift_scheduler.reporting.stats import staff_over_cap


def monday_only(kind, minimum, maximum, skills=()):
    policies = uniform_day_policies([], days=[])
    policies["monday"] = DayPolicy(
        enabled_kinds=(kind,),
        skill_requirements={kind: tuple(skills)},
        staff_requirements={kind: StaffRequirement(minimum, maximum)},
    )
    return policies


def test_single_skilled_staff_fills_matching_shift():
    """Scenario A: the only nurse is assigned to a morning shift requiring nursing."""
    staff = [make_staff("nurse", skills=["nursing"])]
    schedule = generate_weekly_schedule(
        staff, GlobalPolicy(), monday_only(ShiftKind.MORNING, 1, 2, ["nursing"]), MONDAY, now=FIXED_NOW
    )

    shift = schedule.shifts[0]
    assert shift.assigned_staff == ["nurse"]
    assert not shift.is_understaffed
    assert schedule.report.understaffed_shift_ids == []
    assert schedule.report.skill_mismatches == []


def test_missing_skill_is_filled_and_reported():
    """Scenario B: nobody holds the skill, the minimum is still met and the mismatch is visible."""
    staff = [make_staff("a"), make_staff("b"), make_staff("c")]
    schedule = generate_weekly_schedule(
        staff, GlobalPolicy(), monday_only(ShiftKind.NIGHT, 2, 2, ["surgery"]), MONDAY, now=FIXED_NOW
    )

    shift = schedule.shifts[0]
    assert len(shift.assigned_staff) == 2
    assert not shift.is_understaffed
    assert sorted(schedule.report.skill_mismatches) == sorted((shift.id, staff_id) for staff_id in shift.assigned_staff)
    assert schedule.to_dict()["report"]["skillMismatches"]


def test_strict_mode_falls_back_to_emergency_fill():
    """Test that when nobody passes even the relaxed filter, emergency fill still meets the minimum."""
    staff = [make_staff("a"), make_staff("b"), make_staff("c")]
    # An 8h night shift cannot fit under a 4h weekly cap.
    policy = GlobalPolicy(enforce_hard_constraints=True, max_hours_per_week=4)
    schedule = generate_weekly_schedule(
        staff, policy, monday_only(ShiftKind.NIGHT, 2, 2, ["surgery"]), MONDAY, now=FIXED_NOW
    )

    shift = schedule.shifts[0]
    assert shift.assigned_staff == ["a", "b"]
    assert schedule.report.emergency_assignments == [(shift.id, "a"), (shift.id, "b")]
    assert not shift.is_understaffed


def test_strict_mode_relaxes_skills_before_emergency_fill():
    """Test that unqualified staff within the hour, rest and consecutive rules top up a short shift."""
    staff = [make_staff("a"), make_staff("b"), make_staff("c")]
    policy = GlobalPolicy(enforce_hard_constraints=True)
    schedule = generate_weekly_schedule(
        staff, policy, monday_only(ShiftKind.NIGHT, 2, 3, ["surgery"]), MONDAY, now=FIXED_NOW
    )

    shift = schedule.shifts[0]
    assert len(shift.assigned_staff) == 2
    assert schedule.report.emergency_assignments == []
    assert not shift.is_understaffed


def test_strict_mode_keeps_only_qualified_staff_when_minimum_met():
    """Test that hard filtering leaves unqualified staff out once a qualified one covers the minimum."""
    staff = [make_staff("a"), make_staff("nurse", skills=["nursing"]), make_staff("c")]
    strict = GlobalPolicy(enforce_hard_constraints=True)
    policies = monday_only(ShiftKind.MORNING, 1, 3, ["nursing"])

    assert generate_weekly_schedule(staff, strict, policies, MONDAY).shifts[0].assigned_staff == ["nurse"]
    soft = generate_weekly_schedule(staff, GlobalPolicy(), policies, MONDAY).shifts[0].assigned_staff
    assert soft[0] == "nurse"
    assert len(soft) == 3


def test_strict_mode_skips_staff_on_holiday():
    """Test that a requested holiday keeps a staff member off the shift when others can cover it."""
    staff = [make_staff("vac", holidays=[MONDAY]), make_staff("b"), make_staff("c")]
    strict = GlobalPolicy(enforce_hard_constraints=True)
    schedule = generate_weekly_schedule(staff, strict, monday_only(ShiftKind.MORNING, 1, 3), MONDAY, now=FIXED_NOW)

    assert sorted(schedule.shifts[0].assigned_staff) == ["b", "c"]


def test_strict_mode_skips_days_off_and_other_shift_kinds():
    """Test that preferred days off and preferred shift kinds are respected while the minimum is met."""
    staff = [
        make_staff("off", days_off=["monday"]),
        make_staff("nights", preferred_shifts=[ShiftKind.NIGHT]),
        make_staff("open"),
    ]
    strict = GlobalPolicy(enforce_hard_constraints=True)
    schedule = generate_weekly_schedule(staff, strict, monday_only(ShiftKind.MORNING, 1, 3), MONDAY, now=FIXED_NOW)

    assert schedule.shifts[0].assigned_staff == ["open"]


def test_strict_mode_relaxed_pass_only_tops_up_to_minimum():
    """Test that the relaxed pass prefers the milder preference conflict and stops at the minimum."""
    staff = [make_staff("off", days_off=["monday"]), make_staff("nights", preferred_shifts=[ShiftKind.NIGHT])]
    strict = GlobalPolicy(enforce_hard_constraints=True)
    schedule = generate_weekly_schedule(staff, strict, monday_only(ShiftKind.MORNING, 1, 2), MONDAY, now=FIXED_NOW)

    shift = schedule.shifts[0]
    # A non-preferred kind costs 3 points, a preferred day off costs 5.
    assert shift.assigned_staff == ["nights"]
    assert schedule.report.emergency_assignments == []


def test_understaffed_when_roster_too_small():
    """Test that an undersized active roster is reported, not raised."""
    staff = [make_staff("a"), make_staff("b", active=False)]
    schedule = generate_weekly_schedule(staff, GlobalPolicy(), monday_only(ShiftKind.DAY, 2, 3), MONDAY)

    shift = schedule.shifts[0]
    assert shift.assigned_staff == ["a"]
    assert shift.is_understaffed
    assert schedule.report.understaffed_shift_ids == [shift.id]
    assert schedule.report.understaffed_count == 1
    assert "UNDERSTAFFED" in schedule.report.warnings[0]


def test_minimum_always_met_when_roster_is_large_enough():
    """Test the emergency-fill guarantee with exactly enough active staff for the biggest minimum."""
    staff = [make_staff("a"), make_staff("b"), make_staff("x", active=False)]
    schedule = generate_weekly_schedule(staff, GlobalPolicy(), default_day_policies(), MONDAY)

    assert schedule.report.understaffed_shift_ids == []
    assert all(len(shift.assigned_staff) >= shift.minimum_staff for shift in schedule.shifts)


def test_capacity_and_uniqueness_invariants(roster):
    """Test that no shift exceeds its maximum or lists a staff member twice."""
    roster = roster + [make_staff("inactive", active=False)]
    for schedule in (
        generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY),
        generate_monthly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY),
    ):
        for shift in schedule.shifts:
            assert len(shift.assigned_staff) <= shift.maximum_staff
            assert len(set(shift.assigned_staff)) == len(shift.assigned_staff)
            assert "inactive" not in shift.assigned_staff


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_generous_roster_stays_within_hour_cap(roster, seed):
    """Test 12 staff on 21 weekly 8h shifts with a 40h cap: nobody goes over."""
    policies = uniform_day_policies([ShiftKind.MORNING, ShiftKind.AFTERNOON, ShiftKind.NIGHT], minimum=2, maximum=2)
    policy = GlobalPolicy(max_hours_per_week=40)
    schedule = generate_weekly_schedule(roster, policy, policies, MONDAY, seed=seed)

    assert len(schedule.shifts) == 21
    assert staff_over_cap(schedule, roster, policy) == []


def test_same_seed_gives_identical_schedule(roster):
    """Test determinism: identical inputs and seed give identical output."""
    first = generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, seed=11, now=FIXED_NOW)
    second = generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, seed=11, now=FIXED_NOW)

    assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)


def test_injected_rng_matches_seed(roster):
    """Test that passing a seeded generator is equivalent to passing the seed."""
    by_seed = generate_monthly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, seed=5, now=FIXED_NOW)
    by_rng = generate_monthly_schedule(
        roster, GlobalPolicy(), default_day_policies(), MONDAY, rng=random.Random(5), now=FIXED_NOW
    )
    assert by_seed.to_dict() == by_rng.to_dict()


def test_scarce_skill_holder_goes_to_scarce_shift():
    """Test that the only ICU nurse is placed on the ICU shift."""
    staff = [make_staff("icu-nurse", skills=["icu"])] + [make_staff(f"s{index}") for index in range(6)]
    policies = uniform_day_policies([ShiftKind.MORNING], minimum=2, maximum=3, days=DAY_NAMES[:5])
    policies["friday"] = DayPolicy(
        enabled_kinds=(ShiftKind.MORNING,),
        skill_requirements={ShiftKind.MORNING: ("icu",)},
        staff_requirements={ShiftKind.MORNING: StaffRequirement(2, 3)},
    )
    schedule = generate_weekly_schedule(staff, GlobalPolicy(), policies, MONDAY)

    icu_shift = next(shift for shift in schedule.shifts if shift.required_skills)
    assert icu_shift.assigned_staff[0] == "icu-nurse"


def test_preferred_day_off_is_avoided():
    """Scenario D: a Monday-off preference means fewer Monday shifts than other days on average."""
    staff = [make_staff("a", days_off=["monday"]), make_staff("b"), make_staff("c"), make_staff("d")]
    policies = uniform_day_policies([ShiftKind.MORNING], minimum=1, maximum=1)

    monday_count = 0
    other_count = 0
    for seed in range(20):
        schedule = generate_weekly_schedule(staff, GlobalPolicy(), policies, MONDAY, seed=seed)
        for shift in schedule.shifts_for("a"):
            if shift.day == "monday":
                monday_count += 1
            else:
                other_count += 1

    assert monday_count / 20 < other_count / (20 * 6)


def test_monthly_schedule_metadata(roster):
    """Test the monthly schedule id, period fields and shift count for January 2024."""
    schedule = generate_monthly_schedule(
        roster, GlobalPolicy(), default_day_policies(), datetime.date(2024, 1, 17), now=FIXED_NOW
    )

    assert schedule.id == "monthly-schedule-2024-01"
    assert schedule.period_kind is PeriodKind.MONTHLY
    assert schedule.month_start_date == datetime.date(2024, 1, 1)
    assert len(schedule.shifts) == 23 * 3 + 8 * 2
    payload = schedule.to_dict()
    assert payload["scheduleType"] == "monthly"
    assert payload["monthStartDate"] == "2024-01-01"


def test_weekly_schedule_metadata(roster):
    """Test that a new weekly schedule is unpublished and stamped with the injected clock."""
    schedule = generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, now=FIXED_NOW)

    assert schedule.id == "schedule-2024-01-01"
    assert schedule.week_start_date == MONDAY
    assert schedule.month_start_date is None
    assert not schedule.is_published
    assert schedule.created_at == schedule.updated_at == FIXED_NOW
    assert schedule.report.total_assignments == sum(len(shift.assigned_staff) for shift in schedule.shifts)
    assert "monthStartDate" not in schedule.to_dict()


def test_cancel_stops_between_shifts(roster):
    """Test that a cancel callback aborts the run."""
    calls = []

    def cancel():
        calls.append(1)
        return len(calls) > 3

    with pytest.raises(GenerationCancelled):
        generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, cancel=cancel)
    assert len(calls) == 4


def test_missing_day_policy_fails_fast(roster):
    """Test that an incomplete day policy map is rejected."""
    policies = default_day_policies()
    del policies["sunday"]
    with pytest.raises(ValueError, match="sunday"):
        generate_weekly_schedule(roster, GlobalPolicy(), policies, MONDAY)


def test_minimum_above_maximum_fails_fast(roster):
    """Test that inconsistent staffing bounds are rejected."""
    with pytest.raises(ValueError, match="exceeds maximum"):
        generate_weekly_schedule(roster, GlobalPolicy(), monday_only(ShiftKind.MORNING, 3, 2), MONDAY)


def test_duplicate_staff_ids_fail_fast():
    """Test that a roster with repeated ids is rejected."""
    with pytest.raises(ValueError, match="Duplicate staff id"):
        generate_weekly_schedule(
            [make_staff("a"), make_staff("a")], GlobalPolicy(), default_day_policies(), MONDAY
        )


def test_weekly_start_must_be_monday(roster):
    """Test that weekly generation requires a Monday."""
    with pytest.raises(ValueError, match="Monday"):
        generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), datetime.date(2024, 1, 2))


def test_same_seed_without_clock_differs_only_in_timestamps(roster):
    """Test that without an injected clock only createdAt and updatedAt can differ."""
    first = generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, seed=4).to_dict()
    second = generate_weekly_schedule(roster, GlobalPolicy(), default_day_policies(), MONDAY, seed=4).to_dict()
    for payload in (first, second):
        assert payload["createdAt"] == payload["updatedAt"]
        del payload["createdAt"], payload["updatedAt"]
    assert first == second
