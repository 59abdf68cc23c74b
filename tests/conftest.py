"""Shared fixtures and builders for the shift engine tests."""

import datetime

import pytest

from shift_scheduler.config import DAY_NAMES
from shift_scheduler.domain.models import (
    DayPolicy,
    GlobalPolicy,
    ShiftInstance,
    ShiftKind,
    StaffMember,
    StaffPreferences,
    StaffRequirement,
    day_name_for,
)

MONDAY = datetime.date(2024, 1, 1)  # 2024-01-01 is a Monday
FIXED_NOW = datetime.datetime(2024, 1, 1, 8, 0, tzinfo=datetime.timezone.utc)


def make_staff(staff_id, skills=(), active=True, desired_hours=40, preferred_shifts=(), days_off=(), holidays=()):
    return StaffMember(
        id=staff_id,
        name=f"Staff {staff_id}",
        skills=frozenset(skills),
        is_active=active,
        preferences=StaffPreferences(
            desired_hours_per_week=desired_hours,
            preferred_shifts=tuple(preferred_shifts),
            preferred_days_off=frozenset(days_off),
            holidays=frozenset(holidays),
        ),
    )


def make_shift(kind=ShiftKind.MORNING, date=MONDAY, skills=(), minimum=1, maximum=2):
    return ShiftInstance(
        id=f"{date.isoformat()}-{kind.value}",
        kind=kind,
        date=date,
        day=day_name_for(date),
        required_skills=tuple(skills),
        minimum_staff=minimum,
        maximum_staff=maximum,
    )


def uniform_day_policies(kinds, minimum=1, maximum=2, skills=None, days=DAY_NAMES):
    """Every listed day runs ``kinds`` with the same bounds; other days run nothing."""
    skills = skills or {}
    policies = {}
    for day in DAY_NAMES:
        enabled = tuple(kinds) if day in days else ()
        policies[day] = DayPolicy(
            enabled_kinds=enabled,
            skill_requirements={kind: tuple(skills.get(kind, ())) for kind in enabled},
            staff_requirements={kind: StaffRequirement(minimum, maximum) for kind in enabled},
        )
    return policies


@pytest.fixture
def policy():
    return GlobalPolicy()


@pytest.fixture
def roster():
    """Twelve neutral, active staff members."""
    return [make_staff(f"s{index:02d}") for index in range(12)]
