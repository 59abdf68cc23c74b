"""Shared helpers for summarizing generated schedules."""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from shift_scheduler.config import WEEKS_PER_MONTH
from shift_scheduler.domain.models import GlobalPolicy, PeriodKind, Schedule, StaffMember
from shift_scheduler.engine.constraints import period_hour_cap

WORKLOAD_COLUMNS = [
    "staff_id",
    "name",
    "active",
    "shifts",
    "hours",
    "desired_hours",
    "minimum_hours",
    "hour_cap",
    "over_cap",
    "under_minimum",
]

COVERAGE_COLUMNS = ["shift_id", "date", "day", "kind", "assigned", "minimum", "maximum", "understaffed"]


def staff_workload_frame(schedule: Schedule, staff: Sequence[StaffMember], policy: GlobalPolicy) -> pd.DataFrame:
    """
    One row per staff member with committed shifts and hours for the schedule's period.

    Desired and minimum hours are scaled to the period the same way the hour cap is,
    so monthly schedules compare against ~4.33 weeks of hours.
    """
    scale = WEEKS_PER_MONTH if schedule.period_kind is PeriodKind.MONTHLY else 1.0
    hour_cap = period_hour_cap(policy, schedule.period_kind)
    minimum_hours = policy.min_hours_per_week * scale

    rows = []
    for member in staff:
        worked = schedule.shifts_for(member.id)
        hours = sum(shift.hours for shift in worked)
        rows.append(
            {
                "staff_id": member.id,
                "name": member.name,
                "active": member.is_active,
                "shifts": len(worked),
                "hours": float(hours),
                "desired_hours": member.preferences.desired_hours_per_week * scale,
                "minimum_hours": minimum_hours,
                "hour_cap": hour_cap,
                "over_cap": hours > hour_cap,
                "under_minimum": member.is_active and hours < minimum_hours,
            }
        )
    return pd.DataFrame(rows, columns=WORKLOAD_COLUMNS)


def coverage_frame(schedule: Schedule) -> pd.DataFrame:
    rows = [
        {
            "shift_id": shift.id,
            "date": shift.date,
            "day": shift.day,
            "kind": shift.kind.value,
            "assigned": len(shift.assigned_staff),
            "minimum": shift.minimum_staff,
            "maximum": shift.maximum_staff,
            "understaffed": shift.is_understaffed,
        }
        for shift in schedule.shifts
    ]
    return pd.DataFrame(rows, columns=COVERAGE_COLUMNS)


def staff_over_cap(schedule: Schedule, staff: Sequence[StaffMember], policy: GlobalPolicy) -> List[str]:
    frame = staff_workload_frame(schedule, staff, policy)
    return frame.loc[frame["over_cap"], "staff_id"].tolist()


def coverage_by_kind(schedule: Schedule) -> pd.DataFrame:
    """Shift count, assignments and understaffed count per shift kind."""
    frame = coverage_frame(schedule)
    if frame.empty:
        return pd.DataFrame(columns=["kind", "shifts", "assigned", "understaffed"])
    return (
        frame.groupby("kind", sort=True)
        .agg(shifts=("shift_id", "count"), assigned=("assigned", "sum"), understaffed=("understaffed", "sum"))
        .reset_index()
    )
